from __future__ import annotations

from typing import Optional

from domain.repositories import IdentityRepository
from infrastructure.db.player_repository_sqlite import connect


class SqliteIdentityRepository(IdentityRepository):
    """
    SQLite-backed implementation of `IdentityRepository`.

    Stores login sessions as mappings from (provider, provider_user_id) to
    internal player IDs in a `player_identities` table.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_table()

    def _ensure_table(self) -> None:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS player_identities (
                    provider TEXT NOT NULL,
                    provider_user_id TEXT NOT NULL,
                    player_id TEXT NOT NULL,
                    PRIMARY KEY (provider, provider_user_id)
                )
                """
            )

    def find_player_id(
        self,
        provider: str,
        provider_user_id: str,
    ) -> Optional[str]:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT player_id
                FROM player_identities
                WHERE provider = ? AND provider_user_id = ?
                """,
                (provider, provider_user_id),
            )
            row = cur.fetchone()
            if not row:
                return None
            return str(row[0])

    def set_external_identity(
        self,
        provider: str,
        provider_user_id: str,
        player_id: str,
    ) -> None:
        """
        Upsert a mapping from external identity to internal player ID.
        """

        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO player_identities (provider, provider_user_id, player_id)
                VALUES (?, ?, ?)
                ON CONFLICT (provider, provider_user_id)
                DO UPDATE SET player_id = excluded.player_id
                """,
                (provider, provider_user_id, player_id),
            )

    def clear_external_identity(
        self,
        provider: str,
        provider_user_id: str,
    ) -> None:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(
                """
                DELETE FROM player_identities
                WHERE provider = ? AND provider_user_id = ?
                """,
                (provider, provider_user_id),
            )
