from __future__ import annotations

from typing import Optional

from domain.repositories import IdentityRepository
from infrastructure.db.player_repository_postgres import connect


class PostgresIdentityRepository(IdentityRepository):
    """
    Postgres-backed implementation of `IdentityRepository`.

    It uses a dedicated `player_identities` table to map external identities
    (provider + provider_user_id) to the player they are logged in as.
    """

    def __init__(self, db_params: dict) -> None:
        self._db_params = db_params
        self._ensure_table()

    def _ensure_table(self) -> None:
        """
        Ensure that the `player_identities` table exists.

        Schema (minimal):
          - provider TEXT
          - provider_user_id TEXT
          - player_id TEXT  -- matches `players.id`, or a demo player id
        """

        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
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
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT player_id
                    FROM player_identities
                    WHERE provider = %s AND provider_user_id = %s
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
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO player_identities (provider, provider_user_id, player_id)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (provider, provider_user_id)
                    DO UPDATE SET player_id = EXCLUDED.player_id
                    """,
                    (provider, provider_user_id, player_id),
                )

    def clear_external_identity(
        self,
        provider: str,
        provider_user_id: str,
    ) -> None:
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    DELETE FROM player_identities
                    WHERE provider = %s AND provider_user_id = %s
                    """,
                    (provider, provider_user_id),
                )
