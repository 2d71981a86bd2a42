from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional

import psycopg2

from domain.errors import EmailAlreadyExists
from domain.models import Player
from domain.repositories import PlayerRepository, check_player_fields


PLAYER_COLUMNS = (
    "id, username, email, password_hash, balance, "
    "total_winnings, total_spins, join_date, is_demo"
)


def row_to_player(row: tuple) -> Player:
    return Player(
        id=str(row[0]).strip(),
        username=row[1],
        email=row[2],
        password_hash=row[3],
        balance=int(row[4]),
        total_winnings=int(row[5]),
        total_spins=int(row[6]),
        join_date=row[7],
        is_demo=bool(row[8]),
    )


@contextmanager
def connect(db_params: dict) -> Iterator["psycopg2.extensions.connection"]:
    """Open a connection that commits (or rolls back) and closes on exit."""

    conn = psycopg2.connect(**db_params)
    try:
        with conn:
            yield conn
    finally:
        conn.close()


class PostgresPlayerRepository(PlayerRepository):
    """
    Postgres-backed implementation of `PlayerRepository`.

    Mirrors `SqlitePlayerRepository`; `join_date` is stored as TIMESTAMPTZ
    and comes back from psycopg2 as an aware datetime.
    """

    def __init__(self, db_params: dict) -> None:
        self._db_params = db_params
        self._ensure_table()

    def _ensure_table(self) -> None:
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS players (
                        id TEXT PRIMARY KEY,
                        username TEXT NOT NULL,
                        email TEXT NOT NULL UNIQUE,
                        password_hash TEXT NOT NULL,
                        balance BIGINT NOT NULL DEFAULT 0,
                        total_winnings BIGINT NOT NULL DEFAULT 0,
                        total_spins BIGINT NOT NULL DEFAULT 0,
                        join_date TIMESTAMPTZ NOT NULL,
                        is_demo BOOLEAN NOT NULL DEFAULT FALSE
                    )
                    """
                )

    def get_player(self, player_id: str) -> Optional[Player]:
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute(f"SELECT {PLAYER_COLUMNS} FROM players WHERE id = %s", (player_id,))
                row = cur.fetchone()
                if not row:
                    return None
                return row_to_player(row)

    def get_by_email(self, email: str) -> Optional[Player]:
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute(f"SELECT {PLAYER_COLUMNS} FROM players WHERE email = %s", (email,))
                row = cur.fetchone()
                if not row:
                    return None
                return row_to_player(row)

    def get_all_players(self) -> List[Player]:
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute(f"SELECT {PLAYER_COLUMNS} FROM players")
                return [row_to_player(row) for row in cur.fetchall()]

    def add_player(self, player: Player) -> None:
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO players (
                        id, username, email, password_hash, balance,
                        total_winnings, total_spins, join_date, is_demo
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (email) DO NOTHING
                    """,
                    (
                        player.id,
                        player.username,
                        player.email,
                        player.password_hash,
                        player.balance,
                        player.total_winnings,
                        player.total_spins,
                        player.join_date,
                        player.is_demo,
                    ),
                )
                if cur.rowcount == 0:
                    raise EmailAlreadyExists(player.email)

    def update_player(self, player_id: str, **fields) -> Optional[Player]:
        check_player_fields(fields)
        if not fields:
            return self.get_player(player_id)

        assignments = ", ".join(f"{name} = %s" for name in fields)
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"UPDATE players SET {assignments} WHERE id = %s RETURNING {PLAYER_COLUMNS}",
                    (*fields.values(), player_id),
                )
                row = cur.fetchone()
                if not row:
                    return None
                return row_to_player(row)
