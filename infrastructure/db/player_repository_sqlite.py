from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from domain.errors import EmailAlreadyExists
from domain.models import Player
from domain.repositories import PlayerRepository, check_player_fields


PLAYER_COLUMNS = (
    "id, username, email, password_hash, balance, "
    "total_winnings, total_spins, join_date, is_demo"
)


def row_to_player(row: tuple) -> Player:
    return Player(
        id=str(row[0]),
        username=row[1],
        email=row[2],
        password_hash=row[3],
        balance=int(row[4]),
        total_winnings=int(row[5]),
        total_spins=int(row[6]),
        join_date=datetime.fromisoformat(row[7]),
        is_demo=bool(row[8]),
    )


@contextmanager
def connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """Open a connection whose work is committed (or rolled back) and closed on exit."""

    conn = sqlite3.connect(db_path)
    try:
        with conn:
            yield conn
    finally:
        conn.close()


class SqlitePlayerRepository(PlayerRepository):
    """
    SQLite-backed implementation of `PlayerRepository`.

    This repository owns the `players` table and maps rows to the `Player`
    domain model. It is self-initialising: the table is created if needed.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_table()

    def _ensure_table(self) -> None:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS players (
                    id TEXT PRIMARY KEY,
                    username TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    balance INTEGER NOT NULL DEFAULT 0,
                    total_winnings INTEGER NOT NULL DEFAULT 0,
                    total_spins INTEGER NOT NULL DEFAULT 0,
                    join_date TEXT NOT NULL,
                    is_demo INTEGER NOT NULL DEFAULT 0
                )
                """
            )

    def get_player(self, player_id: str) -> Optional[Player]:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {PLAYER_COLUMNS} FROM players WHERE id = ?", (player_id,))
            row = cur.fetchone()
            if not row:
                return None
            return row_to_player(row)

    def get_by_email(self, email: str) -> Optional[Player]:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {PLAYER_COLUMNS} FROM players WHERE email = ?", (email,))
            row = cur.fetchone()
            if not row:
                return None
            return row_to_player(row)

    def get_all_players(self) -> List[Player]:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {PLAYER_COLUMNS} FROM players")
            return [row_to_player(row) for row in cur.fetchall()]

    def add_player(self, player: Player) -> None:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO players (
                    id, username, email, password_hash, balance,
                    total_winnings, total_spins, join_date, is_demo
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
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
                    player.join_date.isoformat(),
                    int(player.is_demo),
                ),
            )
            if cur.rowcount == 0:
                raise EmailAlreadyExists(player.email)

    def update_player(self, player_id: str, **fields) -> Optional[Player]:
        check_player_fields(fields)
        if not fields:
            return self.get_player(player_id)

        # Column names come from the whitelist above, never from user input.
        assignments = ", ".join(f"{name} = ?" for name in fields)
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(
                f"UPDATE players SET {assignments} WHERE id = ?",
                (*fields.values(), player_id),
            )
            if cur.rowcount == 0:
                return None
            cur.execute(f"SELECT {PLAYER_COLUMNS} FROM players WHERE id = ?", (player_id,))
            return row_to_player(cur.fetchone())
