from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import List, Optional, Sequence

from domain.models import (
    TRANSACTION_LOG_LIMIT,
    Player,
    PlayerUpdate,
    Transaction,
    TransactionKind,
)
from domain.repositories import LedgerRepository
from infrastructure.db.player_repository_sqlite import PLAYER_COLUMNS, connect, row_to_player
from infrastructure.db.serialization import decode_details, encode_details


TRANSACTION_COLUMNS = "id, player_id, kind, amount, game, timestamp, details"


class SqliteLedgerRepository(LedgerRepository):
    """
    SQLite-backed transaction log.

    Owns the `transactions` table. `seq` records insertion order, which is
    what "newest first" means; ids are opaque. Settling a spin also writes
    to the `players` table created by `SqlitePlayerRepository`, on the same
    connection, so both land in one SQLite transaction.
    """

    def __init__(self, db_path: str, limit: int = TRANSACTION_LOG_LIMIT) -> None:
        self._db_path = db_path
        self._limit = limit
        self._ensure_table()

    def _ensure_table(self) -> None:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS transactions (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    player_id TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    amount INTEGER NOT NULL,
                    game TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    details TEXT
                )
                """
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_transactions_player ON transactions (player_id)"
            )

    @staticmethod
    def _to_domain(row: tuple) -> Transaction:
        return Transaction(
            id=str(row[0]),
            player_id=str(row[1]),
            kind=TransactionKind(row[2]),
            amount=int(row[3]),
            game=row[4],
            timestamp=datetime.fromisoformat(row[5]),
            details=decode_details(row[6]),
        )

    def _insert(self, cur: sqlite3.Cursor, transaction: Transaction) -> None:
        cur.execute(
            f"""
            INSERT INTO transactions ({TRANSACTION_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                transaction.id,
                transaction.player_id,
                transaction.kind.value,
                transaction.amount,
                transaction.game,
                transaction.timestamp.isoformat(),
                encode_details(transaction.details),
            ),
        )

    def _truncate(self, cur: sqlite3.Cursor) -> None:
        cur.execute(
            """
            DELETE FROM transactions
            WHERE seq NOT IN (
                SELECT seq FROM transactions ORDER BY seq DESC LIMIT ?
            )
            """,
            (self._limit,),
        )

    def list_transactions(self) -> List[Transaction]:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(f"SELECT {TRANSACTION_COLUMNS} FROM transactions ORDER BY seq DESC")
            return [self._to_domain(row) for row in cur.fetchall()]

    def list_for_player(self, player_id: str) -> List[Transaction]:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                SELECT {TRANSACTION_COLUMNS}
                FROM transactions
                WHERE player_id = ?
                ORDER BY seq DESC
                """,
                (player_id,),
            )
            return [self._to_domain(row) for row in cur.fetchall()]

    def append_transaction(self, transaction: Transaction) -> None:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            self._insert(cur, transaction)
            self._truncate(cur)

    def record_spin(
        self,
        player_id: str,
        update: PlayerUpdate,
        transactions: Sequence[Transaction],
    ) -> Optional[Player]:
        with connect(self._db_path) as conn:
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE players
                SET balance = ?, total_winnings = ?, total_spins = ?
                WHERE id = ?
                """,
                (update.balance, update.total_winnings, update.total_spins, player_id),
            )
            if cur.rowcount == 0:
                return None

            for transaction in transactions:
                self._insert(cur, transaction)
            self._truncate(cur)

            cur.execute(f"SELECT {PLAYER_COLUMNS} FROM players WHERE id = ?", (player_id,))
            return row_to_player(cur.fetchone())
