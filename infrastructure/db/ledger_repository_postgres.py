from __future__ import annotations

from typing import List, Optional, Sequence

from domain.models import (
    TRANSACTION_LOG_LIMIT,
    Player,
    PlayerUpdate,
    Transaction,
    TransactionKind,
)
from domain.repositories import LedgerRepository
from infrastructure.db.player_repository_postgres import PLAYER_COLUMNS, connect, row_to_player
from infrastructure.db.serialization import decode_details, encode_details


TRANSACTION_COLUMNS = "id, player_id, kind, amount, game, timestamp, details"


class PostgresLedgerRepository(LedgerRepository):
    """
    Postgres-backed transaction log.

    Same contract as `SqliteLedgerRepository`. The player row is locked
    with SELECT ... FOR UPDATE while a spin is settled, so settlements
    from other processes cannot interleave with it.
    """

    def __init__(self, db_params: dict, limit: int = TRANSACTION_LOG_LIMIT) -> None:
        self._db_params = db_params
        self._limit = limit
        self._ensure_table()

    def _ensure_table(self) -> None:
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS transactions (
                        seq BIGSERIAL PRIMARY KEY,
                        id TEXT NOT NULL UNIQUE,
                        player_id TEXT NOT NULL,
                        kind TEXT NOT NULL,
                        amount BIGINT NOT NULL,
                        game TEXT NOT NULL,
                        timestamp TIMESTAMPTZ NOT NULL,
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
            timestamp=row[5],
            details=decode_details(row[6]),
        )

    @staticmethod
    def _insert(cur, transaction: Transaction) -> None:
        cur.execute(
            f"""
            INSERT INTO transactions ({TRANSACTION_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            (
                transaction.id,
                transaction.player_id,
                transaction.kind.value,
                transaction.amount,
                transaction.game,
                transaction.timestamp,
                encode_details(transaction.details),
            ),
        )

    def _truncate(self, cur) -> None:
        cur.execute(
            """
            DELETE FROM transactions
            WHERE seq NOT IN (
                SELECT seq FROM transactions ORDER BY seq DESC LIMIT %s
            )
            """,
            (self._limit,),
        )

    def list_transactions(self) -> List[Transaction]:
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute(f"SELECT {TRANSACTION_COLUMNS} FROM transactions ORDER BY seq DESC")
                return [self._to_domain(row) for row in cur.fetchall()]

    def list_for_player(self, player_id: str) -> List[Transaction]:
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {TRANSACTION_COLUMNS}
                    FROM transactions
                    WHERE player_id = %s
                    ORDER BY seq DESC
                    """,
                    (player_id,),
                )
                return [self._to_domain(row) for row in cur.fetchall()]

    def append_transaction(self, transaction: Transaction) -> None:
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                self._insert(cur, transaction)
                self._truncate(cur)

    def record_spin(
        self,
        player_id: str,
        update: PlayerUpdate,
        transactions: Sequence[Transaction],
    ) -> Optional[Player]:
        with connect(self._db_params) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT id FROM players WHERE id = %s FOR UPDATE", (player_id,))
                if cur.fetchone() is None:
                    return None

                for transaction in transactions:
                    self._insert(cur, transaction)
                self._truncate(cur)

                cur.execute(
                    f"""
                    UPDATE players
                    SET balance = %s, total_winnings = %s, total_spins = %s
                    WHERE id = %s
                    RETURNING {PLAYER_COLUMNS}
                    """,
                    (update.balance, update.total_winnings, update.total_spins, player_id),
                )
                return row_to_player(cur.fetchone())
