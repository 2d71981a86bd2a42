from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

from domain.models import (
    Machine,
    Player,
    PlayerUpdate,
    SpinDetails,
    SpinResult,
    Transaction,
    TransactionKind,
)
from domain.repositories import LedgerRepository


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_transaction_id() -> str:
    return uuid.uuid4().hex


class Ledger:
    """
    Applies the financial effect of a spin.

    Every settled spin writes a `spin` debit for the bet and, when
    something was won, a `win` credit for the payout. The player's
    balance and totals are updated once per spin in the same storage
    transaction as the appends.
    """

    def __init__(
        self,
        repository: LedgerRepository,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_transaction_id,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._id_factory = id_factory

    def build_transactions(
        self,
        player: Player,
        machine: Machine,
        bet: int,
        result: SpinResult,
    ) -> List[Transaction]:
        timestamp = self._clock()
        details = SpinDetails(machine_id=machine.id, spin_result=result)

        transactions = [
            Transaction(
                id=self._id_factory(),
                player_id=player.id,
                kind=TransactionKind.SPIN,
                amount=-bet,
                game=machine.name,
                timestamp=timestamp,
                details=details,
            )
        ]
        if result.payout > 0:
            transactions.append(
                Transaction(
                    id=self._id_factory(),
                    player_id=player.id,
                    kind=TransactionKind.WIN,
                    amount=result.payout,
                    game=machine.name,
                    timestamp=timestamp,
                    details=details,
                )
            )
        return transactions

    @staticmethod
    def compute_update(player: Player, bet: int, result: SpinResult) -> PlayerUpdate:
        payout = result.payout or 0
        return PlayerUpdate(
            balance=player.balance - bet + payout,
            total_winnings=player.total_winnings + payout,
            total_spins=player.total_spins + 1,
        )

    def settle(
        self,
        player: Player,
        machine: Machine,
        bet: int,
        result: SpinResult,
    ) -> Optional[Player]:
        """
        Record `result` against `player`.

        Returns the updated player, or None if the player vanished from
        storage before the write (in which case nothing was written).
        """

        transactions = self.build_transactions(player, machine, bet, result)
        update = self.compute_update(player, bet, result)

        updated = self._repository.record_spin(player.id, update, transactions)
        if updated is None:
            logger.warning("Player %s disappeared before spin could be settled", player.id)
            return None

        logger.info(
            "Spin settled: player=%s machine=%s bet=%d payout=%d jackpot=%s balance=%d",
            player.id,
            machine.id,
            bet,
            result.payout,
            result.is_jackpot,
            updated.balance,
        )
        return updated
