from __future__ import annotations

from typing import Optional

from .catalog import MachineCatalog
from .errors import BetOutOfRange, InsufficientBalance, MachineNotFound, NotAuthenticated
from .models import Machine, Player, SpinResult
from .paylines import evaluate_grid
from .reels import ReelGenerator


class SpinEngine:
    """
    Validates a bet and produces a `SpinResult`.

    The engine never touches balances or the transaction log; settling a
    result is the ledger's job.
    """

    def __init__(self, catalog: MachineCatalog, reels: ReelGenerator) -> None:
        self.catalog = catalog
        self.reels = reels

    def check_bet(self, player: Optional[Player], machine_id: str, bet: int) -> Machine:
        """
        Run the pre-spin checks in order and return the machine.

        Order: authenticated, affordable, known machine, within limits.
        """

        if player is None:
            raise NotAuthenticated()
        if player.balance < bet:
            raise InsufficientBalance(player.balance, bet)

        machine = self.catalog.get(machine_id)
        if machine is None:
            raise MachineNotFound(machine_id)
        if bet < machine.min_bet or bet > machine.max_bet:
            raise BetOutOfRange(machine.min_bet, machine.max_bet)
        return machine

    def play(self, machine: Machine, bet: int) -> SpinResult:
        grid = self.reels.generate(machine.symbols)
        evaluation = evaluate_grid(grid, machine.payouts, bet)
        return SpinResult(
            symbols=grid,
            winning_lines=evaluation.winning_lines,
            payout=evaluation.payout,
            is_jackpot=evaluation.is_jackpot,
        )

    def spin(self, player: Optional[Player], machine_id: str, bet: int) -> SpinResult:
        machine = self.check_bet(player, machine_id, bet)
        return self.play(machine, bet)
