from __future__ import annotations


class CasinoError(Exception):
    """Base class for errors that are shown to the player as-is."""


class NotAuthenticated(CasinoError):
    def __init__(self) -> None:
        super().__init__("Not authenticated")


class InsufficientBalance(CasinoError):
    def __init__(self, balance: int, bet: int) -> None:
        super().__init__("Insufficient balance")
        self.balance = balance
        self.bet = bet


class MachineNotFound(CasinoError):
    def __init__(self, machine_id: str) -> None:
        super().__init__("Machine not found")
        self.machine_id = machine_id


class BetOutOfRange(CasinoError):
    def __init__(self, min_bet: int, max_bet: int) -> None:
        super().__init__(f"Bet must be between {min_bet} and {max_bet}")
        self.min_bet = min_bet
        self.max_bet = max_bet


class EmailAlreadyExists(CasinoError):
    def __init__(self, email: str) -> None:
        super().__init__("Email already exists")
        self.email = email


class InvalidMachineConfig(ValueError):
    """Raised when a machine definition or catalog file is malformed."""
