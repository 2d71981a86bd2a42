from __future__ import annotations

import threading
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from domain.errors import EmailAlreadyExists
from domain.models import TRANSACTION_LOG_LIMIT, Player, PlayerUpdate, Transaction
from domain.repositories import LedgerRepository, PlayerRepository, check_player_fields


class InMemoryPlayerRepository(PlayerRepository):
    """
    Process-local player store.

    Used for demo players, which are not meant to outlive the bot. Players
    are copied on the way in and out so callers cannot mutate stored state.
    Demo players all share one email, so the demo store is built with
    `unique_emails=False`.
    """

    def __init__(self, unique_emails: bool = True) -> None:
        self._players: Dict[str, Player] = {}
        self._unique_emails = unique_emails
        self._lock = threading.RLock()

    def get_player(self, player_id: str) -> Optional[Player]:
        with self._lock:
            player = self._players.get(player_id)
            return replace(player) if player is not None else None

    def get_by_email(self, email: str) -> Optional[Player]:
        with self._lock:
            for player in self._players.values():
                if player.email == email:
                    return replace(player)
            return None

    def get_all_players(self) -> List[Player]:
        with self._lock:
            return [replace(p) for p in self._players.values()]

    def add_player(self, player: Player) -> None:
        with self._lock:
            if player.id in self._players:
                raise ValueError(f"Player {player.id} already exists")
            if self._unique_emails and any(
                p.email == player.email for p in self._players.values()
            ):
                raise EmailAlreadyExists(player.email)
            self._players[player.id] = replace(player)

    def update_player(self, player_id: str, **fields) -> Optional[Player]:
        check_player_fields(fields)
        with self._lock:
            player = self._players.get(player_id)
            if player is None:
                return None
            updated = replace(player, **fields)
            self._players[player_id] = updated
            return replace(updated)


class InMemoryLedgerRepository(LedgerRepository):
    """Process-local transaction log bound to an `InMemoryPlayerRepository`."""

    def __init__(
        self,
        players: InMemoryPlayerRepository,
        limit: int = TRANSACTION_LOG_LIMIT,
    ) -> None:
        self._players = players
        self._limit = limit
        self._transactions: List[Transaction] = []
        self._lock = threading.RLock()

    def list_transactions(self) -> List[Transaction]:
        with self._lock:
            return list(self._transactions)

    def list_for_player(self, player_id: str) -> List[Transaction]:
        with self._lock:
            return [tx for tx in self._transactions if tx.player_id == player_id]

    def append_transaction(self, transaction: Transaction) -> None:
        with self._lock:
            self._transactions.insert(0, transaction)
            del self._transactions[self._limit:]

    def record_spin(
        self,
        player_id: str,
        update: PlayerUpdate,
        transactions: Sequence[Transaction],
    ) -> Optional[Player]:
        with self._lock:
            if self._players.get_player(player_id) is None:
                return None
            for transaction in transactions:
                self.append_transaction(transaction)
            return self._players.update_player(
                player_id,
                balance=update.balance,
                total_winnings=update.total_winnings,
                total_spins=update.total_spins,
            )
