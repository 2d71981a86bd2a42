from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from .models import Player, PlayerUpdate, Transaction


class PlayerRepository(Protocol):
    """
    Abstraction over player persistence.

    Implementations are responsible for:
    - Mapping between stored rows and the `Player` domain model.
    - Hiding any SQL / driver details from the application layer.
    """

    def get_player(self, player_id: str) -> Optional[Player]:
        """Return the player with the given internal ID, or None if not found."""

        ...

    def get_by_email(self, email: str) -> Optional[Player]:
        ...

    def get_all_players(self) -> List[Player]:
        ...

    def add_player(self, player: Player) -> None:
        """
        Persist a new player.

        Raises `EmailAlreadyExists` if the store enforces unique emails and
        another player already has this one.
        """

        ...

    def update_player(self, player_id: str, **fields) -> Optional[Player]:
        """
        Overwrite the given fields of a player and return the stored result.

        Returns None when the player does not exist.
        """

        ...


class LedgerRepository(Protocol):
    """
    The transaction log plus the one write that settles a spin.

    The log is shared by all players, ordered newest first and capped at
    `TRANSACTION_LOG_LIMIT` entries; appending past the cap drops the
    oldest entries.
    """

    def list_transactions(self) -> List[Transaction]:
        """Return the whole log, newest first."""

        ...

    def list_for_player(self, player_id: str) -> List[Transaction]:
        ...

    def append_transaction(self, transaction: Transaction) -> None:
        ...

    def record_spin(
        self,
        player_id: str,
        update: PlayerUpdate,
        transactions: Sequence[Transaction],
    ) -> Optional[Player]:
        """
        Append `transactions` (in order) and apply `update` to the player
        as a single unit: either both happen or neither does.

        Returns the updated player, or None (and writes nothing) if the
        player no longer exists.
        """

        ...


class IdentityRepository(Protocol):
    """
    Maps external identities (Telegram/Discord) to logged-in player IDs.

    A mapping exists only while the external user is logged in, so this
    is also where "who is the current player" is answered.
    """

    def find_player_id(
        self,
        provider: str,
        provider_user_id: str,
    ) -> Optional[str]:
        ...

    def set_external_identity(
        self,
        provider: str,
        provider_user_id: str,
        player_id: str,
    ) -> None:
        """Associate an external identity with an internal player ID (login)."""

        ...

    def clear_external_identity(
        self,
        provider: str,
        provider_user_id: str,
    ) -> None:
        """Remove any mapping for the given external identity (logout)."""

        ...


# Columns `PlayerRepository.update_player` may overwrite.
UPDATABLE_PLAYER_FIELDS = frozenset(
    {"username", "email", "password_hash", "balance", "total_winnings", "total_spins"}
)


def check_player_fields(fields: dict) -> None:
    unknown = set(fields) - UPDATABLE_PLAYER_FIELDS
    if unknown:
        raise ValueError(f"Cannot update player fields: {', '.join(sorted(unknown))}")
