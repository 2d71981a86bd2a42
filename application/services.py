from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from passlib.hash import pbkdf2_sha256

from application.ledger import Ledger
from application.locks import PlayerLocks
from application.stats import (
    build_leaderboard,
    build_player_stats,
    filter_transactions,
    player_rank,
)
from domain.engine import SpinEngine
from domain.errors import CasinoError, EmailAlreadyExists, NotAuthenticated
from domain.models import (
    LeaderboardEntry,
    Machine,
    Player,
    PlayerStats,
    SpinResult,
    Transaction,
    TransactionKind,
)
from domain.repositories import IdentityRepository, LedgerRepository, PlayerRepository


logger = logging.getLogger(__name__)

STARTING_BALANCE = 500
DEMO_BALANCE = 1000
DEMO_EMAIL = "demo@casino.com"
DEMO_USERNAME = "DemoPlayer"
DEMO_ID_PREFIX = "demo:"
MIN_PASSWORD_LENGTH = 6


@dataclass
class ExternalContext:
    """
    Information about the caller from a particular channel (Telegram, Discord).

    The application layer never depends on concrete SDK types; it only sees
    this small context object.
    """

    provider: str
    provider_user_id: str
    first_name: str
    last_name: str


@dataclass
class Stores:
    """
    The persistence collaborators a service call may touch.

    Demo players and their transactions live in the `demo_*` stores, which
    are not expected to survive a restart.
    """

    players: PlayerRepository
    ledger: LedgerRepository
    identities: IdentityRepository
    demo_players: PlayerRepository
    demo_ledger: LedgerRepository

    def players_for(self, player_id: str) -> PlayerRepository:
        return self.demo_players if is_demo_id(player_id) else self.players

    def ledger_for(self, player_id: str) -> LedgerRepository:
        return self.demo_ledger if is_demo_id(player_id) else self.ledger


@dataclass
class OperationResult:
    """Generic result type for simple operations."""

    success: bool
    error_message: Optional[str] = None


@dataclass
class AuthResult:
    success: bool
    error_message: Optional[str] = None
    player: Optional[Player] = None


@dataclass
class SpinOutcome:
    """Result of playing one spin, including the settled player state."""

    success: bool
    error_message: Optional[str] = None
    machine: Optional[Machine] = None
    result: Optional[SpinResult] = None
    player: Optional[Player] = None


@dataclass
class HistoryResult:
    success: bool
    error_message: Optional[str] = None
    transactions: List[Transaction] = field(default_factory=list)


@dataclass
class StatsResult:
    success: bool
    error_message: Optional[str] = None
    player: Optional[Player] = None
    stats: Optional[PlayerStats] = None
    rank: Optional[int] = None


def is_demo_id(player_id: str) -> bool:
    return player_id.startswith(DEMO_ID_PREFIX)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_demo_id(external_ctx: ExternalContext) -> str:
    return (
        f"{DEMO_ID_PREFIX}{external_ctx.provider}:"
        f"{external_ctx.provider_user_id}:{uuid.uuid4().hex}"
    )


def _validate_registration(email: str, username: str, password: str) -> Optional[str]:
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        return "Please enter a valid email address."
    if not username:
        return "Username must not be empty."
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
    return None


def get_current_player(
    external_ctx: ExternalContext,
    stores: Stores,
) -> Optional[Player]:
    """Return the player the external identity is logged in as, if any."""

    player_id = stores.identities.find_player_id(
        external_ctx.provider,
        external_ctx.provider_user_id,
    )
    if player_id is None:
        return None
    return stores.players_for(player_id).get_player(player_id)


def register(
    external_ctx: ExternalContext,
    email: str,
    username: str,
    password: str,
    stores: Stores,
    starting_balance: int = STARTING_BALANCE,
) -> AuthResult:
    """
    Create a persistent player and log the caller in as them.

    Emails are unique (case-insensitive); the demo email is reserved.
    """

    email = email.strip().lower()
    username = username.strip()

    error = _validate_registration(email, username, password)
    if error:
        return AuthResult(success=False, error_message=error)

    if email == DEMO_EMAIL or stores.players.get_by_email(email) is not None:
        return AuthResult(success=False, error_message="Email already exists")

    player = Player(
        id=uuid.uuid4().hex,
        username=username,
        email=email,
        password_hash=pbkdf2_sha256.hash(password),
        balance=starting_balance,
        total_winnings=0,
        total_spins=0,
        join_date=_utcnow(),
        is_demo=False,
    )
    try:
        stores.players.add_player(player)
    except EmailAlreadyExists as exc:
        return AuthResult(success=False, error_message=str(exc))

    stores.identities.set_external_identity(
        external_ctx.provider,
        external_ctx.provider_user_id,
        player.id,
    )
    logger.info("Registered player %s (%s)", player.id, username)
    return AuthResult(success=True, player=player)


def login(
    external_ctx: ExternalContext,
    email: str,
    password: str,
    stores: Stores,
    demo_balance: int = DEMO_BALANCE,
) -> AuthResult:
    email = email.strip().lower()
    if email == DEMO_EMAIL:
        return login_demo(external_ctx, stores, demo_balance)

    player = stores.players.get_by_email(email)
    if player is None or not pbkdf2_sha256.verify(password, player.password_hash):
        return AuthResult(success=False, error_message="Invalid credentials")

    stores.identities.set_external_identity(
        external_ctx.provider,
        external_ctx.provider_user_id,
        player.id,
    )
    logger.info("Player %s logged in via %s", player.id, external_ctx.provider)
    return AuthResult(success=True, player=player)


def login_demo(
    external_ctx: ExternalContext,
    stores: Stores,
    demo_balance: int = DEMO_BALANCE,
) -> AuthResult:
    """
    Log the caller in as a fresh demo player.

    Every demo login starts over with `demo_balance` and an empty history.
    Earlier demo players stay in the in-memory stores, so their wins still
    count on the leaderboard until the process exits.
    """

    player = Player(
        id=_new_demo_id(external_ctx),
        username=DEMO_USERNAME,
        email=DEMO_EMAIL,
        password_hash="",
        balance=demo_balance,
        total_winnings=0,
        total_spins=0,
        join_date=_utcnow(),
        is_demo=True,
    )
    stores.demo_players.add_player(player)

    stores.identities.set_external_identity(
        external_ctx.provider,
        external_ctx.provider_user_id,
        player.id,
    )
    return AuthResult(success=True, player=player)


def logout(external_ctx: ExternalContext, stores: Stores) -> OperationResult:
    if get_current_player(external_ctx, stores) is None:
        return OperationResult(success=False, error_message="You are not logged in.")

    stores.identities.clear_external_identity(
        external_ctx.provider,
        external_ctx.provider_user_id,
    )
    return OperationResult(success=True)


def list_machines(engine: SpinEngine) -> List[Machine]:
    return list(engine.catalog)


def get_machine(engine: SpinEngine, machine_id: str) -> Optional[Machine]:
    return engine.catalog.get(machine_id)


def play_slot(
    external_ctx: ExternalContext,
    machine_id: str,
    bet: int,
    engine: SpinEngine,
    stores: Stores,
    locks: PlayerLocks,
) -> SpinOutcome:
    """
    Spin `machine_id` for `bet` on behalf of the current player.

    The read of the player, the pre-spin checks and the settlement happen
    under the player's lock. A failed check leaves the player and the
    transaction log untouched.
    """

    player_id = stores.identities.find_player_id(
        external_ctx.provider,
        external_ctx.provider_user_id,
    )
    if player_id is None:
        return SpinOutcome(success=False, error_message=str(NotAuthenticated()))

    with locks.hold(player_id):
        try:
            player = stores.players_for(player_id).get_player(player_id)
            machine = engine.check_bet(player, machine_id, bet)
            result = engine.play(machine, bet)

            updated = Ledger(stores.ledger_for(player_id)).settle(player, machine, bet, result)
            if updated is None:
                raise NotAuthenticated()
        except CasinoError as exc:
            logger.info(
                "Spin rejected: player=%s machine=%s bet=%s reason=%s",
                player_id,
                machine_id,
                bet,
                exc,
            )
            return SpinOutcome(success=False, error_message=str(exc))

    return SpinOutcome(success=True, machine=machine, result=result, player=updated)


def get_history(
    external_ctx: ExternalContext,
    stores: Stores,
    kind: Optional[TransactionKind] = None,
    search: str = "",
) -> HistoryResult:
    player = get_current_player(external_ctx, stores)
    if player is None:
        return HistoryResult(success=False, error_message=str(NotAuthenticated()))

    transactions = stores.ledger_for(player.id).list_for_player(player.id)
    return HistoryResult(
        success=True,
        transactions=filter_transactions(transactions, kind, search),
    )


def _all_transactions(stores: Stores) -> List[Transaction]:
    merged = stores.ledger.list_transactions() + stores.demo_ledger.list_transactions()
    merged.sort(key=lambda tx: tx.timestamp, reverse=True)
    return merged


def _resolve_username(stores: Stores, player_id: str) -> Optional[str]:
    player = stores.players_for(player_id).get_player(player_id)
    return player.username if player is not None else None


def get_leaderboard(stores: Stores, now: Optional[datetime] = None) -> List[LeaderboardEntry]:
    return build_leaderboard(
        _all_transactions(stores),
        lambda player_id: _resolve_username(stores, player_id),
        now or _utcnow(),
    )


def get_player_stats(
    external_ctx: ExternalContext,
    stores: Stores,
    now: Optional[datetime] = None,
) -> StatsResult:
    player = get_current_player(external_ctx, stores)
    if player is None:
        return StatsResult(success=False, error_message=str(NotAuthenticated()))

    now = now or _utcnow()
    transactions = stores.ledger_for(player.id).list_for_player(player.id)
    leaderboard = get_leaderboard(stores, now)
    return StatsResult(
        success=True,
        player=player,
        stats=build_player_stats(player, transactions, now),
        rank=player_rank(leaderboard, player.id),
    )
