from __future__ import annotations

import logging
from typing import Optional

from application.services import Stores
from config import Settings
from domain.catalog import DEFAULT_SYMBOL_WEIGHTS, default_catalog, load_catalog
from domain.engine import SpinEngine
from domain.reels import RandomSource, ReelGenerator
from infrastructure.memory.repositories import InMemoryLedgerRepository, InMemoryPlayerRepository


logger = logging.getLogger(__name__)


def build_engine(settings: Settings, rng: Optional[RandomSource] = None) -> SpinEngine:
    if settings.machines_file:
        catalog, weights = load_catalog(settings.machines_file)
    else:
        catalog, weights = default_catalog(), DEFAULT_SYMBOL_WEIGHTS
    return SpinEngine(catalog, ReelGenerator(weights, rng))


def build_stores(settings: Settings) -> Stores:
    """Wire the durable stores (Postgres if configured, else SQLite) plus the demo stores."""

    demo_players = InMemoryPlayerRepository(unique_emails=False)
    demo_ledger = InMemoryLedgerRepository(demo_players)

    if settings.postgres_params:
        from infrastructure.db.identity_repository_postgres import PostgresIdentityRepository
        from infrastructure.db.ledger_repository_postgres import PostgresLedgerRepository
        from infrastructure.db.player_repository_postgres import PostgresPlayerRepository

        logger.info("Using Postgres database %s", settings.postgres_params.get("dbname"))
        return Stores(
            players=PostgresPlayerRepository(settings.postgres_params),
            ledger=PostgresLedgerRepository(settings.postgres_params),
            identities=PostgresIdentityRepository(settings.postgres_params),
            demo_players=demo_players,
            demo_ledger=demo_ledger,
        )

    from infrastructure.db.identity_repository_sqlite import SqliteIdentityRepository
    from infrastructure.db.ledger_repository_sqlite import SqliteLedgerRepository
    from infrastructure.db.player_repository_sqlite import SqlitePlayerRepository

    logger.info("Using SQLite database %s", settings.db_path)
    # Players first: settling a spin updates the `players` table.
    players = SqlitePlayerRepository(settings.db_path)
    return Stores(
        players=players,
        ledger=SqliteLedgerRepository(settings.db_path),
        identities=SqliteIdentityRepository(settings.db_path),
        demo_players=demo_players,
        demo_ledger=demo_ledger,
    )
