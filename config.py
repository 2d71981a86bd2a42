from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    telegram_token: Optional[str]
    discord_token: Optional[str]
    db_path: str
    postgres_params: Optional[dict]
    machines_file: Optional[str]
    starting_balance: int
    demo_balance: int
    log_level: str


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.")


def _postgres_params() -> Optional[dict]:
    dbname = os.environ.get("POSTGRES_DB")
    if not dbname:
        return None
    params = {
        "dbname": dbname,
        "user": os.environ.get("POSTGRES_USER"),
        "password": os.environ.get("POSTGRES_PASSWORD"),
        "host": os.environ.get("POSTGRES_HOST"),
        "port": _int_env("POSTGRES_PORT", 5432),
    }
    return {key: value for key, value in params.items() if value is not None}


def load_settings() -> Settings:
    """Read settings from the environment, after loading a `.env` file if present."""

    load_dotenv()
    return Settings(
        telegram_token=os.environ.get("TELEGRAM_TOKEN"),
        discord_token=os.environ.get("DISCORD_TOKEN"),
        db_path=os.environ.get("DB_PATH", "casino.db"),
        postgres_params=_postgres_params(),
        machines_file=os.environ.get("MACHINES_FILE") or None,
        starting_balance=_int_env("STARTING_BALANCE", 500),
        demo_balance=_int_env("DEMO_BALANCE", 1000),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
