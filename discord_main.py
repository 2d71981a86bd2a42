import logging

from application.locks import PlayerLocks
from bootstrap import build_engine, build_stores
from config import configure_logging, load_settings
from interfaces.discord.handlers import create_discord_bot


logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)

    if not settings.discord_token:
        raise RuntimeError("DISCORD_TOKEN environment variable is not set.")

    engine = build_engine(settings)
    stores = build_stores(settings)

    bot = create_discord_bot(
        engine,
        stores,
        PlayerLocks(),
        settings.starting_balance,
        settings.demo_balance,
    )
    logger.info("Starting Discord bot with %d machines", len(engine.catalog))
    bot.run(settings.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
