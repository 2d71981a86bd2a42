import logging

from application.locks import PlayerLocks
from bootstrap import build_engine, build_stores
from config import configure_logging, load_settings
from interfaces.telegram.handlers import create_telegram_bot


logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)

    if not settings.telegram_token:
        raise RuntimeError("TELEGRAM_TOKEN environment variable is not set.")

    engine = build_engine(settings)
    stores = build_stores(settings)

    bot = create_telegram_bot(
        settings.telegram_token,
        engine,
        stores,
        PlayerLocks(),
        settings.starting_balance,
        settings.demo_balance,
    )
    logger.info("Starting Telegram bot with %d machines", len(engine.catalog))
    bot.infinity_polling()


if __name__ == "__main__":
    main()
