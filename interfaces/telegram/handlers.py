from __future__ import annotations

import logging

import telebot
from telebot.types import InlineKeyboardButton, InlineKeyboardMarkup

from application.locks import PlayerLocks
from application.services import (
    ExternalContext,
    Stores,
    get_history,
    get_leaderboard,
    get_machine,
    get_player_stats,
    list_machines,
    login,
    login_demo,
    logout,
    play_slot,
    register,
)
from domain.engine import SpinEngine
from interfaces.presenters import (
    format_history,
    format_leaderboard,
    format_machine_details,
    format_machines,
    format_spin_outcome,
    format_stats,
    parse_history_args,
    parse_spin_args,
)
from interfaces.telegram.callback_data import encode_spin_again, parse_spin_again


logger = logging.getLogger(__name__)


def _build_external_context(user) -> ExternalContext:
    """Extract a channel-agnostic context object from a Telegram user."""

    return ExternalContext(
        provider="telegram",
        provider_user_id=str(user.id),
        first_name=user.first_name or "",
        last_name=user.last_name or "",
    )


def _spin_again_markup(machine_id: str, bet: int) -> InlineKeyboardMarkup:
    markup = InlineKeyboardMarkup(row_width=1)
    markup.add(
        InlineKeyboardButton(
            f"Spin again ({bet})",
            callback_data=encode_spin_again(machine_id, bet),
        )
    )
    return markup


def create_telegram_bot(
    bot_token: str,
    engine: SpinEngine,
    stores: Stores,
    locks: PlayerLocks,
    starting_balance: int,
    demo_balance: int,
) -> telebot.TeleBot:
    """
    Configure and return a TeleBot instance wired to the application layer.

    This module contains only Telegram-specific concerns: parsing Telegram
    messages/callbacks and mapping them to/from application services.
    """

    bot = telebot.TeleBot(bot_token)

    def send_spin(chat_id: int, ctx: ExternalContext, machine_id: str, bet: int) -> None:
        outcome = play_slot(ctx, machine_id, bet, engine, stores, locks)
        markup = _spin_again_markup(machine_id, bet) if outcome.success else None
        bot.send_message(chat_id, format_spin_outcome(outcome), reply_markup=markup)

    @bot.message_handler(commands=["start", "hello"])
    def handle_start(message):
        bot.send_message(
            message.chat.id,
            "Welcome to the slot parlor!\n"
            "Use /demo to play with a demo balance, or /register to create an account.\n"
            "Type /help to see available commands.",
        )

    @bot.message_handler(commands=["help"])
    def handle_help(message):
        bot.send_message(
            message.chat.id,
            "/register <email> <username> <password> - create an account\n"
            "/login <email> <password>               - log in\n"
            "/demo                                   - play with a demo balance\n"
            "/logout                                 - log out\n"
            "/machines                               - list slot machines\n"
            "/machine <id>                           - paytable and odds of a machine\n"
            "/spin <machine> <bet>                   - spin a machine\n"
            "/balance                                - your balance and stats\n"
            "/history [spin|win] [game]              - your recent transactions\n"
            "/leaderboard                            - top winners of the last 24h\n",
        )

    @bot.message_handler(commands=["register"])
    def handle_register(message):
        parts = message.text.split()
        if len(parts) != 4:
            bot.send_message(message.chat.id, "Usage: /register <email> <username> <password>")
            return

        _, email, username, password = parts
        result = register(
            _build_external_context(message.from_user),
            email,
            username,
            password,
            stores,
            starting_balance,
        )
        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return

        bot.send_message(
            message.chat.id,
            f"Welcome, {result.player.username}! Your starting balance is {result.player.balance:,}.",
        )

    @bot.message_handler(commands=["login"])
    def handle_login(message):
        parts = message.text.split()
        if len(parts) not in (2, 3):
            bot.send_message(message.chat.id, "Usage: /login <email> <password>")
            return

        email = parts[1]
        password = parts[2] if len(parts) > 2 else ""
        result = login(
            _build_external_context(message.from_user),
            email,
            password,
            stores,
            demo_balance,
        )
        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return

        bot.send_message(
            message.chat.id,
            f"Logged in as {result.player.username}. Balance: {result.player.balance:,}",
        )

    @bot.message_handler(commands=["demo"])
    def handle_demo(message):
        result = login_demo(_build_external_context(message.from_user), stores, demo_balance)
        bot.send_message(
            message.chat.id,
            f"Playing as {result.player.username}. Balance: {result.player.balance:,}",
        )

    @bot.message_handler(commands=["logout"])
    def handle_logout(message):
        result = logout(_build_external_context(message.from_user), stores)
        bot.send_message(message.chat.id, result.error_message or "Logged out.")

    @bot.message_handler(commands=["machines"])
    def handle_machines(message):
        bot.send_message(message.chat.id, format_machines(list_machines(engine)))

    @bot.message_handler(commands=["machine"])
    def handle_machine(message):
        args = message.text.split()[1:]
        if not args:
            bot.send_message(message.chat.id, "Usage: /machine <id>")
            return

        machine = get_machine(engine, args[0])
        if machine is None:
            bot.send_message(message.chat.id, "Machine not found")
            return

        bot.send_message(message.chat.id, format_machine_details(machine, engine.reels.weights))

    @bot.message_handler(commands=["spin"])
    def handle_spin(message):
        machine_id, bet, error = parse_spin_args(message.text.split()[1:])
        if error:
            bot.send_message(message.chat.id, error)
            return

        send_spin(message.chat.id, _build_external_context(message.from_user), machine_id, bet)

    @bot.message_handler(commands=["balance", "stats"])
    def handle_balance(message):
        result = get_player_stats(_build_external_context(message.from_user), stores)
        bot.send_message(message.chat.id, format_stats(result))

    @bot.message_handler(commands=["history"])
    def handle_history(message):
        kind, search = parse_history_args(message.text.split()[1:])
        result = get_history(_build_external_context(message.from_user), stores, kind, search)
        if not result.success:
            bot.send_message(message.chat.id, result.error_message)
            return

        bot.send_message(message.chat.id, format_history(result.transactions))

    @bot.message_handler(commands=["leaderboard"])
    def handle_leaderboard(message):
        bot.send_message(message.chat.id, format_leaderboard(get_leaderboard(stores)))

    @bot.callback_query_handler(func=lambda call: call.data.startswith("again:"))
    def handle_spin_again(call):
        """
        Replay the spin encoded in the button for whoever pressed it.
        """

        try:
            machine_id, bet = parse_spin_again(call.data)
        except ValueError:
            logger.warning("Ignoring malformed callback data %r", call.data)
            bot.answer_callback_query(call.id, "Invalid selection.")
            return

        bot.answer_callback_query(call.id)
        send_spin(call.message.chat.id, _build_external_context(call.from_user), machine_id, bet)

    return bot
