from __future__ import annotations

import logging

import discord
from discord.ext import commands

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
from interfaces.discord.replays import SpinReplays
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


logger = logging.getLogger(__name__)

SPIN_AGAIN_EMOJI = "🔁"


def _build_external_context(user: discord.abc.User) -> ExternalContext:
    """Create an `ExternalContext` from a Discord user."""

    # Discord has `name` and `display_name`; here we just store the full
    # display name in `first_name` to keep things simple.
    display_name = user.display_name or user.name
    return ExternalContext(
        provider="discord",
        provider_user_id=str(user.id),
        first_name=display_name,
        last_name="",
    )


def create_discord_bot(
    engine: SpinEngine,
    stores: Stores,
    locks: PlayerLocks,
    starting_balance: int,
    demo_balance: int,
) -> commands.Bot:
    """
    Configure and return a Discord bot with behaviour analogous to
    the Telegram interface, using `!` commands and a reaction to spin again.
    """

    intents = discord.Intents.default()
    intents.message_content = True
    intents.reactions = True

    # Disable the default help command so we can provide our own `!help`.
    bot = commands.Bot(command_prefix="!", intents=intents, help_command=None)

    replays = SpinReplays()

    async def send_spin(channel, user: discord.abc.User, machine_id: str, bet: int) -> None:
        outcome = play_slot(_build_external_context(user), machine_id, bet, engine, stores, locks)
        message = await channel.send(format_spin_outcome(outcome))
        if outcome.success:
            await message.add_reaction(SPIN_AGAIN_EMOJI)
            replays.track(message.id, user.id, machine_id, bet)

    @bot.event
    async def on_ready():
        logger.info("Discord bot logged in as %s (id=%s)", bot.user, bot.user.id)

    @bot.event
    async def on_command_error(ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, (commands.MissingRequiredArgument, commands.BadArgument)):
            await ctx.send(f"{error}. Type !help to see usage.")
            return
        if isinstance(error, commands.CommandNotFound):
            return
        logger.error("Command %s failed", ctx.command, exc_info=error)
        await ctx.send("Something went wrong.")

    @bot.command(name="start")
    async def start_cmd(ctx: commands.Context):
        await ctx.send(
            "Welcome to the slot parlor (Discord)!\n"
            "Use !demo to play with a demo balance, or !register to create an account.\n"
            "Type !help to see available commands."
        )

    @bot.command(name="help")
    async def help_cmd(ctx: commands.Context):
        await ctx.send(
            "!register <email> <username> <password> - create an account\n"
            "!login <email> <password>               - log in\n"
            "!demo                                   - play with a demo balance\n"
            "!logout                                 - log out\n"
            "!machines                               - list slot machines\n"
            "!machine <id>                           - paytable and odds of a machine\n"
            "!spin <machine> <bet>                   - spin a machine\n"
            "!balance                                - your balance and stats\n"
            "!history [spin|win] [game]              - your recent transactions\n"
            "!leaderboard                            - top winners of the last 24h\n"
        )

    @bot.command(name="register")
    async def register_cmd(ctx: commands.Context, email: str, username: str, password: str):
        result = register(
            _build_external_context(ctx.author),
            email,
            username,
            password,
            stores,
            starting_balance,
        )
        if not result.success:
            await ctx.send(result.error_message)
            return

        await ctx.send(
            f"Welcome, {result.player.username}! Your starting balance is {result.player.balance:,}."
        )

    @bot.command(name="login")
    async def login_cmd(ctx: commands.Context, email: str, password: str = ""):
        result = login(_build_external_context(ctx.author), email, password, stores, demo_balance)
        if not result.success:
            await ctx.send(result.error_message)
            return

        await ctx.send(f"Logged in as {result.player.username}. Balance: {result.player.balance:,}")

    @bot.command(name="demo")
    async def demo_cmd(ctx: commands.Context):
        result = login_demo(_build_external_context(ctx.author), stores, demo_balance)
        await ctx.send(f"Playing as {result.player.username}. Balance: {result.player.balance:,}")

    @bot.command(name="logout")
    async def logout_cmd(ctx: commands.Context):
        result = logout(_build_external_context(ctx.author), stores)
        await ctx.send(result.error_message or "Logged out.")

    @bot.command(name="machines")
    async def machines_cmd(ctx: commands.Context):
        await ctx.send(format_machines(list_machines(engine)))

    @bot.command(name="machine")
    async def machine_cmd(ctx: commands.Context, machine_id: str):
        machine = get_machine(engine, machine_id)
        if machine is None:
            await ctx.send("Machine not found")
            return

        await ctx.send(format_machine_details(machine, engine.reels.weights))

    @bot.command(name="spin")
    async def spin_cmd(ctx: commands.Context, *args: str):
        machine_id, bet, error = parse_spin_args(args)
        if error:
            await ctx.send(error)
            return

        await send_spin(ctx.channel, ctx.author, machine_id, bet)

    @bot.command(name="balance", aliases=["stats"])
    async def balance_cmd(ctx: commands.Context):
        result = get_player_stats(_build_external_context(ctx.author), stores)
        await ctx.send(format_stats(result))

    @bot.command(name="history")
    async def history_cmd(ctx: commands.Context, *args: str):
        kind, search = parse_history_args(args)
        result = get_history(_build_external_context(ctx.author), stores, kind, search)
        if not result.success:
            await ctx.send(result.error_message)
            return

        await ctx.send(format_history(result.transactions))

    @bot.command(name="leaderboard")
    async def leaderboard_cmd(ctx: commands.Context):
        await ctx.send(format_leaderboard(get_leaderboard(stores)))

    @bot.event
    async def on_reaction_add(reaction: discord.Reaction, user: discord.abc.User):
        if user.bot or str(reaction.emoji) != SPIN_AGAIN_EMOJI:
            return

        # Only the player who spun can replay it, and only their latest spin.
        replay = replays.take(reaction.message.id, user.id)
        if replay is None:
            return

        machine_id, bet = replay
        await send_spin(reaction.message.channel, user, machine_id, bet)

    return bot
