"""
Vigil Discord Bot
=================

Screens members joining a server, serves the ``!verify`` command for
moderators, and automatically bans malicious bots.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. VIGIL_HOME environment variable, if set.
    2. If running in a frozen/compiled context, the executable's directory.
    3. Otherwise the project root, two levels above this package.
    """
    if env_home := os.getenv("VIGIL_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
from dataclasses import dataclass

import discord
from dotenv import load_dotenv

from vigil.configuration.verification_settings import VerificationSettings
from vigil.database.db_connection import ConnectionManager, db_connection
from vigil.moderation.audit_sink import AuditSink
from vigil.scheduler.auto_ban_scheduler import AutoBanScheduler
from vigil.services.verification_service import VerificationService
from vigil.util.logger import get_logger, handle_exception


logger = get_logger("main")


@dataclass
class Runtime:
    """Long-lived objects shared by the cogs for the life of the process."""
    settings: VerificationSettings
    connection: ConnectionManager
    audit_sink: AuditSink
    auto_ban_scheduler: AutoBanScheduler
    verification_service: VerificationService


def load_environment() -> str:
    """Load ``.env`` and return the Discord bot token.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Intents for guild, member join and message content events."""
    intents = discord.Intents.default()
    intents.guilds = True
    intents.members = True
    intents.messages = True
    intents.message_content = True
    return intents


async def create_runtime(settings: VerificationSettings, connection: ConnectionManager = db_connection) -> Runtime:
    """Open the audit database and build the verification service."""
    await connection.open(settings.audit_database_path)
    audit_sink = AuditSink(connection, settings.modlog_channel)
    auto_ban_scheduler = AutoBanScheduler(audit_sink, settings.auto_ban_delay_seconds)
    verification_service = VerificationService(
        settings,
        audit_sink=audit_sink,
        auto_ban_scheduler=auto_ban_scheduler,
    )
    return Runtime(
        settings=settings,
        connection=connection,
        audit_sink=audit_sink,
        auto_ban_scheduler=auto_ban_scheduler,
        verification_service=verification_service,
    )


def load_cogs(discord_bot_instance: discord.Bot, verification_service: VerificationService) -> None:
    """Register all cogs with the bot."""
    from vigil.bot.cogs import events_listener, verification_listener

    events_listener.setup(discord_bot_instance, verification_service)
    verification_listener.setup(discord_bot_instance, verification_service)

    logger.info("All cogs loaded successfully.")


def create_bot(runtime: Runtime) -> discord.Bot:
    """Instantiate the Discord bot and register all cogs."""
    bot = discord.Bot(intents=build_intents())
    load_cogs(bot, runtime.verification_service)
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Connect to Discord and log around the connection lifecycle."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None, runtime: Runtime | None) -> None:
    """Close the bot, stop the auto-ban scheduler and close the audit database."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord client: %s", exc)

    if runtime is not None:
        try:
            await runtime.auto_ban_scheduler.shutdown()
        except Exception as exc:
            logger.exception("Error during auto-ban scheduler shutdown: %s", exc)

        try:
            await runtime.connection.close()
        except Exception as exc:
            logger.exception("Error during database shutdown: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap configuration, database and bot, returning an exit code."""
    token = load_environment()

    from vigil.configuration.app_configuration import app_config

    settings = app_config.verification_settings
    logger.info(
        "Verification quota: %d per %.0fs; session timeout %.0fs; auto-ban delay %.0fs",
        settings.verification_limit,
        settings.verification_window_seconds,
        settings.session_timeout_seconds,
        settings.auto_ban_delay_seconds,
    )

    try:
        runtime = await create_runtime(settings)
    except Exception as exc:
        logger.critical("Failed to initialize audit database: %s", exc)
        return 1

    bot = None
    exit_code = 0
    try:
        bot = create_bot(runtime)
        await start_bot(bot, token)
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, runtime)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    logger.info("Starting Vigil…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
