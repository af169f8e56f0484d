"""
Auditcord Discord Bot
=====================

Relays audit-relevant guild changes to a warning channel and proxies chat
prompts to a language-model completion API.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. AUDITCORD_HOME environment variable, if set.
    2. If running in a frozen/compiled context (e.g., PyInstaller), use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("AUDITCORD_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from auditcord.configuration.env_settings import EnvSettings
from auditcord.util.logger import get_logger


logger = get_logger("main")


def load_environment() -> EnvSettings:
    """Load ``.env`` and return the environment settings.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    settings = EnvSettings.from_environ()
    if not settings.discord_token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    if not settings.api_key:
        logger.warning("'OPENROUTER_API_KEY' not set; chat completions and !rate-limit are disabled.")
    return settings


def build_intents() -> discord.Intents:
    """Construct the Discord intents required for Auditcord runtime features.

    Returns
    -------
    discord.Intents
        Intents enabling guild, moderation (bans and audit-log entries),
        webhook and message content events.
    """
    intents = discord.Intents.default()
    intents.guilds = True
    intents.moderation = True
    intents.webhooks = True
    intents.messages = True
    intents.message_content = True
    return intents


def load_cogs(discord_bot_instance: discord.Bot, env_settings: EnvSettings) -> None:
    """Register all operational cogs with the provided Discord bot instance."""
    from auditcord.bot.cogs import events_listener, message_listener

    events_listener.setup(discord_bot_instance)
    message_listener.setup(discord_bot_instance, env_settings)

    logger.info("All cogs loaded successfully.")


def create_bot(env_settings: EnvSettings) -> discord.Bot:
    """Instantiate the Discord bot and register all cogs."""
    bot = discord.Bot(intents=build_intents())
    load_cogs(bot, env_settings)
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Start the Discord bot and log around the connection lifecycle."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None = None) -> None:
    """Close the gateway connection if it is still open."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord client: %s", exc)
    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the bot and run it until disconnect, returning an exit code."""
    env_settings = load_environment()

    try:
        bot = create_bot(env_settings)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        return 1

    exit_code = 0
    try:
        await start_bot(bot, env_settings.discord_token)
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the bot token: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    logger.info("Starting Auditcord…")
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
    sys.exit(main())
