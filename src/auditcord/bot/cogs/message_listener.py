"""Message listener Cog for Auditcord.

This cog answers the text commands (``!ping``, ``!help``, ``!rate-limit``,
``!mermaid``) and proxies ``<shortcut>: <prompt>`` messages in the chat
channel to the completion provider. Every failure is turned into a reply or
a log line here; nothing propagates back to the gateway.
"""

import io
import re

import discord
from discord.ext import commands

from auditcord.completion.completion_client import CompletionClient, CompletionServiceError
from auditcord.completion.interaction_logger import InteractionLogger
from auditcord.completion.retry_controller import RetryController
from auditcord.completion.shortcut_parser import ShortcutError, format_shortcut_help, parse_chat_request
from auditcord.configuration.app_configuration import app_config
from auditcord.configuration.env_settings import EnvSettings
from auditcord.datatypes.chat_datatypes import (
    ChatResponse,
    ClientError,
    KeyStatus,
    RateLimited,
    Success,
    TransientError,
)
from auditcord.util import discord_utils
from auditcord.util.logger import get_logger
from auditcord.util.mermaid_renderer import MermaidRenderError, render_mermaid

logger = get_logger("message_listener_cog")

PING_COMMAND = "!ping"
HELP_COMMAND = "!help"
RATE_LIMIT_COMMAND = "!rate-limit"
MERMAID_COMMAND = "!mermaid"

RATE_LIMITED_REPLY = "⏳ The model provider is currently rate-limited. Please try again in a little while."
CLIENT_ERROR_REPLY = "⚠️ The request was rejected by the provider. Check the model name and API configuration."
UNEXPECTED_ERROR_REPLY = "❌ An unexpected error occurred while processing your request."
MISSING_KEY_REPLY = "⚠️ No completion API key is configured for this bot."

_CODE_FENCE = re.compile(r"^```(?:mermaid)?\s*\n?(.*?)\n?```$", re.DOTALL)


def build_help_text(chat_channel_name: str, shortcuts) -> str:
    return "\n".join([
        "**Auditcord commands**",
        f"`{PING_COMMAND}` — check that the bot is alive",
        f"`{HELP_COMMAND}` — show this message",
        f"`{RATE_LIMIT_COMMAND}` — show the completion API key quota",
        f"`{MERMAID_COMMAND} <code>` — render a Mermaid diagram",
        f"`<shortcut>: <prompt>` in #{chat_channel_name} — ask a language model",
        "",
        format_shortcut_help(shortcuts),
        "",
        f"Role, channel, webhook, ban and server changes are reported in #{app_config.warning_channel_name}.",
    ])


def format_key_status(status: KeyStatus) -> str:
    def show(value) -> str:
        return "n/a" if value is None else str(value)

    lines = ["📊 **API key status**"]
    if status.label:
        lines.append(f"Key: {status.label}")
    lines.append(f"Usage: {show(status.usage)}")
    lines.append(f"Limit: {'unlimited' if status.limit is None else status.limit}")
    lines.append(f"Remaining: {'unlimited' if status.limit_remaining is None else status.limit_remaining}")
    lines.append(f"Reset: {show(status.limit_reset)}")
    if status.rate_limit_requests is not None:
        lines.append(f"Rate limit: {status.rate_limit_requests} requests / {show(status.rate_limit_interval)}")
    if status.is_free_tier is not None:
        lines.append(f"Free tier: {'yes' if status.is_free_tier else 'no'}")
    return "\n".join(lines)


def extract_mermaid_source(content: str) -> str:
    """Return the diagram code after ``!mermaid``, without a surrounding code fence."""
    source = content[len(MERMAID_COMMAND):].strip()
    fenced = _CODE_FENCE.match(source)
    return fenced.group(1).strip() if fenced else source


def reply_for_response(response: ChatResponse) -> str:
    match response:
        case Success():
            return response.reply_text
        case RateLimited():
            return RATE_LIMITED_REPLY
        case ClientError():
            return f"{CLIENT_ERROR_REPLY}\n> {discord_utils.truncate(response.detail, 300)}"
        case TransientError():
            return UNEXPECTED_ERROR_REPLY
    return UNEXPECTED_ERROR_REPLY


class MessageListenerCog(commands.Cog):
    """Cog responsible for text commands and the completion chat channel."""

    def __init__(self, discord_bot_instance, env_settings: EnvSettings | None = None,
                 client: CompletionClient | None = None, controller: RetryController | None = None):
        """
        Initialize the message listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        env_settings:
            Credentials and chat channel name; read from the environment when omitted.
        client, controller:
            Completion client and retry controller; built from configuration when omitted.
        """
        self.bot = discord_bot_instance
        self.env_settings = env_settings or EnvSettings.from_environ()
        self.client = client or CompletionClient.from_settings(self.env_settings, app_config)
        self.interaction_logger = InteractionLogger(discord_bot_instance)
        self.controller = controller or RetryController(
            self.client,
            reporter=self.interaction_logger.record_outcome,
            max_attempts=app_config.completion.max_attempts,
        )
        logger.info("Message listener cog loaded (chat channel: #%s)", self.env_settings.chat_channel_name)

    @commands.Cog.listener(name='on_message')
    async def on_message(self, message: discord.Message):
        """Route one inbound message to a command or the completion pipeline."""
        if message.guild is None or discord_utils.is_ignored_author(message.author):
            return

        content = (message.content or "").strip()
        try:
            if content == PING_COMMAND:
                await message.reply("🏓 Pong!")
            elif content == HELP_COMMAND:
                await message.reply(build_help_text(self.env_settings.chat_channel_name, app_config.completion.shortcuts))
            elif content == RATE_LIMIT_COMMAND:
                await self._handle_rate_limit(message)
            elif content == MERMAID_COMMAND or content.startswith((MERMAID_COMMAND + " ", MERMAID_COMMAND + "\n")):
                await self._handle_mermaid(message, content)
            elif getattr(message.channel, "name", None) == self.env_settings.chat_channel_name:
                await self._handle_chat(message, content)
        except Exception:
            logger.exception("Error handling message %s in guild %s", message.id, message.guild.id)
            try:
                await message.reply(UNEXPECTED_ERROR_REPLY)
            except Exception as exc:
                logger.error("Could not send error reply: %s", exc)

    async def _handle_rate_limit(self, message: discord.Message) -> None:
        if not self.env_settings.api_key:
            await message.reply(MISSING_KEY_REPLY)
            return
        try:
            status = await self.client.fetch_key_status()
        except CompletionServiceError as exc:
            logger.error("Key status request failed: %s", exc)
            await message.reply(f"❌ Could not fetch the API key status: {discord_utils.truncate(str(exc), 300)}")
            return
        await message.reply(format_key_status(status))

    async def _handle_mermaid(self, message: discord.Message, content: str) -> None:
        source = extract_mermaid_source(content)
        if not source:
            await message.reply(f"Usage: `{MERMAID_COMMAND} <diagram code>`")
            return
        try:
            image = await render_mermaid(source, app_config.mermaid_executable, app_config.mermaid_timeout_seconds)
        except MermaidRenderError as exc:
            await message.reply(f"❌ Failed to render diagram:\n```\n{discord_utils.truncate(str(exc), 1500)}\n```")
            return
        await message.reply(file=discord.File(io.BytesIO(image), filename="diagram.png"))

    async def _handle_chat(self, message: discord.Message, content: str) -> None:
        shortcuts = app_config.completion.shortcuts
        try:
            request = parse_chat_request(content, shortcuts, guild_id=message.guild.id)
        except ShortcutError as exc:
            await message.reply(f"{exc}\n{format_shortcut_help(shortcuts)}")
            return

        if not self.env_settings.api_key:
            await message.reply(MISSING_KEY_REPLY)
            return

        async with message.channel.typing():
            response = await self.controller.send(request)

        chunks = discord_utils.split_message(reply_for_response(response)) or [UNEXPECTED_ERROR_REPLY]
        await message.reply(chunks[0])
        for chunk in chunks[1:]:
            await message.channel.send(chunk)


def setup(discord_bot_instance, env_settings: EnvSettings | None = None):
    """Register the MessageListenerCog with the bot."""
    discord_bot_instance.add_cog(MessageListenerCog(discord_bot_instance, env_settings))
