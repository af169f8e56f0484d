"""Event listener Cog for Auditcord.

This cog handles the bot lifecycle (on_ready) and every audit-relevant
gateway event. Each listener hands its raw arguments to the event pipeline,
which never raises, so one failing notification cannot affect the next.
Message-related events are handled by the MessageListenerCog.
"""

import discord
from discord.ext import commands

from auditcord.audit.event_pipeline import dispatch_gateway_event
from auditcord.configuration.app_configuration import app_config
from auditcord.datatypes.audit_datatypes import GatewayEventKind, UNKNOWN_EXECUTOR
from auditcord.util import discord_utils
from auditcord.util.logger import get_logger

logger = get_logger("events_listener_cog")


def format_audit_entry(entry) -> str:
    """One-line summary of a raw audit-log entry for the logs channel."""
    action = getattr(entry, "action", None)
    action_name = getattr(action, "name", None) or str(action)
    user = getattr(entry, "user", None)
    executor = str(user) if user is not None else UNKNOWN_EXECUTOR
    return f"🔔 New audit log entry:\nAction: {action_name}\nPerformed by: {executor}"


class EventsListenerCog(commands.Cog):
    """Cog relaying guild changes to the warning channel."""

    def __init__(self, discord_bot_instance):
        """Initialize the events listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        """
        self.bot = discord_bot_instance
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name='on_ready')
    async def on_ready(self):
        """Set the bot's presence and log the connected identity."""
        if not self.bot.user:
            logger.warning("Bot partially connected, but user information not yet available.")
            return

        logger.info(f"Bot connected as {self.bot.user} (ID: {self.bot.user.id})")
        logger.info("Watching %s guild(s)", len(getattr(self.bot, "guilds", []) or []))
        try:
            await self.bot.change_presence(
                status=discord.Status.online,
                activity=discord.Activity(type=discord.ActivityType.watching, name="the audit log"),
            )
        except Exception as exc:
            logger.warning("Could not update presence: %s", exc)

    # ---- roles ----
    @commands.Cog.listener(name='on_guild_role_create')
    async def on_guild_role_create(self, role):
        await dispatch_gateway_event(GatewayEventKind.ROLE_CREATE, role)

    @commands.Cog.listener(name='on_guild_role_delete')
    async def on_guild_role_delete(self, role):
        await dispatch_gateway_event(GatewayEventKind.ROLE_DELETE, role)

    @commands.Cog.listener(name='on_guild_role_update')
    async def on_guild_role_update(self, before, after):
        await dispatch_gateway_event(GatewayEventKind.ROLE_UPDATE, before, after)

    # ---- channels ----
    @commands.Cog.listener(name='on_guild_channel_create')
    async def on_guild_channel_create(self, channel):
        await dispatch_gateway_event(GatewayEventKind.CHANNEL_CREATE, channel)

    @commands.Cog.listener(name='on_guild_channel_delete')
    async def on_guild_channel_delete(self, channel):
        await dispatch_gateway_event(GatewayEventKind.CHANNEL_DELETE, channel)

    @commands.Cog.listener(name='on_guild_channel_update')
    async def on_guild_channel_update(self, before, after):
        await dispatch_gateway_event(GatewayEventKind.CHANNEL_UPDATE, before, after)

    # ---- webhooks, bans, guild ----
    @commands.Cog.listener(name='on_webhooks_update')
    async def on_webhooks_update(self, channel):
        await dispatch_gateway_event(GatewayEventKind.WEBHOOK_UPDATE, channel)

    @commands.Cog.listener(name='on_member_ban')
    async def on_member_ban(self, guild, user):
        await dispatch_gateway_event(GatewayEventKind.MEMBER_BAN, guild, user)

    @commands.Cog.listener(name='on_guild_update')
    async def on_guild_update(self, before, after):
        await dispatch_gateway_event(GatewayEventKind.GUILD_UPDATE, before, after)

    @commands.Cog.listener(name='on_audit_log_entry')
    async def on_audit_log_entry(self, entry):
        """Post a summary of every new audit-log entry to the logs channel."""
        guild = getattr(entry, "guild", None)
        if guild is None:
            return
        try:
            await discord_utils.send_to_named_channel(guild, app_config.logs_channel_name, format_audit_entry(entry))
        except Exception:
            logger.exception("Error handling audit log entry in guild %s", getattr(guild, "id", "?"))


def setup(discord_bot_instance):
    """Register the EventsListenerCog with the bot."""
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance))
