"""
Discord bot cogs and event handlers for Auditcord.

- **events_listener.py**: Bot lifecycle (on_ready, presence) and the
  role/channel/webhook/ban/guild listeners feeding the audit pipeline, plus
  raw audit-log entry relay to the logs channel

- **message_listener.py**: Text commands and the completion chat channel
"""
