"""
Auditcord - Audit-Log Relay and Model Proxy Discord Bot

Auditcord watches a guild for administrative changes and reports them, with
the responsible moderator and reason pulled from the audit log, in a
``bot-warning`` channel. It also answers ``<shortcut>: <prompt>`` messages in
a chat channel by forwarding them to an OpenRouter-compatible completion API.

Core Components:

- **Audit pipeline**: One declarative table maps gateway events (role,
  channel, webhook, ban, guild updates) to an audit action and a message
  template; notifications are best-effort and never break event delivery
- **Completion proxy**: HTTP client with a closed result type, a retry
  controller that backs off exponentially on HTTP 429 only, and structured
  request/error records posted to ``bot-logs``
- **Text commands**: ``!ping``, ``!help``, ``!rate-limit`` and ``!mermaid``

Usage:
    from auditcord.main import main
    main()
"""
