"""
Utility functions and helpers for Auditcord.

- **logger.py**: Centralized logging configuration with colored console output
  through prompt_toolkit, a rotating per-session log file, and suppression of
  noisy library loggers (Discord internals, aiohttp, websockets).

- **discord_utils.py**: Stateless Discord helpers: exact-name text channel
  lookup, best-effort sends to a named channel, and message splitting.

- **mermaid_renderer.py**: Renders Mermaid diagrams to PNG through the
  ``mmdc`` CLI in a temporary directory.
"""
