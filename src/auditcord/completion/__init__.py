"""
Language-model completion proxy for Auditcord.

- **completion_client.py**: aiohttp client that classifies every outcome into
  Success, RateLimited, ClientError or TransientError.

- **retry_controller.py**: Exponential backoff on RateLimited only.

- **interaction_logger.py**: Posts JSON request/error records to ``bot-logs``.

- **shortcut_parser.py**: Parses ``<shortcut>: <prompt>`` chat messages.
"""
