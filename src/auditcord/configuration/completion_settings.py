from typing import Any, Dict

DEFAULT_COMPLETIONS_ENDPOINT = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_KEY_STATUS_ENDPOINT = "https://openrouter.ai/api/v1/key"
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_REQUEST_TIMEOUT_SECONDS = 120.0


class CompletionSettings:
    """Typed accessors for the ``completion`` section of the app config.

    Mirrors the YAML mapping; unknown keys stay reachable through ``get``.
    """

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for `key` or `default` if missing."""
        return self.data.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        return self.data

    @property
    def endpoint(self) -> str:
        return str(self.data.get("endpoint") or DEFAULT_COMPLETIONS_ENDPOINT)

    @property
    def key_status_endpoint(self) -> str:
        return str(self.data.get("key_status_endpoint") or DEFAULT_KEY_STATUS_ENDPOINT)

    @property
    def max_attempts(self) -> int:
        try:
            value = int(self.data.get("max_attempts", DEFAULT_MAX_ATTEMPTS))
        except (TypeError, ValueError):
            return DEFAULT_MAX_ATTEMPTS
        return max(1, value)

    @property
    def request_timeout_seconds(self) -> float:
        try:
            return float(self.data.get("request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS))
        except (TypeError, ValueError):
            return DEFAULT_REQUEST_TIMEOUT_SECONDS

    @property
    def shortcuts(self) -> Dict[str, str]:
        """Return the shortcut → model mapping with lower-cased, stripped keys."""
        raw = self.data.get("shortcuts", {})
        if not isinstance(raw, dict):
            return {}
        return {
            str(token).strip().lower(): str(model).strip()
            for token, model in raw.items()
            if str(token).strip() and model
        }
