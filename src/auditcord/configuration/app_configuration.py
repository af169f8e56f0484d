from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict
import yaml

from auditcord.configuration.completion_settings import CompletionSettings
from auditcord.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_WARNING_CHANNEL = "bot-warning"
DEFAULT_LOGS_CHANNEL = "bot-logs"
DEFAULT_MERMAID_EXECUTABLE = "mmdc"
DEFAULT_MERMAID_TIMEOUT_SECONDS = 30.0


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml``, exposes
    dictionary-like access helpers, and wraps the completion section in
    :class:`CompletionSettings`. A shared ``fcntl`` lock is held while reading.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            logger.error("[APP CONFIGURATION] Config %s is not a mapping; ignoring it.", self.config_path)
            return {}
        return data

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._data.get(name, {})
        return section if isinstance(section, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the current cached configuration mapping.

        The returned dict is the internal cache; callers should not mutate it.
        """
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def warning_channel_name(self) -> str:
        """Name of the channel receiving audit notifications."""
        return str(self._section("channels").get("warning") or DEFAULT_WARNING_CHANNEL)

    @property
    def logs_channel_name(self) -> str:
        """Name of the channel receiving structured interaction logs."""
        return str(self._section("channels").get("logs") or DEFAULT_LOGS_CHANNEL)

    @property
    def completion(self) -> CompletionSettings:
        return CompletionSettings(self._section("completion"))

    @property
    def mermaid_executable(self) -> str:
        return str(self._section("mermaid").get("executable") or DEFAULT_MERMAID_EXECUTABLE)

    @property
    def mermaid_timeout_seconds(self) -> float:
        try:
            return float(self._section("mermaid").get("timeout_seconds", DEFAULT_MERMAID_TIMEOUT_SECONDS))
        except (TypeError, ValueError):
            return DEFAULT_MERMAID_TIMEOUT_SECONDS


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
