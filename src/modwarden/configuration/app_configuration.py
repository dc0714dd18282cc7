from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict
import yaml

from modwarden.configuration.moderation_settings import ModerationSettings
from modwarden.configuration.trust_settings import TrustConfig, coerce_number
from modwarden.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()
DEFAULT_DB_PATH = Path("./data/app.db")


class AppConfig:
    """Cached view of ``config/app_config.yml``.

    Sections: ``database`` (path, timeout_seconds), ``maintenance``
    (lock_sweep_seconds), ``moderation`` (base limits) and ``trust`` (see
    :class:`TrustConfig`). A missing or unreadable file behaves like an empty
    one, so every property falls back to its default. The file is read under
    a shared ``fcntl`` lock so a concurrent editor never yields half a file.
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
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.warning("[APP CONFIGURATION] Ignoring non-mapping config in %s", self.config_path)
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
        """Raw mapping from the last load; treat as read-only."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def trust(self) -> TrustConfig:
        """Trust policy configuration; partial sections are filled with defaults."""
        return TrustConfig.from_mapping(self._section("trust"))

    @property
    def moderation(self) -> ModerationSettings:
        """Base warning/mute/message limits before trust adjustment."""
        return ModerationSettings(self._section("moderation"))

    @property
    def database_path(self) -> Path:
        """Path of the SQLite store. Default is ``./data/app.db``."""
        value = self._section("database").get("path")
        return Path(str(value)).resolve() if value else DEFAULT_DB_PATH.resolve()

    @property
    def store_timeout_seconds(self) -> float | None:
        """Optional timeout applied around each allocator/lock round trip.

        Returns None (no timeout) when unset or not a positive number.
        """
        value = coerce_number(self._section("database").get("timeout_seconds"), 0.0)
        return float(value) if value > 0 else None

    @property
    def lock_sweep_interval(self) -> float:
        """Seconds between sweeps that delete expired action locks. Default is 60."""
        value = coerce_number(self._section("maintenance").get("lock_sweep_seconds"), 60.0)
        return float(value) if value > 0 else 60.0


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
