"""
nourish configuration.

YAML file plus ``NOURISH_*`` environment overrides.

Example YAML (``~/.config/nourish/config.yaml``):

    data_dir: ~/.local/share/nourish
    hydration_interval_minutes: 90
    repeat_horizon_days: 14
    log_level: INFO

Environment variables win over the file:

    NOURISH_DATA_DIR, NOURISH_HYDRATION_INTERVAL, NOURISH_REPEAT_HORIZON_DAYS,
    NOURISH_LOG_LEVEL
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import logging
import os

import yaml

from nourish.scheduling.hydration import DEFAULT_HYDRATION_INTERVAL_MINUTES
from nourish.scheduling.repeat import REPEAT_HORIZON_DAYS

logger = logging.getLogger(__name__)


def _default_data_dir() -> Path:
    data_home = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    return data_home / "nourish"


@dataclass
class NourishConfig:
    """Runtime configuration."""

    data_dir: Path = field(default_factory=_default_data_dir)
    hydration_interval_minutes: int = DEFAULT_HYDRATION_INTERVAL_MINUTES
    repeat_horizon_days: int = REPEAT_HORIZON_DAYS
    log_level: str = "WARNING"

    @property
    def settings_path(self) -> Path:
        return self.data_dir / "settings.json"

    @property
    def notifications_db_path(self) -> Path:
        return self.data_dir / "notifications.db"

    @classmethod
    def get_default_path(cls) -> Path:
        """Get default config file path."""
        config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        return Path(config_home) / "nourish" / "config.yaml"

    @classmethod
    def load(
        cls,
        path: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> "NourishConfig":
        """
        Load configuration from YAML, then apply environment overrides.

        A missing file gives defaults; an unreadable one is logged and
        ignored.
        """
        if path is None:
            path = cls.get_default_path()
        path = Path(path)

        data: Dict[str, Any] = {}
        if path.exists():
            try:
                with open(path, encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Failed to load config {path}: {e}")
                data = {}
            if not isinstance(data, dict):
                logger.error(f"Config {path} must be a mapping, ignoring")
                data = {}
        else:
            logger.debug(f"Config file not found: {path}")

        config = cls.from_dict(data)
        config.apply_env(os.environ if env is None else env)
        return config

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NourishConfig":
        config = cls()
        if data.get("data_dir"):
            config.data_dir = Path(str(data["data_dir"])).expanduser()
        if "hydration_interval_minutes" in data:
            config.hydration_interval_minutes = _positive_int(
                data["hydration_interval_minutes"], "hydration_interval_minutes"
            )
        if "repeat_horizon_days" in data:
            config.repeat_horizon_days = _positive_int(
                data["repeat_horizon_days"], "repeat_horizon_days"
            )
        if data.get("log_level"):
            config.log_level = str(data["log_level"]).upper()
        return config

    def apply_env(self, env: Mapping[str, str]) -> None:
        if env.get("NOURISH_DATA_DIR"):
            self.data_dir = Path(env["NOURISH_DATA_DIR"]).expanduser()
        if env.get("NOURISH_HYDRATION_INTERVAL"):
            self.hydration_interval_minutes = _positive_int(
                env["NOURISH_HYDRATION_INTERVAL"], "NOURISH_HYDRATION_INTERVAL"
            )
        if env.get("NOURISH_REPEAT_HORIZON_DAYS"):
            self.repeat_horizon_days = _positive_int(
                env["NOURISH_REPEAT_HORIZON_DAYS"], "NOURISH_REPEAT_HORIZON_DAYS"
            )
        if env.get("NOURISH_LOG_LEVEL"):
            self.log_level = env["NOURISH_LOG_LEVEL"].upper()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_dir": str(self.data_dir),
            "hydration_interval_minutes": self.hydration_interval_minutes,
            "repeat_horizon_days": self.repeat_horizon_days,
            "log_level": self.log_level,
        }


def _positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {number}")
    return number
