"""Configuration loader for food-safety media collectors."""

from __future__ import annotations

import yaml
from pathlib import Path
from typing import Any, Dict, Optional

from .http_client import DEFAULT_USER_AGENT, HTTPConfig

ALL_SOURCES = ("fsn", "fsm", "fda", "fsis", "cdc")


class MonitorConfig:
    """Central configuration container for media collectors.

    The YAML document has two sections: ``settings`` (transport and window
    defaults) and ``sources`` keyed by source key. Every source entry may
    set ``enabled`` plus collector-specific keyword options such as
    ``feed_url`` or ``limit``.
    """

    DEFAULT_CONFIG_PATH = Path("config/media_sources.yaml")

    def __init__(self, config_path: Optional[Path | str] = None) -> None:
        path = Path(config_path) if config_path else self.DEFAULT_CONFIG_PATH
        if not path.is_absolute():
            path = Path.cwd() / path
        self.config_path = path
        self._data = self._load_config()

    @classmethod
    def defaults(cls) -> "MonitorConfig":
        config = cls.__new__(cls)
        config.config_path = None
        config._data = {"sources": {}, "settings": {}}
        return config

    def _load_config(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            return {"sources": {}, "settings": {}}
        with open(self.config_path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping: {self.config_path}")
        return data

    def _source_data(self, source_key: str) -> Dict[str, Any]:
        return (self._data.get("sources") or {}).get(source_key) or {}

    def is_enabled(self, source_key: str) -> bool:
        return bool(self._source_data(source_key).get("enabled", True))

    def enabled_sources(self) -> list[str]:
        return [key for key in ALL_SOURCES if self.is_enabled(key)]

    def source_options(self, source_key: str) -> Dict[str, Any]:
        """Collector keyword options for a source (everything but ``enabled``)."""
        return {key: value for key, value in self._source_data(source_key).items() if key != "enabled"}

    def get_setting(self, key: str, default: Any = None) -> Any:
        return (self._data.get("settings") or {}).get(key, default)

    def http_config(self) -> HTTPConfig:
        return HTTPConfig(
            timeout_seconds=float(self.get_setting("timeout_seconds", 15.0)),
            max_redirects=int(self.get_setting("max_redirects", 5)),
            user_agent=self.get_setting("user_agent", DEFAULT_USER_AGENT),
        )

    @property
    def default_days(self) -> int:
        return int(self.get_setting("default_days", 1))
