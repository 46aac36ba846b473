"""Configuration loading."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import yaml

from .fetchers.battleboard import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from .models import RegionSpec

logger = logging.getLogger(__name__)

_INTERVAL_KEYS = (
    "update_interval",
    "display_interval",
    "animation_speed",
    "sync_interval",
)


@dataclass(frozen=True)
class Settings:
    """Settings for the poller and the rotating display. Intervals are in ms."""

    regions: Tuple[RegionSpec, ...] = field(default_factory=tuple)
    lang: str = "en"
    api_host: str = "weather.gc.ca"
    update_interval: int = 60000
    display_interval: int = 5000
    animation_speed: int = 1000
    show_no_alerts_msg: bool = False
    periodic_sync: bool = False
    sync_interval: int = 600000
    request_timeout: float = DEFAULT_TIMEOUT
    max_workers: int = 8
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_dict(cls, config: Optional[dict]) -> "Settings":
        """Build settings from a parsed config mapping, filling in defaults."""
        config = config or {}
        defaults = cls()

        regions: List[RegionSpec] = []
        for entry in config.get("regions") or []:
            if isinstance(entry, dict):
                code = entry.get("code")
                regions.append(RegionSpec(code=str(code) if code else ""))
            elif entry:
                regions.append(RegionSpec(code=str(entry)))

        values = {}
        for key in _INTERVAL_KEYS:
            raw = config.get(key, getattr(defaults, key))
            try:
                value = int(raw)
            except (TypeError, ValueError) as e:
                raise ValueError(f"{key} must be a number of milliseconds: {raw!r}") from e
            if value < 0:
                raise ValueError(f"{key} must not be negative: {value}")
            values[key] = value

        try:
            request_timeout = float(config.get("request_timeout", defaults.request_timeout))
            max_workers = max(1, int(config.get("max_workers", defaults.max_workers)))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid request settings: {e}") from e

        return cls(
            regions=tuple(regions),
            lang=str(config.get("lang", defaults.lang) or ""),
            api_host=str(config.get("api_host", defaults.api_host) or ""),
            show_no_alerts_msg=bool(config.get("show_no_alerts_msg", defaults.show_no_alerts_msg)),
            periodic_sync=bool(config.get("periodic_sync", defaults.periodic_sync)),
            request_timeout=request_timeout,
            max_workers=max_workers,
            user_agent=str(config.get("user_agent", defaults.user_agent)),
            **values,
        )


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file."""
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, "r") as f:
        config = yaml.safe_load(f)

    if config is not None and not isinstance(config, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return config or {}


def load_settings(config_path: str) -> Settings:
    """Load and validate settings from a YAML file."""
    settings = Settings.from_dict(load_config(config_path))
    logger.debug(f"Loaded {len(settings.regions)} regions from {config_path}")
    return settings
