from __future__ import annotations
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .errors import ConfigError

DEFAULT_IDLE_REFRESH_RATE_MINUTES = 30
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30

@dataclass
class AppConfig:
    calendar: str                     # file path or http(s)/webcal(s) link
    idle_refresh_rate_minutes: int
    image_key: Optional[str]
    request_timeout_seconds: float

    @property
    def idle_refresh_rate(self) -> timedelta:
        return timedelta(minutes=self.idle_refresh_rate_minutes)

def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default

def load_config(path: str) -> AppConfig:
    p = Path(path).expanduser()
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file ({p}): {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {p} must contain a mapping")
    cfg: Dict[str, Any] = data

    calendar = str(cfg.get("calendar") or "").strip()
    if not calendar:
        raise ConfigError("Empty 'calendar' property! Please fix the config file.")

    image_key = cfg.get("image_key")

    try:
        timeout = float(cfg.get("request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS))
    except (TypeError, ValueError):
        timeout = float(DEFAULT_REQUEST_TIMEOUT_SECONDS)

    return AppConfig(
        calendar=calendar,
        idle_refresh_rate_minutes=_positive_int(
            cfg.get("idle_refresh_rate_minutes"), DEFAULT_IDLE_REFRESH_RATE_MINUTES
        ),
        image_key=str(image_key) if image_key else None,
        request_timeout_seconds=timeout if timeout > 0 else float(DEFAULT_REQUEST_TIMEOUT_SECONDS),
    )
