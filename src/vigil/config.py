"""Configuration management for Vigil."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

VIGIL_HOME = Path(os.environ.get("VIGIL_HOME", Path.home() / "vigil"))
CONFIG_FILE = VIGIL_HOME / "config" / "vigil.conf"

DEFAULT_API_URL = "http://localhost:8000/followups"


@dataclass
class Config:
    """Vigil configuration."""

    api_url: str = DEFAULT_API_URL
    fetch_timeout: float = 10.0
    refresh_interval: int = 60
    include_inactive: bool = False


def _parse_bool(value: str) -> bool:
    return value.lower() in ("1", "true", "yes", "on")


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from vigil.conf, then apply environment overrides."""
    config = Config()
    path = path or CONFIG_FILE

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip().lower()
            value = _unquote(value.strip())

            match key:
                case "api_url":
                    config.api_url = value.rstrip("/")
                case "fetch_timeout":
                    try:
                        config.fetch_timeout = float(value)
                    except ValueError:
                        logger.warning(f"Invalid FETCH_TIMEOUT {value!r}, using {config.fetch_timeout}")
                case "refresh_interval":
                    try:
                        config.refresh_interval = int(value)
                    except ValueError:
                        logger.warning(f"Invalid REFRESH_INTERVAL {value!r}, using {config.refresh_interval}")
                case "include_inactive":
                    config.include_inactive = _parse_bool(value)
                case _:
                    logger.debug(f"Ignoring unknown config key: {key}")

    env_url = os.environ.get("VIGIL_API_URL")
    if env_url:
        config.api_url = env_url.rstrip("/")

    return config
