"""Configuration management for CineFind."""

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Literal

from dotenv import dotenv_values

from cinefind.errors import ConfigError

logger = logging.getLogger(__name__)

API_KEY_VAR = "OMDB_API_KEY"


def get_config_dir() -> Path:
    """Get config directory path."""
    if os.name == "nt":
        base = Path(os.environ.get("APPDATA", Path.home()))
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "cinefind"


@dataclass
class Config:
    """CineFind configuration."""
    api_url: str = "https://www.omdbapi.com/"
    plot: Literal["short", "full"] = "full"
    pacing_ms: int = 50
    message_seconds: float = 5.0
    timeout: float = 30.0
    env_file: str = ".env"
    default_provider: str = "omdb"

    @property
    def pacing_seconds(self) -> float:
        return self.pacing_ms / 1000


_config: Config | None = None


def load_config() -> Config:
    """Load configuration from file."""
    global _config
    if _config is not None:
        return _config

    config_file = get_config_dir() / "config.json"

    if config_file.exists():
        known = {f.name for f in fields(Config)}
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            _config = Config(**{k: v for k, v in data.items() if k in known})
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Failed to load config from %s: %s", config_file, e)
            _config = Config()
    else:
        _config = Config()

    return _config


def save_config(config: Config) -> None:
    """Save configuration to file."""
    global _config
    _config = config

    config_dir = get_config_dir()
    config_file = config_dir / "config.json"

    try:
        config_dir.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(asdict(config), f, indent=2)
    except OSError as e:
        logger.error("Failed to save config to %s: %s", config_file, e)
        raise ConfigError(f"Could not save configuration to {config_file}.") from e


def get_config() -> Config:
    """Get current configuration."""
    return load_config()


def reset_config() -> None:
    """Forget the cached configuration so the next load re-reads the file."""
    global _config
    _config = None


def resolve_api_key(env_file: str | os.PathLike | None = ".env") -> str | None:
    """Resolve the OMDb API key.

    The ``OMDB_API_KEY`` environment variable wins; otherwise the key is read
    from the given env file. Returns None when neither provides a value.
    """
    key = os.environ.get(API_KEY_VAR, "").strip()
    if key:
        logger.debug("API key taken from the environment")
        return key

    if env_file and Path(env_file).is_file():
        key = (dotenv_values(env_file).get(API_KEY_VAR) or "").strip()
        if key:
            logger.debug("API key loaded from %s", env_file)
            return key

    logger.warning("No %s found in the environment or in %s", API_KEY_VAR, env_file)
    return None
