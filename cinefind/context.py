"""Application context shared by the session, providers and views."""

from dataclasses import dataclass, field

from rich.console import Console

from cinefind.config import Config, get_config, resolve_api_key


@dataclass
class AppContext:
    """Everything resolved once at startup."""
    config: Config
    api_key: str | None = None
    console: Console = field(default_factory=Console)

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)


def build_context(config: Config | None = None, console: Console | None = None) -> AppContext:
    """Build the application context: configuration, credential and console."""
    config = config or get_config()
    return AppContext(
        config=config,
        api_key=resolve_api_key(config.env_file),
        console=console or Console(),
    )
