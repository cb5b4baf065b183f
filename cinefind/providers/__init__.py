"""Providers package."""

from cinefind.context import AppContext
from cinefind.providers.base import Provider
from cinefind.providers.omdb import OMDbProvider

__all__ = [
    "Provider",
    "OMDbProvider",
    "PROVIDERS",
    "get_provider",
    "get_provider_names",
]

# Provider registry: name -> factory taking the application context
PROVIDERS: dict[str, type[Provider]] = {
    "omdb": OMDbProvider,
}


def get_provider_names() -> list[str]:
    """Get all available provider names."""
    return list(PROVIDERS)


def get_provider(name: str, context: AppContext) -> Provider | None:
    """Build a provider by name."""
    factory = PROVIDERS.get(name.lower())
    if factory is None:
        return None
    return factory.from_context(context)
