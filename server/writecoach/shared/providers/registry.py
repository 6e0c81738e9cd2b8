"""
Provider Registry - maps provider identities to client implementations.
Provider modules self-register on import.
"""

from typing import Dict, List, Optional, Type, Union
from loguru import logger

from .base import BaseProvider
from .enums import Provider


class ProviderRegistry:
    """
    Registry for provider client classes.

    Lookups accept either a Provider member or its string value (or a
    registered alias such as "github-models").
    """

    def __init__(self):
        self._providers: Dict[Provider, Type[BaseProvider]] = {}
        self._aliases: Dict[str, Provider] = {}
        logger.debug("ProviderRegistry initialized")

    def register(self, provider: Provider, provider_class: Type[BaseProvider], aliases: Optional[List[str]] = None) -> None:
        """
        Register a provider implementation.

        Args:
            provider: Provider identity served by provider_class
            provider_class: Class implementing BaseProvider
            aliases: Optional alternative names

        Raises:
            ValueError: If provider_class is not a BaseProvider subclass
        """
        if not issubclass(provider_class, BaseProvider):
            raise ValueError(f"Provider class {provider_class.__name__} must inherit from BaseProvider")

        if provider in self._providers:
            logger.warning(f"Provider '{provider.value}' already registered, overwriting with {provider_class.__name__}")

        self._providers[provider] = provider_class
        logger.debug(f"Registered provider: {provider.value} -> {provider_class.__name__}")

        for alias in aliases or []:
            self._aliases[alias.lower()] = provider

    def resolve(self, name: Union[Provider, str]) -> Optional[Provider]:
        """Turn a name, value or alias into a Provider member."""
        if isinstance(name, Provider):
            return name
        name_lower = name.lower()
        for provider in Provider:
            if provider.value == name_lower or provider.name.lower() == name_lower:
                return provider
        return self._aliases.get(name_lower)

    def get_provider_class(self, name: Union[Provider, str]) -> Optional[Type[BaseProvider]]:
        """
        Get provider class by identity, name or alias.

        Returns:
            Provider class if found, None otherwise
        """
        provider = self.resolve(name)
        if provider is None:
            return None
        return self._providers.get(provider)

    def list_providers(self) -> List[Provider]:
        """List registered providers in failover priority order."""
        return [provider for provider in Provider.priority_order() if provider in self._providers]


# Global registry instance
provider_registry = ProviderRegistry()


def get_provider_registry() -> ProviderRegistry:
    """
    Get the global provider registry instance.

    Returns:
        Global ProviderRegistry instance
    """
    return provider_registry
