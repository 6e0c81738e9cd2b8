"""
Factory for the provider failover chain.
Uses the provider registry for dynamic provider management.
"""

from typing import Dict, List, Optional

import httpx
from loguru import logger

from ...core.config import Settings
from ...providers.base import BaseProvider
from ...providers.enums import Provider
from ...providers.registry import get_provider_registry


class EndpointFactory:
    """
    Builds provider clients from the registry, settings and model catalogue.

    Providers without credentials or models are left out of the chain.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self.settings = settings
        self.http_client = http_client
        self._registry = get_provider_registry()

    def create_endpoint(self, provider: Provider, models: List[str], api_keys: List[str]) -> Optional[BaseProvider]:
        """
        Create a provider client.

        Returns:
            Provider instance, or None if the provider is not registered
        """
        provider_class = self._registry.get_provider_class(provider)
        if not provider_class:
            logger.error(f"Unsupported provider: {provider.value}. Available providers: {[p.value for p in self._registry.list_providers()]}")
            return None

        options = {
            "temperature": self.settings.provider_temperature,
            "max_tokens": self.settings.provider_max_tokens,
            "timeout": self.settings.provider_timeout,
        }
        if provider == Provider.SECONDARY:
            options["app_url"] = self.settings.app_url
            options["app_title"] = self.settings.app_title

        return provider_class(models, api_keys, self.http_client, **options)

    def build_chain(self, provider_models: Dict[Provider, List[str]]) -> List[BaseProvider]:
        """
        Create every configured provider, in priority order.

        Args:
            provider_models: Ordered model candidates per provider

        Returns:
            Provider clients (possibly empty)
        """
        chain: List[BaseProvider] = []
        for provider in Provider.priority_order():
            api_keys = self.settings.get_api_keys(provider)
            models = provider_models.get(provider, [])
            if not api_keys:
                logger.info(f"No API keys for {provider.value}; leaving it out of the chain")
                continue
            if not models:
                logger.warning(f"No models configured for {provider.value}; leaving it out of the chain")
                continue

            endpoint = self.create_endpoint(provider, models, api_keys)
            if endpoint is not None:
                chain.append(endpoint)

        if not chain:
            logger.warning("Provider chain is empty: every dispatch will fail with no_providers")
        else:
            logger.info(f"Provider chain: {' -> '.join(client.get_provider() for client in chain)}")
        return chain
