"""
GitHub Models provider implementation (tertiary).
Azure inference endpoint; model names carry no vendor prefix.
"""

from typing import Any, Dict, Optional

from .base import BaseProvider, extract_chat_completion_text
from .enums import Provider


class GitHubModelsProvider(BaseProvider):
    """GitHub Models provider implementation."""

    endpoint_url = "https://models.inference.ai.azure.com/chat/completions"

    def __init__(self, models, api_keys, http_client, **options):
        super().__init__(Provider.TERTIARY, models, api_keys, http_client, **options)

    def extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        return extract_chat_completion_text(data)


# Self-register with the provider registry
from .registry import provider_registry
provider_registry.register(Provider.TERTIARY, GitHubModelsProvider, aliases=["github-models"])
