"""
OpenRouter provider implementation (secondary).
"""

from typing import Any, Dict, Optional

from .base import BaseProvider, extract_chat_completion_text
from .enums import Provider


class OpenRouterProvider(BaseProvider):
    """
    OpenRouter provider implementation.

    OpenRouter asks callers to identify themselves with HTTP-Referer and
    X-Title headers; both come from settings.
    """

    endpoint_url = "https://openrouter.ai/api/v1/chat/completions"

    def __init__(self, models, api_keys, http_client, app_url: str = "http://localhost:8000",
                 app_title: str = "WriteCoach", **options):
        self._app_url = app_url
        self._app_title = app_title
        super().__init__(Provider.SECONDARY, models, api_keys, http_client, **options)

    def build_headers(self, api_key: str) -> Dict[str, str]:
        headers = super().build_headers(api_key)
        headers["HTTP-Referer"] = self._app_url
        headers["X-Title"] = self._app_title
        return headers

    def extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        return extract_chat_completion_text(data)


# Self-register with the provider registry
from .registry import provider_registry
provider_registry.register(Provider.SECONDARY, OpenRouterProvider)
