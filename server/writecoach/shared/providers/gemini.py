"""
Gemini provider implementation (primary).
Uses Google's OpenAI-compatible chat-completions endpoint.
"""

from typing import Any, Dict, Optional

from .base import BaseProvider, extract_chat_completion_text
from .enums import Provider


class GeminiProvider(BaseProvider):
    """Gemini provider implementation."""

    endpoint_url = "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions"

    def __init__(self, models, api_keys, http_client, **options):
        super().__init__(Provider.PRIMARY, models, api_keys, http_client, **options)

    def extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        return extract_chat_completion_text(data)


# Self-register with the provider registry
from .registry import provider_registry
provider_registry.register(Provider.PRIMARY, GeminiProvider, aliases=["google"])
