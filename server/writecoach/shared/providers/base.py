"""
Base provider class for chat-completion providers.
"""

from abc import ABC, abstractmethod
import hashlib
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger
from pydantic import BaseModel

from .enums import Provider


# Quota, auth, rate limit and unknown-model responses move on to the next model
RETRYABLE_STATUSES = frozenset({401, 402, 403, 404, 429})


class ProviderResult(BaseModel):
    """Uniform outcome of one provider call (all keys and models tried)."""
    success: bool
    text: Optional[str] = None
    model: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def ok(cls, text: str, model: str) -> "ProviderResult":
        return cls(success=True, text=text, model=model)

    @classmethod
    def failed(cls, error_message: str) -> "ProviderResult":
        return cls(success=False, error_message=error_message)


class BaseProvider(ABC):
    """
    Abstract base class for providers speaking the chat-completions wire format.

    One call tries every (API key, model) pair in order until one yields text.
    Expected failures (quota, auth, transport errors, empty completions) are
    reported through ProviderResult; only malformed configuration raises.
    """

    endpoint_url: str = ""

    def __init__(
        self,
        provider: Provider,
        models: List[str],
        api_keys: List[str],
        http_client: httpx.AsyncClient,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout: float = 30.0,
    ):
        """
        Initialize a provider client.

        Args:
            provider: Provider identity (e.g. Provider.PRIMARY)
            models: Model tags tried in order within one call
            api_keys: Credentials tried in order, each against every model
            http_client: Shared async HTTP client
            temperature: Sampling temperature sent with every request
            max_tokens: Output token cap sent with every request
            timeout: Per-request timeout in seconds

        Raises:
            ValueError: If no models or no API keys are configured
        """
        if not models:
            raise ValueError(f"{provider.value} provider needs at least one model")
        api_keys = [key for key in api_keys if key]
        if not api_keys:
            raise ValueError(f"{provider.value} provider needs at least one API key")
        if not self.endpoint_url:
            raise ValueError(f"{type(self).__name__} does not define endpoint_url")

        self._provider = provider
        self._models = list(models)
        self._api_keys = api_keys
        self._http = http_client
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._timeout = timeout
        logger.info(f"Initialized {self.summary()}")

    @property
    def identity(self) -> Provider:
        return self._provider

    @property
    def models(self) -> List[str]:
        return list(self._models)

    def get_provider(self) -> str:
        """Get the provider name."""
        return self._provider.value

    def build_headers(self, api_key: str) -> Dict[str, str]:
        """Request headers for one attempt. Subclasses may add attribution headers."""
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def build_payload(self, model: str, prompt: str) -> Dict[str, Any]:
        return {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }

    @abstractmethod
    def extract_text(self, data: Dict[str, Any]) -> Optional[str]:
        """Pull the completion text out of a decoded 2xx response body."""

    async def generate(self, prompt: str) -> ProviderResult:
        """
        Send the prompt, walking keys and models until one returns text.

        Args:
            prompt: Fully composed prompt

        Returns:
            ProviderResult with the text and serving model, or the last error
        """
        last_error = "no attempt made"

        for key_index, api_key in enumerate(self._api_keys, start=1):
            for model in self._models:
                label = f"{self.get_provider()}/{model} (key {key_index}/{len(self._api_keys)})"
                try:
                    response = await self._http.post(
                        self.endpoint_url,
                        headers=self.build_headers(api_key),
                        json=self.build_payload(model, prompt),
                        timeout=self._timeout,
                    )
                except httpx.HTTPError as e:
                    last_error = f"{model}: {type(e).__name__}: {e}"
                    logger.warning(f"{label} transport error: {type(e).__name__}: {e}")
                    continue

                if response.status_code in RETRYABLE_STATUSES:
                    last_error = f"{model}: HTTP {response.status_code}"
                    logger.warning(f"{label} returned {response.status_code}, trying next model")
                    continue

                if response.is_error:
                    message = self._describe_error(response)
                    logger.error(f"{label} failed: {message}")
                    return ProviderResult.failed(message)

                try:
                    text = self.extract_text(response.json())
                except ValueError:
                    text = None

                if not text or not text.strip():
                    last_error = f"{model}: empty completion"
                    logger.warning(f"{label} returned no text, trying next model")
                    continue

                logger.info(f"{label} succeeded")
                return ProviderResult.ok(text=text, model=model)

        return ProviderResult.failed(f"All {self.get_provider()} models failed (last error: {last_error})")

    def _describe_error(self, response: httpx.Response) -> str:
        """Best-effort error message from a non-2xx response."""
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and error.get("message"):
                return f"HTTP {response.status_code}: {error['message']}"
            if isinstance(error, str):
                return f"HTTP {response.status_code}: {error}"
        return f"HTTP {response.status_code}: {response.reason_phrase}"

    def summary(self) -> str:
        """Get a summary string for this provider (key hashes, never keys)."""
        key_hashes = ",".join(hashlib.sha256(key.encode()).hexdigest()[:8] for key in self._api_keys)
        return f"{self.get_provider()} provider [{', '.join(self._models)}] ({key_hashes})"


def extract_chat_completion_text(data: Dict[str, Any]) -> Optional[str]:
    """Read choices[0].message.content from a chat-completions body."""
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None
