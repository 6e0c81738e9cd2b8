"""
Test helpers: a fake clock, a store that is always down, and
chat-completion response builders.
"""

import json
from typing import Optional

import httpx

from writecoach.shared.clients.store import KeyValueStore, StoreUnavailable


VALID_ANALYSIS = {
    "accuracy": 82,
    "vocabulary_status": "Good",
    "grammar_status": "Warning",
    "suggestions": [
        {"error": "Internet very popular", "fix": "The internet is very popular", "reason": "Thiếu động từ 'is'."}
    ],
    "refined_text": "",
}

VALID_TOPIC = {
    "title": "Do you think the internet has more advantages or disadvantages for young people?",
    "sections": [
        {"id": "intro", "label": "Introduction", "vn": "Ngày nay internet rất phổ biến."},
        {"id": "body1", "label": "Body Paragraph 1", "vn": "Internet giúp học tập."},
        {"id": "body2", "label": "Body Paragraph 2", "vn": "Tuy nhiên có nhiều rủi ro."},
        {"id": "conclusion", "label": "Conclusion", "vn": "Tóm lại, lợi nhiều hơn hại."},
    ],
    "instructions": "Translate each paragraph.",
}


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class UnreachableStore(KeyValueStore):
    """Store whose every operation fails like a Redis outage."""

    def __init__(self):
        self.calls = []

    async def _fail(self, operation: str, key: str):
        self.calls.append((operation, key))
        raise StoreUnavailable(operation, key, ConnectionError("connection refused"))

    async def get(self, key: str) -> Optional[str]:
        await self._fail("get", key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        await self._fail("set", key)

    async def increment(self, key: str, ttl: Optional[int] = None) -> int:
        await self._fail("increment", key)

    async def delete(self, key: str) -> None:
        await self._fail("delete", key)

    async def exists(self, key: str) -> bool:
        await self._fail("exists", key)

    async def ping(self) -> bool:
        return False


def completion(content: str) -> dict:
    """Chat-completions response body carrying content."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
    }


def completion_response(content: str) -> httpx.Response:
    return httpx.Response(200, json=completion(content))


def analysis_text(payload: Optional[dict] = None) -> str:
    return json.dumps(payload or VALID_ANALYSIS, ensure_ascii=False)
