"""
Tests for the writing coach service: request order, caching rules and
error mapping on top of the failover core.
"""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from writecoach.shared.core.exceptions import (
    AllProvidersExhaustedError,
    InvalidCertificateError,
    InvalidRequestError,
    RateLimitError,
    ResponseParseError,
    UserBlockedError,
)
from writecoach.shared.models.requests import AnalyzeRequest, GenerateTopicRequest
from writecoach.shared.models.responses import Certificate
from writecoach.shared.providers import Provider, ProviderResult
from writecoach.shared.services.coach import WritingCoachService
from writecoach.shared.services.dispatch import FailoverDispatcher
from writecoach.shared.services.rate_limit import RateLimitResult

from helpers import VALID_ANALYSIS, VALID_TOPIC, analysis_text


CLIENT = "198.51.100.4-feedfacecafebeef"

CERTIFICATES = {
    "ielts-academic": Certificate(
        id="ielts-academic",
        name="IELTS Academic",
        fullName="International English Language Testing System (Academic)",
        bands=["6.0", "6.5", "7.0"],
        format="Academic essay, 250-300 words.",
    )
}


def analyze_request(user_text: str = "The internet is very popular today.") -> AnalyzeRequest:
    return AnalyzeRequest(userEn=user_text, sourceVn="Internet ngày nay rất phổ biến.", target="IELTS Academic Band 7.0")


def provider_client(provider: Provider, *texts: str) -> MagicMock:
    client = MagicMock()
    client.identity = provider
    client.get_provider.return_value = provider.value
    client.generate = AsyncMock(side_effect=[ProviderResult.ok(text=text, model="model-1") for text in texts])
    return client


def failing_client(provider: Provider) -> MagicMock:
    client = provider_client(provider)
    client.generate = AsyncMock(return_value=ProviderResult.failed("HTTP 500"))
    return client


@pytest.fixture
def make_service(circuit_breaker, user_blocks, response_cache):
    def factory(*clients, rate_limiter=None, max_submission_length=10000):
        dispatcher = FailoverDispatcher(list(clients), circuit_breaker, user_blocks)
        return WritingCoachService(
            dispatcher,
            response_cache,
            CERTIFICATES,
            rate_limiter=rate_limiter,
            max_submission_length=max_submission_length,
        )
    return factory


class TestAnalyzeTranslation:
    """Analysis flow."""

    @pytest.mark.asyncio
    async def test_second_identical_request_hits_cache(self, make_service):
        client = provider_client(Provider.PRIMARY, analysis_text())
        service = make_service(client)

        first = await service.analyze_translation(analyze_request(), CLIENT)
        second = await service.analyze_translation(analyze_request("  the INTERNET is very popular today. "), CLIENT)

        assert first.cache_hit is False
        assert first.provider == "gemini"
        assert second.cache_hit is True
        assert second.provider is None
        assert second.payload == first.payload
        assert client.generate.await_count == 1

    @pytest.mark.asyncio
    async def test_prompt_carries_submission(self, make_service):
        client = provider_client(Provider.PRIMARY, analysis_text())
        await make_service(client).analyze_translation(analyze_request(), CLIENT)

        prompt = client.generate.await_args.args[0]
        assert "Internet ngày nay rất phổ biến." in prompt
        assert "The internet is very popular today." in prompt
        assert "IELTS Academic Band 7.0" in prompt

    @pytest.mark.asyncio
    async def test_malformed_response_is_not_cached(self, make_service, store):
        client = provider_client(Provider.PRIMARY, "not json at all", analysis_text())
        service = make_service(client)

        with pytest.raises(ResponseParseError):
            await service.analyze_translation(analyze_request(), CLIENT)

        fingerprint = service.cache.fingerprint(*_fields(analyze_request()))
        assert await store.get(f"essay:{fingerprint}") is None

        retried = await service.analyze_translation(analyze_request(), CLIENT)
        assert retried.cache_hit is False
        assert client.generate.await_count == 2

    @pytest.mark.asyncio
    async def test_repairable_response_is_cached(self, make_service, store):
        repairable = "```json\n" + analysis_text()[:-1] + ",}\n```"
        client = provider_client(Provider.PRIMARY, repairable)
        service = make_service(client)

        result = await service.analyze_translation(analyze_request(), CLIENT)

        assert result.payload["accuracy"] == VALID_ANALYSIS["accuracy"]
        fingerprint = service.cache.fingerprint(*_fields(analyze_request()))
        cached = json.loads(await store.get(f"essay:{fingerprint}"))
        assert cached == result.payload

    @pytest.mark.asyncio
    async def test_blocked_client_is_rejected_before_dispatch(self, make_service, user_blocks):
        client = provider_client(Provider.PRIMARY, analysis_text())
        await user_blocks.block(CLIENT)

        with pytest.raises(UserBlockedError) as exc_info:
            await make_service(client).analyze_translation(analyze_request(), CLIENT)

        assert exc_info.value.status_code == 429
        assert exc_info.value.headers["Retry-After"] == "60"
        client.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exhaustion_raises_and_blocks(self, make_service):
        service = make_service(failing_client(Provider.PRIMARY), failing_client(Provider.SECONDARY))

        with pytest.raises(AllProvidersExhaustedError) as exc_info:
            await service.analyze_translation(analyze_request(), CLIENT)
        assert exc_info.value.status_code == 503
        assert exc_info.value.reason == "all_providers_failed"
        assert exc_info.value.headers["Retry-After"] == "60"

        with pytest.raises(UserBlockedError):
            await service.analyze_translation(analyze_request(), CLIENT)

    @pytest.mark.asyncio
    async def test_rate_limited_client(self, make_service):
        limiter = MagicMock()
        limiter.check = AsyncMock(return_value=RateLimitResult(
            allowed=False, remaining=0, reason="Too many requests", retry_after=7
        ))
        client = provider_client(Provider.PRIMARY, analysis_text())

        with pytest.raises(RateLimitError) as exc_info:
            await make_service(client, rate_limiter=limiter).analyze_translation(analyze_request(), CLIENT)

        assert exc_info.value.headers["Retry-After"] == "7"
        client.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_submission_too_long(self, make_service):
        client = provider_client(Provider.PRIMARY, analysis_text())
        with pytest.raises(InvalidRequestError):
            await make_service(client, max_submission_length=50).analyze_translation(analyze_request(), CLIENT)


class TestGenerateTopic:
    """Topic flow."""

    @pytest.mark.asyncio
    async def test_generates_topic_without_caching(self, make_service, store):
        client = provider_client(Provider.SECONDARY, json.dumps(VALID_TOPIC), json.dumps(VALID_TOPIC))
        service = make_service(client)
        request = GenerateTopicRequest(certificateId="ielts-academic", band="7.0")

        first = await service.generate_topic(request, CLIENT)
        await service.generate_topic(request, CLIENT)

        assert first.provider == "openrouter"
        assert first.payload["sections"][0]["id"] == "intro"
        assert client.generate.await_count == 2
        prompt = client.generate.await_args.args[0]
        assert "International English Language Testing System (Academic)" in prompt
        assert "Academic essay, 250-300 words." in prompt

    @pytest.mark.asyncio
    async def test_unknown_certificate(self, make_service):
        client = provider_client(Provider.PRIMARY)
        with pytest.raises(InvalidCertificateError) as exc_info:
            await make_service(client).generate_topic(GenerateTopicRequest(certificateId="toeic", band="900"), CLIENT)
        assert exc_info.value.status_code == 400
        client.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_band_not_offered(self, make_service):
        client = provider_client(Provider.PRIMARY)
        with pytest.raises(InvalidCertificateError):
            await make_service(client).generate_topic(GenerateTopicRequest(certificateId="ielts-academic", band="9.5"), CLIENT)

    @pytest.mark.asyncio
    async def test_invalid_topic_is_a_parse_failure(self, make_service):
        client = provider_client(Provider.PRIMARY, '{"title": "Only a title"}')
        with pytest.raises(ResponseParseError):
            await make_service(client).generate_topic(GenerateTopicRequest(certificateId="ielts-academic", band="6.5"), CLIENT)


def _fields(request: AnalyzeRequest):
    return request.user_text, request.source_text, request.target
