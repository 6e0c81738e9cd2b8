"""
Writing coach service - the two AI use cases on top of the failover core.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from loguru import logger

from ...core.exceptions import (
    AllProvidersExhaustedError,
    InvalidCertificateError,
    InvalidRequestError,
    RateLimitError,
    UserBlockedError,
)
from ...models.internal import DispatchResult
from ...models.requests import AnalyzeRequest, GenerateTopicRequest
from ...models.responses import AnalysisResult, Certificate, GeneratedTopic
from ...prompts.templates import build_evaluator_prompt, build_topic_prompt
from ..cache.cache_service import ResponseCache
from ..dispatch.dispatcher import FailoverDispatcher
from ..parsing.structured_response import parse_structured
from ..rate_limit.rate_limiter import ClientRateLimiter


@dataclass
class CoachResponse:
    """Validated payload plus attribution for response headers."""
    payload: Dict[str, Any]
    provider: Optional[str] = None
    model: Optional[str] = None
    cache_hit: bool = False


class WritingCoachService:
    """
    Runs translation analysis and topic generation.

    Request order: validation, user block, rate limit, cache (analysis only),
    dispatch, parse. Parse failures are never cached.
    """

    def __init__(
        self,
        dispatcher: FailoverDispatcher,
        cache: ResponseCache,
        certificates: Mapping[str, Certificate],
        rate_limiter: Optional[ClientRateLimiter] = None,
        max_submission_length: int = 10000,
        block_retry_after: int = 60,
    ):
        self.dispatcher = dispatcher
        self.cache = cache
        self.certificates = certificates
        self.rate_limiter = rate_limiter
        self.max_submission_length = max_submission_length
        self.block_retry_after = block_retry_after

    async def _admit(self, client_identity: str) -> None:
        """Reject blocked or rate-limited clients before any AI work."""
        if await self.dispatcher.is_user_blocked(client_identity):
            logger.info(f"Rejecting blocked client {client_identity}")
            raise UserBlockedError(retry_after=self.block_retry_after)

        if self.rate_limiter is None:
            return
        result = await self.rate_limiter.check(client_identity)
        if not result.allowed:
            raise RateLimitError(result.reason or "Rate limit exceeded", retry_after=result.retry_after)

    async def _dispatch(self, prompt: str, client_identity: str) -> DispatchResult:
        result = await self.dispatcher.dispatch(prompt, client_identity)
        if not result.success:
            raise AllProvidersExhaustedError(
                reason=result.failure.value,
                message=result.error or "All AI providers failed",
                retry_after=self.block_retry_after,
            )
        return result

    async def analyze_translation(self, request: AnalyzeRequest, client_identity: str) -> CoachResponse:
        """
        Evaluate a learner translation.

        Args:
            request: Validated submission
            client_identity: Caller identity for blocks and rate limits

        Returns:
            CoachResponse with an AnalysisResult payload

        Raises:
            InvalidRequestError: Submission too long
            UserBlockedError / RateLimitError: Caller may not proceed yet
            AllProvidersExhaustedError: No provider produced text
            ResponseParseError: Provider text is not a valid AnalysisResult
        """
        if request.total_length() > self.max_submission_length:
            raise InvalidRequestError(f"Submission too long (max {self.max_submission_length} characters)")

        await self._admit(client_identity)

        fingerprint = self.cache.fingerprint(request.user_text, request.source_text, request.target)
        cached = await self.cache.lookup(fingerprint)
        if cached is not None:
            logger.info(f"Serving cached analysis {fingerprint[:8]} to {client_identity}")
            return CoachResponse(payload=cached, cache_hit=True)

        prompt = build_evaluator_prompt(request.target, request.source_text, request.user_text)
        result = await self._dispatch(prompt, client_identity)

        analysis = parse_structured(result.text, AnalysisResult)
        payload = analysis.model_dump()
        await self.cache.store(fingerprint, payload)

        return CoachResponse(
            payload=payload,
            provider=result.provider_used.value,
            model=result.model_used,
        )

    def get_certificate(self, certificate_id: str, band: Optional[str] = None) -> Certificate:
        """Look up a certificate, optionally checking that it offers band."""
        certificate = self.certificates.get(certificate_id)
        if certificate is None:
            raise InvalidCertificateError(certificate_id)
        if band is not None and not certificate.offers_band(band):
            raise InvalidCertificateError(certificate_id, band)
        return certificate

    async def generate_topic(self, request: GenerateTopicRequest, client_identity: str) -> CoachResponse:
        """Generate a fresh essay topic. Topics are never cached."""
        certificate = self.get_certificate(request.certificate_id, request.band)

        await self._admit(client_identity)

        prompt = build_topic_prompt(certificate.full_name, request.band, certificate.format)
        result = await self._dispatch(prompt, client_identity)

        topic = parse_structured(result.text, GeneratedTopic)
        logger.info(f"Generated {certificate.id} band {request.band} topic via {result.provider_used.value}")

        return CoachResponse(
            payload=topic.model_dump(),
            provider=result.provider_used.value,
            model=result.model_used,
        )
