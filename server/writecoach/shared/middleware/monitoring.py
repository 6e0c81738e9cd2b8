"""
Request monitoring middleware and failover metrics.
"""
import re
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from loguru import logger
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


# Request metrics
http_requests_total = Counter(
    'writecoach_http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'writecoach_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)
)

active_requests = Gauge(
    'writecoach_active_requests',
    'Number of active requests'
)

# Failover metrics
llm_requests_total = Counter(
    'writecoach_llm_requests_total',
    'Provider calls by outcome',
    ['provider', 'model', 'status']
)

llm_request_duration_seconds = Histogram(
    'writecoach_llm_request_duration_seconds',
    'Provider call duration in seconds (all models tried)',
    ['provider'],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0)
)

circuit_open_total = Counter(
    'writecoach_circuit_open_total',
    'Circuit transitions to open',
    ['provider']
)

user_blocks_total = Counter(
    'writecoach_user_blocks_total',
    'Clients blocked after provider exhaustion'
)

response_cache_total = Counter(
    'writecoach_response_cache_total',
    'Response cache lookups and writes',
    ['result']
)

ai_responses_total = Counter(
    'writecoach_ai_responses_total',
    'Successful AI responses by what served them (provider name or cache)',
    ['served_by']
)

# Polled endpoints logged at DEBUG
QUIET_ENDPOINTS = frozenset({"/metrics", "/api/health"})

CERTIFICATE_PATH = re.compile(r"^/api/certificates/[^/]+$")


def add_monitoring_middleware(app: FastAPI):
    """
    Add monitoring middleware to the FastAPI app.
    Every response gets X-Request-ID; AI responses are also counted by the
    provider (or cache) that served them.
    """

    @app.middleware("http")
    async def monitoring_middleware(request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        endpoint = normalize_endpoint(request.url.path)
        quiet = endpoint in QUIET_ENDPOINTS
        started = time.perf_counter()
        active_requests.inc()

        with logger.contextualize(request_id=request_id, endpoint=endpoint):
            if not quiet:
                logger.info(f"-> {request.method} {endpoint}")
            try:
                response = await call_next(request)
            except Exception as e:
                http_requests_total.labels(method=request.method, endpoint=endpoint, status=500).inc()
                logger.exception(f"Unhandled {type(e).__name__} on {request.method} {endpoint}")
                raise
            finally:
                active_requests.dec()

            elapsed = time.perf_counter() - started
            http_requests_total.labels(method=request.method, endpoint=endpoint, status=response.status_code).inc()
            http_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(elapsed)

            served_by = response.headers.get("X-AI-Provider")
            if served_by:
                ai_responses_total.labels(served_by=served_by).inc()

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{elapsed:.3f}"

            log = logger.debug if quiet else logger.info
            log(f"<- {request.method} {endpoint} {response.status_code} in {elapsed:.3f}s")
            return response

    @app.get("/metrics", include_in_schema=False, tags=["monitoring"])
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST,
            headers={"Cache-Control": "no-cache, no-store, must-revalidate"}
        )


def normalize_endpoint(path: str) -> str:
    """Collapse certificate ids so the endpoint label stays low-cardinality."""
    return CERTIFICATE_PATH.sub("/api/certificates/{id}", path.rstrip("/") or "/")


def record_llm_request(provider: str, model: str, duration: float, success: bool):
    """Record metrics for one provider call."""
    status = "success" if success else "error"
    llm_requests_total.labels(provider=provider, model=model or "none", status=status).inc()
    if duration > 0:
        llm_request_duration_seconds.labels(provider=provider).observe(duration)


def record_circuit_opened(provider: str):
    circuit_open_total.labels(provider=provider).inc()


def record_user_block():
    user_blocks_total.inc()


def record_cache_result(result: str):
    """result is one of: hit, miss, store, error."""
    response_cache_total.labels(result=result).inc()
