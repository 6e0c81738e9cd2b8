"""
Translation analysis endpoint.
Controller only - the coach service owns blocking, caching and failover.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from loguru import logger

from ..shared.core.dependencies import ClientIdentity, CoachServiceDep
from ..shared.models.requests import AnalyzeRequest
from ..shared.models.responses import AnalysisResult


router = APIRouter(
    tags=["analyze"]
)


@router.post(
    "/analyze",
    response_model=AnalysisResult,
    responses={
        429: {"description": "Client blocked or rate limited"},
        503: {"description": "All AI providers exhausted"},
        500: {"description": "AI response could not be parsed"},
    },
)
async def analyze(
    request: AnalyzeRequest,
    client_identity: ClientIdentity,
    coach: CoachServiceDep
):
    """
    Score a learner translation against its Vietnamese source.

    Responses carry X-AI-Provider (serving provider, or "cache") and
    X-Cache (HIT or MISS).
    """
    logger.info(f"Analyze request from {client_identity} (target: {request.target})")
    result = await coach.analyze_translation(request, client_identity)

    return JSONResponse(
        content=result.payload,
        headers={
            "X-AI-Provider": result.provider or "cache",
            "X-Cache": "HIT" if result.cache_hit else "MISS",
        },
    )
