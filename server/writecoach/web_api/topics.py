"""
Essay topic generation endpoint.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from loguru import logger

from ..shared.core.dependencies import ClientIdentity, CoachServiceDep
from ..shared.models.requests import GenerateTopicRequest
from ..shared.models.responses import GeneratedTopic


router = APIRouter(
    tags=["topics"]
)


@router.post("/generate-topic", response_model=GeneratedTopic)
async def generate_topic(
    request: GenerateTopicRequest,
    client_identity: ClientIdentity,
    coach: CoachServiceDep
):
    """Generate a fresh topic for a certificate and band. Never cached."""
    logger.info(f"Topic request from {client_identity}: {request.certificate_id} band {request.band}")
    result = await coach.generate_topic(request, client_identity)

    return JSONResponse(
        content=result.payload,
        headers={"X-AI-Provider": result.provider},
    )
