"""
Visitor counter endpoints.
"""

from fastapi import APIRouter

from ..shared.core.dependencies import VisitorCounterDep
from ..shared.models.requests import UserCounterRequest
from ..shared.models.responses import UserCountResponse, UserRegistrationResponse


router = APIRouter(
    tags=["user-counter"]
)


@router.get("/user-counter", response_model=UserCountResponse)
async def get_user_count(counter: VisitorCounterDep):
    """Total distinct visitors; 0 when the store is unreachable."""
    return UserCountResponse(total_users=await counter.total_users())


@router.post("/user-counter", response_model=UserRegistrationResponse)
async def register_visit(request: UserCounterRequest, counter: VisitorCounterDep):
    """Count a fingerprint once per TTL window and refresh it on return visits."""
    is_new_user, total_users = await counter.register(request.fingerprint)
    return UserRegistrationResponse(is_new_user=is_new_user, total_users=total_users)
