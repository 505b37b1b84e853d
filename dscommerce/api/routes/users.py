"""User API routes."""

from fastapi import APIRouter, Depends

from dscommerce.api.models import UserDTO
from dscommerce.api.services.user import UserService, get_user_service
from dscommerce.api.shared.auth import Principal, get_current_principal

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserDTO)
async def get_me(
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
) -> UserDTO:
    """Get the authenticated user's profile."""
    return await service.get_me(principal)
