"""FastAPI endpoints for the Identity context."""

from fastapi import APIRouter, Depends, Request

from identity.api.dependencies import get_current_user
from identity.api.schemas import RoleSchema, UserSchema
from identity.user.registration import RoleHandler
from identity.user.user import User, UserRole
from shared.api import ApiResponse, get_database

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=ApiResponse[UserSchema])
def get_profile(current_user: User = Depends(get_current_user)) -> ApiResponse:
    return ApiResponse(message="profile retrieved successfully", data=UserSchema.model_validate(current_user))


@router.get("/me/role", response_model=ApiResponse[RoleSchema])
def get_role(current_user: User = Depends(get_current_user)) -> ApiResponse:
    role = RoleSchema(
        role=current_user.role,
        can_sell=current_user.has_role(UserRole.VENDOR, UserRole.ADMIN),
        is_admin=current_user.has_role(UserRole.ADMIN),
    )
    return ApiResponse(message="role retrieved successfully", data=role)


@router.post("/me/become-vendor", response_model=ApiResponse[UserSchema])
def become_vendor(request: Request, current_user: User = Depends(get_current_user)) -> ApiResponse:
    """Upgrade a customer account to vendor. Opening a shop is the next step."""
    user = RoleHandler(get_database(request)).become_vendor(current_user.id)
    return ApiResponse(
        message="you are now a vendor, create your shop to start selling",
        data=UserSchema.model_validate(user),
    )
