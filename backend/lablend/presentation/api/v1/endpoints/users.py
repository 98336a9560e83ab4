"""User registration and role management endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from lablend.application.schemas.users import (
    UserActiveUpdate,
    UserCreate,
    UserResponse,
    UserRoleUpdate,
)
from lablend.application.services import UserService
from lablend.domain.entities import User
from lablend.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    PermissionDeniedError,
)
from lablend.infrastructure.dependencies import (
    get_current_user,
    get_user_service,
    require_admin,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    data: UserCreate,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Register a new user with the default ``user`` role."""
    try:
        user = await service.register(data.identity)
    except DuplicateEntityError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return UserResponse.model_validate(user, from_attributes=True)


@router.get("/me", response_model=UserResponse)
async def read_current_user(
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    return UserResponse.model_validate(current_user, from_attributes=True)


@router.get("", response_model=list[UserResponse])
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    _: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> list[UserResponse]:
    users = await service.list_users(skip=skip, limit=limit)
    return [UserResponse.model_validate(u, from_attributes=True) for u in users]


@router.patch("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    data: UserRoleUpdate,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Change a user's role. Only administrators may change it."""
    try:
        user = await service.update_role(current_user, user_id, data.role)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    return UserResponse.model_validate(user, from_attributes=True)


@router.patch("/{user_id}/active", response_model=UserResponse)
async def set_user_active(
    user_id: str,
    data: UserActiveUpdate,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Suspend or reactivate a user."""
    try:
        user = await service.set_active(current_user, user_id, data.is_active)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    return UserResponse.model_validate(user, from_attributes=True)
