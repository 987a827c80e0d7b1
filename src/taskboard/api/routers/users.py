"""Routes for the user directory."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...deps import AdminIdentityDependency, CurrentIdentityDependency, DatabaseSessionDependency
from ...errors import NotFoundError, ValidationError
from ...models import User
from ...schemas import MessageResponse, UserRead, UserWrite
from ...services import UserService

router = APIRouter(prefix="/users", tags=["users"])


def _map_user(user: User) -> UserRead:
    return UserRead.model_validate(user)


@router.get("", response_model=list[UserRead], summary="List all users (admin)")
async def list_users(
    session: DatabaseSessionDependency,
    _admin: AdminIdentityDependency,
) -> list[UserRead]:
    return [_map_user(user) for user in await UserService(session).get_all()]


@router.get("/role/{role}", response_model=list[UserRead], summary="List users holding a role")
async def list_users_by_role(
    role: str,
    session: DatabaseSessionDependency,
    _identity: CurrentIdentityDependency,
) -> list[UserRead]:
    return [_map_user(user) for user in await UserService(session).get_by_role(role)]


@router.get("/me", response_model=UserRead, summary="Return the stored record of the session user")
async def read_current_user(
    session: DatabaseSessionDependency,
    identity: CurrentIdentityDependency,
) -> UserRead:
    user = await UserService(session).get_by_id(identity.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return _map_user(user)


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user (admin)",
)
async def create_user(
    payload: UserWrite,
    session: DatabaseSessionDependency,
    _admin: AdminIdentityDependency,
) -> UserRead:
    user = await UserService(session).create(name=payload.name, role=payload.role)
    return _map_user(user)


@router.put("/{user_id}", response_model=UserRead, summary="Replace a user's name and role (admin)")
async def update_user(
    user_id: int,
    payload: UserWrite,
    session: DatabaseSessionDependency,
    _admin: AdminIdentityDependency,
) -> UserRead:
    user = await UserService(session).update(user_id, name=payload.name, role=payload.role)
    return _map_user(user)


@router.delete("/{user_id}", response_model=MessageResponse, summary="Delete a user (admin)")
async def delete_user(
    user_id: int,
    session: DatabaseSessionDependency,
    admin: AdminIdentityDependency,
) -> MessageResponse:
    if user_id == admin.user_id:
        raise ValidationError("Cannot delete your own account")
    await UserService(session).delete(user_id)
    return MessageResponse(message="User deleted successfully")
