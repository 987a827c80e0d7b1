"""Routes handling the name-only login flow."""

from __future__ import annotations

from fastapi import APIRouter, Request, status

from ...core.session import get_session_identity, login_user, logout_user
from ...deps import CurrentIdentityDependency, DatabaseSessionDependency
from ...schemas import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    SessionStatus,
    UserPublic,
)
from ...services import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Start a session for an existing user name",
)
async def login(
    payload: LoginRequest,
    request: Request,
    session: DatabaseSessionDependency,
) -> LoginResponse:
    user = await AuthService(session).login(payload.name)
    login_user(request.session, user_id=user.id, name=user.name, role=user.role.value)
    return LoginResponse(user=UserPublic.model_validate(user))


@router.post("/logout", response_model=MessageResponse, summary="End the current session")
async def logout(request: Request) -> MessageResponse:
    logout_user(request.session)
    return MessageResponse(message="Logout successful")


@router.get("/status", response_model=SessionStatus, summary="Report whether a session is active")
async def session_status(request: Request) -> SessionStatus:
    identity = get_session_identity(request.session)
    if identity is None:
        return SessionStatus(authenticated=False)
    return SessionStatus(authenticated=True, user=UserPublic.model_validate(identity.as_public()))


@router.get("/me", response_model=CurrentUserResponse, summary="Return the session's user")
async def read_session_user(identity: CurrentIdentityDependency) -> CurrentUserResponse:
    return CurrentUserResponse(user=UserPublic.model_validate(identity.as_public()))
