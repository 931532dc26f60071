"""
Registration and session endpoints.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import CurrentUser
from app.schemas.common import EmptyResponse, ErrorResponse
from app.schemas.workspace import AuthResponse, LoginRequest, RegisterRequest
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register/v3",
    response_model=AuthResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid registration details"}},
    summary="Register a user",
)
async def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """Create a user with a generated handle and return a session token."""
    result = AuthService(db).register(body.email, body.password, body.name_first, body.name_last)
    return AuthResponse.model_validate(result)


@router.post("/login/v3", response_model=AuthResponse, summary="Log in")
async def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    return AuthResponse.model_validate(AuthService(db).login(body.email, body.password))


@router.post("/logout/v2", response_model=EmptyResponse, summary="Log out")
async def logout(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    token: Annotated[Optional[str], Header()] = None,
) -> EmptyResponse:
    """Invalidate the presented token."""
    AuthService(db).logout(token)
    return EmptyResponse()
