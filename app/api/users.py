"""
User directory and profile endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import CurrentUser
from app.schemas.common import EmptyResponse, ErrorResponse
from app.schemas.workspace import (
    SetEmailRequest,
    SetHandleRequest,
    SetNameRequest,
    UserProfileResponse,
    UsersAllResponse,
)
from app.services.user_service import UserService

router = APIRouter(tags=["Users"])

ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    403: {"model": ErrorResponse, "description": "Not permitted"},
}


@router.get("/users/all/v2", response_model=UsersAllResponse, responses=ERRORS, summary="List all users")
async def list_users(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> UsersAllResponse:
    return UsersAllResponse.model_validate({"users": UserService(db).all_users()})


@router.get("/user/profile/v3", response_model=UserProfileResponse, responses=ERRORS, summary="User profile")
async def user_profile(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    u_id: Annotated[int, Query(alias="uId")],
) -> UserProfileResponse:
    return UserProfileResponse.model_validate({"user": UserService(db).profile(u_id)})


@router.put("/user/profile/sethandle/v2", response_model=EmptyResponse, responses=ERRORS, summary="Change handle")
async def set_handle(
    body: SetHandleRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    """Later mentions resolve against the new handle only."""
    UserService(db).set_handle(user, body.handle_str)
    return EmptyResponse()


@router.put("/user/profile/setname/v2", response_model=EmptyResponse, responses=ERRORS, summary="Change name")
async def set_name(
    body: SetNameRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    UserService(db).set_name(user, body.name_first, body.name_last)
    return EmptyResponse()


@router.put("/user/profile/setemail/v2", response_model=EmptyResponse, responses=ERRORS, summary="Change email")
async def set_email(
    body: SetEmailRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    UserService(db).set_email(user, body.email)
    return EmptyResponse()
