"""
Standup endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import CurrentUser
from app.schemas.common import EmptyResponse, ErrorResponse
from app.schemas.message import (
    StandupActiveResponse,
    StandupSendRequest,
    StandupStartRequest,
    StandupStartResponse,
)
from app.services.standup_service import StandupService

router = APIRouter(prefix="/standup", tags=["Standups"])

ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    403: {"model": ErrorResponse, "description": "Not permitted"},
}


@router.post("/start/v1", response_model=StandupStartResponse, responses=ERRORS, summary="Start a standup")
async def start_standup(
    body: StandupStartRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> StandupStartResponse:
    """Buffer updates for `length` seconds, then post them as one message."""
    time_finish = StandupService(db).start(user, body.channel_id, body.length)
    return StandupStartResponse(time_finish=time_finish)


@router.get("/active/v1", response_model=StandupActiveResponse, responses=ERRORS, summary="Standup status")
async def standup_active(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    channel_id: Annotated[int, Query(alias="channelId")],
) -> StandupActiveResponse:
    return StandupActiveResponse.model_validate(StandupService(db).active(user, channel_id))


@router.post("/send/v1", response_model=EmptyResponse, responses=ERRORS, summary="Send a standup update")
async def send_standup(
    body: StandupSendRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    StandupService(db).send(user, body.channel_id, body.message)
    return EmptyResponse()
