"""
Channel endpoints: creation, membership, ownership and message listing.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import CurrentUser
from app.schemas.common import EmptyResponse, ErrorResponse
from app.schemas.message import MessagesPageResponse
from app.schemas.workspace import (
    ChannelCreateRequest,
    ChannelDetailsResponse,
    ChannelIdRequest,
    ChannelIdResponse,
    ChannelsListResponse,
    ChannelUserRequest,
)
from app.services.channel_service import ChannelService

router = APIRouter(tags=["Channels"])

ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    403: {"model": ErrorResponse, "description": "Not permitted"},
}


@router.post("/channels/create/v3", response_model=ChannelIdResponse, responses=ERRORS, summary="Create a channel")
async def create_channel(
    body: ChannelCreateRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> ChannelIdResponse:
    channel_id = ChannelService(db).create(user, body.name, body.is_public)
    return ChannelIdResponse(channel_id=channel_id)


@router.get("/channels/list/v3", response_model=ChannelsListResponse, summary="List my channels")
async def list_channels(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> ChannelsListResponse:
    return ChannelsListResponse.model_validate({"channels": ChannelService(db).list_mine(user)})


@router.get("/channels/listall/v3", response_model=ChannelsListResponse, summary="List all channels")
async def list_all_channels(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> ChannelsListResponse:
    return ChannelsListResponse.model_validate({"channels": ChannelService(db).list_all(user)})


@router.get("/channel/details/v3", response_model=ChannelDetailsResponse, responses=ERRORS, summary="Channel details")
async def channel_details(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    channel_id: Annotated[int, Query(alias="channelId")],
) -> ChannelDetailsResponse:
    return ChannelDetailsResponse.model_validate(ChannelService(db).details(user, channel_id))


@router.post("/channel/join/v3", response_model=EmptyResponse, responses=ERRORS, summary="Join a channel")
async def join_channel(
    body: ChannelIdRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    ChannelService(db).join(user, body.channel_id)
    return EmptyResponse()


@router.post("/channel/invite/v3", response_model=EmptyResponse, responses=ERRORS, summary="Invite a user")
async def invite_to_channel(
    body: ChannelUserRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    """Add a user to the channel; they receive an added notification."""
    ChannelService(db).invite(user, body.channel_id, body.u_id)
    return EmptyResponse()


@router.post("/channel/leave/v2", response_model=EmptyResponse, responses=ERRORS, summary="Leave a channel")
async def leave_channel(
    body: ChannelIdRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    ChannelService(db).leave(user, body.channel_id)
    return EmptyResponse()


@router.post("/channel/addowner/v2", response_model=EmptyResponse, responses=ERRORS, summary="Make a member an owner")
async def add_owner(
    body: ChannelUserRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    ChannelService(db).add_owner(user, body.channel_id, body.u_id)
    return EmptyResponse()


@router.post("/channel/removeowner/v2", response_model=EmptyResponse, responses=ERRORS, summary="Revoke ownership")
async def remove_owner(
    body: ChannelUserRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    ChannelService(db).remove_owner(user, body.channel_id, body.u_id)
    return EmptyResponse()


@router.get(
    "/channel/messages/v3",
    response_model=MessagesPageResponse,
    responses=ERRORS,
    summary="Page through channel messages",
    description="Up to 50 messages from `start`, most recent first; `end` is -1 when exhausted."
)
async def channel_messages(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    channel_id: Annotated[int, Query(alias="channelId")],
    start: Annotated[int, Query(ge=0)] = 0,
) -> MessagesPageResponse:
    return MessagesPageResponse.model_validate(ChannelService(db).messages(user, channel_id, start))
