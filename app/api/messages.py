"""
Message endpoints: send, edit, remove, share, react, pin, deferred sends and search.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.logging import get_logger
from app.core.security import CurrentUser
from app.schemas.common import EmptyResponse, ErrorResponse
from app.schemas.message import (
    MessageEditRequest,
    MessageIdResponse,
    MessagePinRequest,
    MessageReactRequest,
    MessageSendDmRequest,
    MessageSendLaterDmRequest,
    MessageSendLaterRequest,
    MessageSendRequest,
    MessageShareRequest,
    SearchResponse,
    SharedMessageIdResponse,
)
from app.services.message_service import MessageService

logger = get_logger(__name__)

router = APIRouter(tags=["Messages"])

ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    403: {"model": ErrorResponse, "description": "Not permitted"},
}


@router.post(
    "/message/send/v2",
    response_model=MessageIdResponse,
    responses=ERRORS,
    summary="Send a channel message",
    description="Members mentioned as @handle are notified."
)
async def send_message(
    body: MessageSendRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> MessageIdResponse:
    message_id = MessageService(db).send(user, body.channel_id, body.message)
    return MessageIdResponse(message_id=message_id)


@router.post("/message/senddm/v2", response_model=MessageIdResponse, responses=ERRORS, summary="Send a DM message")
async def send_dm_message(
    body: MessageSendDmRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> MessageIdResponse:
    message_id = MessageService(db).send_dm(user, body.dm_id, body.message)
    return MessageIdResponse(message_id=message_id)


@router.put(
    "/message/edit/v2",
    response_model=EmptyResponse,
    responses=ERRORS,
    summary="Edit a message",
    description="An empty message removes it. Only newly mentioned members are notified."
)
async def edit_message(
    body: MessageEditRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    MessageService(db).edit(user, body.message_id, body.message)
    return EmptyResponse()


@router.delete("/message/remove/v2", response_model=EmptyResponse, responses=ERRORS, summary="Remove a message")
async def remove_message(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    message_id: Annotated[int, Query(alias="messageId")],
) -> EmptyResponse:
    MessageService(db).remove(user, message_id)
    return EmptyResponse()


@router.post("/message/share/v1", response_model=SharedMessageIdResponse, responses=ERRORS, summary="Share a message")
async def share_message(
    body: MessageShareRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> SharedMessageIdResponse:
    """
    Share a message to a channel or DM.

    - **channelId** / **dmId**: exactly one must be -1
    - **message**: optional caption, appended as ": <caption>"
    """
    shared_id = MessageService(db).share(user, body.og_message_id, body.message, body.channel_id, body.dm_id)
    return SharedMessageIdResponse(shared_message_id=shared_id)


@router.post("/message/react/v1", response_model=EmptyResponse, responses=ERRORS, summary="React to a message")
async def react_message(
    body: MessageReactRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    MessageService(db).react(user, body.message_id, body.react_id)
    return EmptyResponse()


@router.post("/message/unreact/v1", response_model=EmptyResponse, responses=ERRORS, summary="Remove a react")
async def unreact_message(
    body: MessageReactRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    MessageService(db).unreact(user, body.message_id, body.react_id)
    return EmptyResponse()


@router.post("/message/pin/v1", response_model=EmptyResponse, responses=ERRORS, summary="Pin a message")
async def pin_message(
    body: MessagePinRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    MessageService(db).pin(user, body.message_id)
    return EmptyResponse()


@router.post("/message/unpin/v1", response_model=EmptyResponse, responses=ERRORS, summary="Unpin a message")
async def unpin_message(
    body: MessagePinRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    MessageService(db).unpin(user, body.message_id)
    return EmptyResponse()


@router.post(
    "/message/sendlater/v1",
    response_model=MessageIdResponse,
    responses=ERRORS,
    summary="Schedule a channel message",
)
async def send_later(
    body: MessageSendLaterRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> MessageIdResponse:
    message_id = MessageService(db).send_later(user, body.channel_id, body.message, body.time_sent)
    return MessageIdResponse(message_id=message_id)


@router.post(
    "/message/sendlaterdm/v1",
    response_model=MessageIdResponse,
    responses=ERRORS,
    summary="Schedule a DM message",
)
async def send_later_dm(
    body: MessageSendLaterDmRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> MessageIdResponse:
    message_id = MessageService(db).send_later_dm(user, body.dm_id, body.message, body.time_sent)
    return MessageIdResponse(message_id=message_id)


@router.delete(
    "/message/sendlater/v1",
    response_model=EmptyResponse,
    responses=ERRORS,
    summary="Cancel a scheduled message",
)
async def cancel_send_later(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    message_id: Annotated[int, Query(alias="messageId")],
) -> EmptyResponse:
    MessageService(db).cancel_send_later(user, message_id)
    return EmptyResponse()


@router.get("/search/v1", response_model=SearchResponse, responses=ERRORS, summary="Search messages")
async def search_messages(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    query_str: Annotated[str, Query(alias="queryStr")],
) -> SearchResponse:
    """Case-insensitive substring search across the user's channels and DMs."""
    messages = MessageService(db).search(user, query_str)
    logger.debug(
        "Searched messages",
        extra={"extra_data": {"u_id": user.u_id, "returned": len(messages)}}
    )
    return SearchResponse.model_validate({"messages": messages})
