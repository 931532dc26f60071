"""
Direct-message endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import CurrentUser
from app.schemas.common import EmptyResponse, ErrorResponse
from app.schemas.message import MessagesPageResponse
from app.schemas.workspace import DmCreateRequest, DmDetailsResponse, DmIdRequest, DmIdResponse, DmListResponse
from app.services.dm_service import DmService

router = APIRouter(prefix="/dm", tags=["DMs"])

ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    403: {"model": ErrorResponse, "description": "Not permitted"},
}


@router.post("/create/v2", response_model=DmIdResponse, responses=ERRORS, summary="Create a DM")
async def create_dm(
    body: DmCreateRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> DmIdResponse:
    """Create a DM with the listed users; each of them is notified."""
    return DmIdResponse(dm_id=DmService(db).create(user, body.u_ids))


@router.get("/list/v2", response_model=DmListResponse, summary="List my DMs")
async def list_dms(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> DmListResponse:
    return DmListResponse.model_validate({"dms": DmService(db).list_mine(user)})


@router.get("/details/v2", response_model=DmDetailsResponse, responses=ERRORS, summary="DM details")
async def dm_details(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    dm_id: Annotated[int, Query(alias="dmId")],
) -> DmDetailsResponse:
    return DmDetailsResponse.model_validate(DmService(db).details(user, dm_id))


@router.post("/leave/v2", response_model=EmptyResponse, responses=ERRORS, summary="Leave a DM")
async def leave_dm(
    body: DmIdRequest,
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> EmptyResponse:
    DmService(db).leave(user, body.dm_id)
    return EmptyResponse()


@router.delete("/remove/v2", response_model=EmptyResponse, responses=ERRORS, summary="Remove a DM")
async def remove_dm(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    dm_id: Annotated[int, Query(alias="dmId")],
) -> EmptyResponse:
    DmService(db).remove(user, dm_id)
    return EmptyResponse()


@router.get("/messages/v2", response_model=MessagesPageResponse, responses=ERRORS, summary="Page through DM messages")
async def dm_messages(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    dm_id: Annotated[int, Query(alias="dmId")],
    start: Annotated[int, Query(ge=0)] = 0,
) -> MessagesPageResponse:
    return MessagesPageResponse.model_validate(DmService(db).messages(user, dm_id, start))
