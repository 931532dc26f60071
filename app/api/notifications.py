"""
Notification feed endpoint.
"""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import CurrentUser
from app.schemas.workspace import NotificationsResponse
from app.services.directory import Directory

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "/get/v1",
    response_model=NotificationsResponse,
    summary="Get my notifications",
    description="Every notification addressed to the user, in the order they were emitted."
)
async def get_notifications(
    user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> NotificationsResponse:
    feed = Directory(db).notifications_for(user.u_id)
    return NotificationsResponse.model_validate({"notifications": [n.to_dict() for n in feed]})
