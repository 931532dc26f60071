"""
Pydantic schemas for message requests and responses.
"""
from typing import List, Optional

from pydantic import Field

from app.schemas.common import CamelModel


class MessageSendRequest(CamelModel):
    """Request schema for POST /message/send/v2."""
    channel_id: int
    message: str


class MessageSendDmRequest(CamelModel):
    """Request schema for POST /message/senddm/v2."""
    dm_id: int
    message: str


class MessageEditRequest(CamelModel):
    """Request schema for PUT /message/edit/v2; an empty message removes it."""
    message_id: int
    message: str


class MessageShareRequest(CamelModel):
    """Request schema for POST /message/share/v1; exactly one target is -1."""
    og_message_id: int
    message: str = Field(default="", description="Optional caption appended as ': <caption>'")
    channel_id: int = -1
    dm_id: int = -1


class MessageReactRequest(CamelModel):
    message_id: int
    react_id: int


class MessagePinRequest(CamelModel):
    message_id: int


class MessageSendLaterRequest(CamelModel):
    """Request schema for POST /message/sendlater/v1."""
    channel_id: int
    message: str
    time_sent: int = Field(..., description="Unix time in seconds to deliver at")


class MessageSendLaterDmRequest(CamelModel):
    """Request schema for POST /message/sendlaterdm/v1."""
    dm_id: int
    message: str
    time_sent: int = Field(..., description="Unix time in seconds to deliver at")


class MessageIdResponse(CamelModel):
    message_id: int


class SharedMessageIdResponse(CamelModel):
    shared_message_id: int


class ReactResponse(CamelModel):
    """A react with the viewer's flag computed at read time."""
    react_id: int
    u_ids: List[int]
    is_this_user_reacted: bool


class MessageResponse(CamelModel):
    """Schema for a single message in responses."""
    message_id: int
    u_id: int
    message: str
    time_sent: int
    reacts: List[ReactResponse]
    is_pinned: bool


class MessagesPageResponse(CamelModel):
    """One page of a conversation; end is -1 once the earliest message is included."""
    messages: List[MessageResponse]
    start: int
    end: int


class SearchResponse(CamelModel):
    messages: List[MessageResponse]


class StandupStartRequest(CamelModel):
    channel_id: int
    length: int


class StandupSendRequest(CamelModel):
    channel_id: int
    message: str


class StandupStartResponse(CamelModel):
    time_finish: int


class StandupActiveResponse(CamelModel):
    is_active: bool
    time_finish: Optional[int] = None
