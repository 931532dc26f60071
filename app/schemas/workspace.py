"""
Pydantic schemas for auth, users, channels, DMs and notifications.
"""
from typing import List

from pydantic import Field

from app.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    email: str
    password: str
    name_first: str
    name_last: str


class LoginRequest(CamelModel):
    email: str
    password: str


class AuthResponse(CamelModel):
    token: str
    auth_user_id: int


class MemberResponse(CamelModel):
    """Member summary carried in channel and DM details."""
    u_id: int
    email: str
    name_first: str
    name_last: str
    handle_str: str


class ChannelCreateRequest(CamelModel):
    name: str
    is_public: bool = True


class ChannelIdRequest(CamelModel):
    channel_id: int


class ChannelUserRequest(CamelModel):
    """Request schema for invite, addowner and removeowner."""
    channel_id: int
    u_id: int


class ChannelIdResponse(CamelModel):
    channel_id: int


class ChannelSummary(CamelModel):
    channel_id: int
    name: str


class ChannelsListResponse(CamelModel):
    channels: List[ChannelSummary]


class ChannelDetailsResponse(CamelModel):
    name: str
    is_public: bool
    owner_members: List[MemberResponse]
    all_members: List[MemberResponse]


class DmCreateRequest(CamelModel):
    u_ids: List[int] = Field(default_factory=list)


class DmIdRequest(CamelModel):
    dm_id: int


class DmIdResponse(CamelModel):
    dm_id: int


class DmSummary(CamelModel):
    dm_id: int
    name: str


class DmListResponse(CamelModel):
    dms: List[DmSummary]


class DmDetailsResponse(CamelModel):
    name: str
    members: List[MemberResponse]


class NotificationResponse(CamelModel):
    """channelId or dmId is -1, never both."""
    channel_id: int
    dm_id: int
    notification_message: str


class NotificationsResponse(CamelModel):
    notifications: List[NotificationResponse]


class UsersAllResponse(CamelModel):
    users: List[MemberResponse]


class UserProfileResponse(CamelModel):
    user: MemberResponse


class SetHandleRequest(CamelModel):
    handle_str: str


class SetNameRequest(CamelModel):
    name_first: str
    name_last: str


class SetEmailRequest(CamelModel):
    email: str
