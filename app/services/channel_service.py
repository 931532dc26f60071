"""
Service for channel creation, membership and message listing.
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.errors import AuthError, InputError
from app.core.logging import get_logger
from app.models.conversation import Channel, ChannelMember
from app.models.user import User
from app.services.directory import Directory
from app.services.notifier import Notifier
from app.services.pager import page

logger = get_logger(__name__)


class ChannelService:
    """Create channels and manage their members and owners."""

    def __init__(self, db: Session, settings: Optional[Settings] = None) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.directory = Directory(db)
        self.notifier = Notifier(self.directory, self.settings)

    @staticmethod
    def _membership(channel: Channel, u_id: int) -> Optional[ChannelMember]:
        return next((m for m in channel.members if m.u_id == u_id), None)

    def _require_member(self, channel: Channel, user: User) -> ChannelMember:
        membership = self._membership(channel, user.u_id)
        if membership is None:
            raise AuthError("User is not a member of the channel")
        return membership

    def _has_owner_permissions(self, channel: Channel, user: User) -> bool:
        membership = self._membership(channel, user.u_id)
        if membership is None:
            return False
        return membership.is_owner or user.is_global_owner

    def create(self, user: User, name: str, is_public: bool) -> int:
        """Create a channel with the creator as its first owner."""
        max_length = self.settings.channel_name_max_length
        if len(name) < 1 or len(name) > max_length:
            raise InputError(f"Channel name must be between 1 and {max_length} characters")

        channel = Channel(name=name, is_public=is_public)
        channel.members.append(ChannelMember(u_id=user.u_id, is_owner=True))
        self.db.add(channel)
        self.db.commit()
        logger.info(
            "Channel created",
            extra={"extra_data": {"channel_id": channel.channel_id, "u_id": user.u_id}}
        )
        return channel.channel_id

    def list_mine(self, user: User) -> List[dict]:
        channels = (
            self.db.query(Channel)
            .join(ChannelMember)
            .filter(ChannelMember.u_id == user.u_id)
            .order_by(Channel.channel_id.asc())
            .all()
        )
        return [{"channelId": c.channel_id, "name": c.name} for c in channels]

    def list_all(self, user: User) -> List[dict]:
        channels = self.db.query(Channel).order_by(Channel.channel_id.asc()).all()
        return [{"channelId": c.channel_id, "name": c.name} for c in channels]

    def details(self, user: User, channel_id: int) -> dict:
        channel = self.directory.require_channel(channel_id)
        self._require_member(channel, user)
        return {
            "name": channel.name,
            "isPublic": channel.is_public,
            "ownerMembers": [u.to_dict() for u in self.directory.channel_owners(channel)],
            "allMembers": [u.to_dict() for u in self.directory.channel_members(channel)],
        }

    def join(self, user: User, channel_id: int) -> None:
        """Join a public channel; global owners may also join private ones."""
        channel = self.directory.require_channel(channel_id)
        if self._membership(channel, user.u_id) is not None:
            raise InputError("User is already a member of this channel")
        if not channel.is_public and not user.is_global_owner:
            raise AuthError("Channel is private")

        channel.members.append(ChannelMember(u_id=user.u_id, is_owner=False))
        self.db.commit()

    def invite(self, user: User, channel_id: int, u_id: int) -> None:
        """Add another user to the channel and notify them."""
        channel = self.directory.require_channel(channel_id)
        if self.directory.find_user(u_id) is None:
            raise InputError("User is invalid")
        if self._membership(channel, u_id) is not None:
            raise InputError("User is already a member of this channel")
        self._require_member(channel, user)

        channel.members.append(ChannelMember(u_id=u_id, is_owner=False))
        self.db.flush()
        self.notifier.notify_added(user, u_id, self.directory.conversation_for_channel(channel))
        self.db.commit()
        logger.info(
            "User invited to channel",
            extra={"extra_data": {"channel_id": channel_id, "u_id": u_id, "by": user.u_id}}
        )

    def leave(self, user: User, channel_id: int) -> None:
        channel = self.directory.require_channel(channel_id)
        membership = self._require_member(channel, user)
        if channel.standup_active and channel.standup_user == user.u_id:
            raise InputError("User who started the active standup cannot leave")

        channel.members.remove(membership)
        self.db.commit()

    def add_owner(self, user: User, channel_id: int, u_id: int) -> None:
        channel = self.directory.require_channel(channel_id)
        if self.directory.find_user(u_id) is None:
            raise InputError("User is invalid")
        target = self._membership(channel, u_id)
        if target is None:
            raise InputError("User is not a member of this channel")
        if target.is_owner:
            raise InputError("User is already an owner of this channel")
        if not self._has_owner_permissions(channel, user):
            raise AuthError("User does not have owner permissions")

        target.is_owner = True
        self.db.commit()

    def remove_owner(self, user: User, channel_id: int, u_id: int) -> None:
        channel = self.directory.require_channel(channel_id)
        if self.directory.find_user(u_id) is None:
            raise InputError("User is invalid")
        target = self._membership(channel, u_id)
        if target is None or not target.is_owner:
            raise InputError("User is not an owner of this channel")
        if len(self.directory.channel_owners(channel)) == 1:
            raise InputError("User is the only owner of this channel")
        if not self._has_owner_permissions(channel, user):
            raise AuthError("User does not have owner permissions")

        target.is_owner = False
        self.db.commit()

    def messages(self, user: User, channel_id: int, start: int) -> dict:
        """A page of the channel's messages, most recent first."""
        channel = self.directory.require_channel(channel_id)
        conversation = self.directory.conversation_for_channel(channel)
        messages = self.directory.conversation_messages(conversation)
        if start > len(messages):
            raise InputError("Start is greater than total messages")
        self._require_member(channel, user)
        return page(messages, start, user.u_id, self.settings.page_size)
