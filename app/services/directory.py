"""
Lookups over users, channels, DMs and messages, and the notification feed append.

Every service receives a `Directory` bound to the request's session instead of
reaching for shared state.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.errors import InputError
from app.core.logging import get_logger
from app.models.conversation import Channel, Dm
from app.models.message import Message
from app.models.notification import Notification
from app.models.user import User

logger = get_logger(__name__)

CHANNEL = "channel"
DM = "dm"


@dataclass
class Conversation:
    """The channel or DM hosting a message, flattened for notification rendering."""

    kind: str
    id: int
    name: str
    members: List[User] = field(default_factory=list)

    @property
    def channel_id(self) -> int:
        return self.id if self.kind == CHANNEL else -1

    @property
    def dm_id(self) -> int:
        return self.id if self.kind == DM else -1

    def has_member(self, u_id: int) -> bool:
        return any(member.u_id == u_id for member in self.members)


class Directory:
    """Authoritative, synchronous view of users, conversations and feeds."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_user(self, u_id: int) -> Optional[User]:
        return self.db.get(User, u_id)

    def find_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def handle_exists(self, handle: str) -> bool:
        return self.db.query(User.u_id).filter(User.handle_str == handle).first() is not None

    def find_channel(self, channel_id: int) -> Optional[Channel]:
        return self.db.get(Channel, channel_id)

    def find_dm(self, dm_id: int) -> Optional[Dm]:
        return self.db.get(Dm, dm_id)

    def require_channel(self, channel_id: int) -> Channel:
        channel = self.find_channel(channel_id)
        if channel is None:
            raise InputError("Channel does not exist")
        return channel

    def require_dm(self, dm_id: int) -> Dm:
        dm = self.find_dm(dm_id)
        if dm is None:
            raise InputError("dmId is invalid")
        return dm

    def find_message(self, message_id: int) -> Optional[Message]:
        """Find a delivered message; pending deferred sends are invisible."""
        message = self.db.get(Message, message_id)
        if message is None or not message.is_sent:
            return None
        return message

    def require_message(self, message_id: int) -> Message:
        message = self.find_message(message_id)
        if message is None:
            raise InputError("Message does not exist")
        return message

    def channel_members(self, channel: Channel) -> List[User]:
        return [member.user for member in channel.members]

    def channel_owners(self, channel: Channel) -> List[User]:
        return [member.user for member in channel.members if member.is_owner]

    def dm_members(self, dm: Dm) -> List[User]:
        return [member.user for member in dm.members]

    def find_conversation_for_message(self, message: Message) -> Conversation:
        """Resolve the single channel or DM a message belongs to."""
        if message.channel_id is not None:
            channel = message.channel
            return Conversation(
                kind=CHANNEL,
                id=channel.channel_id,
                name=channel.name,
                members=self.channel_members(channel),
            )
        dm = message.dm
        return Conversation(kind=DM, id=dm.dm_id, name=dm.name, members=self.dm_members(dm))

    def conversation_for_channel(self, channel: Channel) -> Conversation:
        return Conversation(CHANNEL, channel.channel_id, channel.name, self.channel_members(channel))

    def conversation_for_dm(self, dm: Dm) -> Conversation:
        return Conversation(DM, dm.dm_id, dm.name, self.dm_members(dm))

    def conversation_messages(self, conversation: Conversation) -> List[Message]:
        """Delivered messages of a conversation, in storage (send) order."""
        query = self.db.query(Message).filter(Message.is_sent.is_(True))
        if conversation.kind == CHANNEL:
            query = query.filter(Message.channel_id == conversation.id)
        else:
            query = query.filter(Message.dm_id == conversation.id)
        return query.order_by(Message.message_id.asc()).all()

    def append_notification(self, u_id: int, conversation: Conversation, text: str) -> Notification:
        """Append a rendered notification to a user's feed."""
        notification = Notification(
            u_id=u_id,
            channel_id=conversation.channel_id,
            dm_id=conversation.dm_id,
            notification_message=text,
        )
        self.db.add(notification)
        logger.debug(
            "Notification appended",
            extra={
                "extra_data": {
                    "u_id": u_id,
                    "channel_id": conversation.channel_id,
                    "dm_id": conversation.dm_id,
                }
            }
        )
        return notification

    def notifications_for(self, u_id: int) -> List[Notification]:
        """A user's feed, oldest first."""
        return (
            self.db.query(Notification)
            .filter(Notification.u_id == u_id)
            .order_by(Notification.id.asc())
            .all()
        )
