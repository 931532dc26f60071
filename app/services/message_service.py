"""
Service for sending, editing, reacting to, pinning, sharing and searching messages.

Each public method runs inside the caller's session and commits once, so a
message row, its reacts and the notifications it triggers land together.
"""
from __future__ import annotations

import time
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db_context
from app.core.errors import AuthError, InputError
from app.core.logging import get_logger
from app.core.scheduler import JobScheduler, get_scheduler, sendlater_job_id
from app.models.conversation import ChannelMember, DmMember
from app.models.message import Message, React, VALID_REACT_IDS
from app.models.user import User
from app.services.directory import CHANNEL, Conversation, Directory
from app.services.mentions import scan_delta
from app.services.notifier import Notifier

logger = get_logger(__name__)

NO_TARGET = -1


def now_ms() -> int:
    return int(time.time() * 1000)


class MessageService:
    """Message lifecycle operations for one request."""

    def __init__(
        self,
        db: Session,
        settings: Optional[Settings] = None,
        scheduler: Optional[JobScheduler] = None,
    ) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.scheduler = scheduler or get_scheduler()
        self.directory = Directory(db)
        self.notifier = Notifier(self.directory, self.settings)

    # Validation helpers

    def _check_send_length(self, body: str) -> None:
        if len(body) < 1 or len(body) > self.settings.message_max_length:
            raise InputError("Message length must be between 1 and "
                             f"{self.settings.message_max_length} characters")

    def _channel_conversation(self, channel_id: int) -> Conversation:
        return self.directory.conversation_for_channel(self.directory.require_channel(channel_id))

    def _dm_conversation(self, dm_id: int) -> Conversation:
        return self.directory.conversation_for_dm(self.directory.require_dm(dm_id))

    def _is_moderator(self, user: User, message: Message, conversation: Conversation) -> bool:
        """Channel owners, the DM creator and global owners who are members."""
        if not conversation.has_member(user.u_id):
            return False
        if user.is_global_owner:
            return True
        if conversation.kind == CHANNEL:
            owners = self.directory.channel_owners(message.channel)
            return any(owner.u_id == user.u_id for owner in owners)
        return message.dm.creator_id == user.u_id

    def _joined_message(self, user: User, message_id: int) -> Tuple[Message, Conversation]:
        """A message in a conversation the user belongs to, else InputError."""
        message = self.directory.require_message(message_id)
        conversation = self.directory.find_conversation_for_message(message)
        if not conversation.has_member(user.u_id):
            raise InputError("Message is not in a conversation the user has joined")
        return message, conversation

    # Posting

    def post_message(self, author_id: int, conversation: Conversation, body: str) -> Message:
        """Store a delivered message and notify its mentions."""
        sent_ms = now_ms()
        message = Message(
            u_id=author_id,
            channel_id=conversation.channel_id if conversation.kind == CHANNEL else None,
            dm_id=conversation.dm_id if conversation.kind != CHANNEL else None,
            body=body,
            time_sent=sent_ms // 1000,
            time_sent_ms=sent_ms,
            is_pinned=False,
            is_sent=True,
        )
        self.db.add(message)
        self.db.flush()
        self.db.refresh(message)

        self.notifier.notify_tags(message)
        logger.info(
            "Message sent",
            extra={
                "extra_data": {
                    "message_id": message.message_id,
                    "u_id": author_id,
                    "conversation": f"{conversation.kind}:{conversation.id}",
                }
            }
        )
        return message

    def send(self, user: User, channel_id: int, body: str) -> int:
        """Send a message to a channel the user belongs to."""
        conversation = self._channel_conversation(channel_id)
        self._check_send_length(body)
        if not conversation.has_member(user.u_id):
            raise AuthError("User is not a member of the channel")

        message = self.post_message(user.u_id, conversation, body)
        self.db.commit()
        return message.message_id

    def send_dm(self, user: User, dm_id: int, body: str) -> int:
        """Send a message to a DM the user belongs to."""
        conversation = self._dm_conversation(dm_id)
        self._check_send_length(body)
        if not conversation.has_member(user.u_id):
            raise AuthError("User is not a member of the dm")

        message = self.post_message(user.u_id, conversation, body)
        self.db.commit()
        return message.message_id

    def edit(self, user: User, message_id: int, body: str) -> None:
        """
        Replace a message body; an empty body removes the message.

        Only members mentioned for the first time by the new body are tagged.
        """
        if len(body) > self.settings.message_max_length:
            raise InputError("Message is too long")

        message = self.directory.require_message(message_id)
        conversation = self.directory.find_conversation_for_message(message)
        if not conversation.has_member(user.u_id):
            raise AuthError("User is not a member of the conversation")
        if message.u_id != user.u_id and not self._is_moderator(user, message, conversation):
            raise AuthError("User may not edit this message")

        if body == "":
            self._delete(message)
            self.db.commit()
            return

        old_body = message.body
        message.body = body
        self.db.flush()
        self.notifier.resolve_and_notify(message, scan_delta(body, old_body))
        self.db.commit()
        logger.info("Message edited", extra={"extra_data": {"message_id": message_id}})

    def remove(self, user: User, message_id: int) -> None:
        """Delete a message; emitted notifications are kept."""
        message = self.directory.require_message(message_id)
        conversation = self.directory.find_conversation_for_message(message)
        if not conversation.has_member(user.u_id):
            raise AuthError("User is not a member of the conversation")
        if message.u_id != user.u_id and not self._is_moderator(user, message, conversation):
            raise AuthError("User may not remove this message")

        self._delete(message)
        self.db.commit()

    def _delete(self, message: Message) -> None:
        # Reacts cascade with the row; there is no second copy to keep in step
        self.db.delete(message)
        self.db.flush()
        logger.info("Message removed", extra={"extra_data": {"message_id": message.message_id}})

    # Reacts and pins

    def react(self, user: User, message_id: int, react_id: int) -> None:
        """Add the user's react and notify the author if they are still a member."""
        if react_id not in VALID_REACT_IDS:
            raise InputError("reactId is invalid")
        message, _ = self._joined_message(user, message_id)
        if any(r.react_id == react_id and r.u_id == user.u_id for r in message.reacts):
            raise InputError("User has already reacted with this reactId")

        message.reacts.append(React(react_id=react_id, u_id=user.u_id))
        self.db.flush()
        self.notifier.notify_react(user, message)
        self.db.commit()

    def unreact(self, user: User, message_id: int, react_id: int) -> None:
        """Withdraw the user's react; never notifies."""
        if react_id not in VALID_REACT_IDS:
            raise InputError("reactId is invalid")
        message, _ = self._joined_message(user, message_id)
        existing = next(
            (r for r in message.reacts if r.react_id == react_id and r.u_id == user.u_id),
            None,
        )
        if existing is None:
            raise InputError("User has not reacted with this reactId")

        message.reacts.remove(existing)
        self.db.commit()

    def _set_pinned(self, user: User, message_id: int, pinned: bool) -> None:
        message, conversation = self._joined_message(user, message_id)
        if not self._is_moderator(user, message, conversation):
            raise AuthError("User does not have owner permissions")
        if message.is_pinned == pinned:
            raise InputError("Message is already pinned" if pinned else "Message is not pinned")
        message.is_pinned = pinned
        self.db.commit()

    def pin(self, user: User, message_id: int) -> None:
        self._set_pinned(user, message_id, True)

    def unpin(self, user: User, message_id: int) -> None:
        self._set_pinned(user, message_id, False)

    # Sharing

    def share(self, user: User, og_message_id: int, caption: str, channel_id: int, dm_id: int) -> int:
        """
        Share a message into a channel or DM, optionally with a caption.

        The new body is the original text, or "<original>: <caption>". Mentions
        in the combined text are scanned as if the message were freshly sent.

        Returns:
            The id of the new shared message
        """
        if (channel_id == NO_TARGET) == (dm_id == NO_TARGET):
            raise InputError("Exactly one of channelId and dmId must be -1")

        og_message, _ = self._joined_message(user, og_message_id)
        if channel_id != NO_TARGET:
            target = self._channel_conversation(channel_id)
        else:
            target = self._dm_conversation(dm_id)

        body = og_message.body
        if caption:
            body = f"{og_message.body}: {caption}"
        if len(body) > self.settings.message_max_length:
            raise InputError("Shared message is too long")

        if not target.has_member(user.u_id):
            raise AuthError("User is not a member of the target conversation")

        shared = self.post_message(user.u_id, target, body)
        self.db.commit()
        logger.info(
            "Message shared",
            extra={"extra_data": {"og_message_id": og_message_id, "shared_message_id": shared.message_id}}
        )
        return shared.message_id

    # Deferred sends

    def _schedule(self, user: User, conversation: Conversation, body: str, time_sent: int) -> int:
        if time_sent < int(time.time()):
            raise InputError("Time set is in the past")
        self._check_send_length(body)
        if not conversation.has_member(user.u_id):
            raise AuthError("User is not a member of the conversation")

        message = Message(
            u_id=user.u_id,
            channel_id=conversation.channel_id if conversation.kind == CHANNEL else None,
            dm_id=conversation.dm_id if conversation.kind != CHANNEL else None,
            body=body,
            time_sent=time_sent,
            time_sent_ms=time_sent * 1000,
            is_pinned=False,
            is_sent=False,
        )
        self.db.add(message)
        self.db.commit()

        self.scheduler.schedule_at(
            sendlater_job_id(message.message_id),
            time_sent,
            deliver_scheduled_message,
            args=(message.message_id,),
        )
        return message.message_id

    def send_later(self, user: User, channel_id: int, body: str, time_sent: int) -> int:
        """Schedule a channel message for `time_sent` (unix seconds)."""
        return self._schedule(user, self._channel_conversation(channel_id), body, time_sent)

    def send_later_dm(self, user: User, dm_id: int, body: str, time_sent: int) -> int:
        """Schedule a DM message for `time_sent` (unix seconds)."""
        return self._schedule(user, self._dm_conversation(dm_id), body, time_sent)

    def cancel_send_later(self, user: User, message_id: int) -> None:
        """Cancel a deferred send that has not fired yet."""
        message = self.db.get(Message, message_id)
        if message is None or message.is_sent:
            raise InputError("No pending message with this messageId")
        if message.u_id != user.u_id:
            raise AuthError("Only the sender may cancel a scheduled message")

        self.scheduler.cancel(sendlater_job_id(message_id))
        self.db.delete(message)
        self.db.commit()

    def deliver_scheduled(self, message_id: int) -> Optional[int]:
        """
        Deliver a pending deferred message.

        Membership is checked against the state at fire time; if the sender has
        left, the pending message is discarded.

        Returns:
            The message id if delivered, otherwise None
        """
        message = self.db.get(Message, message_id)
        if message is None or message.is_sent:
            return None

        conversation = self.directory.find_conversation_for_message(message)
        if not conversation.has_member(message.u_id):
            logger.info(
                "Scheduled message dropped, sender no longer a member",
                extra={"extra_data": {"message_id": message_id, "u_id": message.u_id}}
            )
            self.db.delete(message)
            self.db.commit()
            return None

        sent_ms = now_ms()
        message.is_sent = True
        message.time_sent = sent_ms // 1000
        message.time_sent_ms = sent_ms
        self.db.flush()
        self.notifier.notify_tags(message)
        self.db.commit()
        logger.info("Scheduled message delivered", extra={"extra_data": {"message_id": message_id}})
        return message_id

    # Reading

    def search(self, user: User, query: str) -> List[dict]:
        """Case-insensitive substring search over the user's conversations."""
        if len(query) < 1 or len(query) > self.settings.message_max_length:
            raise InputError("Query length must be between 1 and "
                             f"{self.settings.message_max_length} characters")

        channel_ids = self.db.query(ChannelMember.channel_id).filter(ChannelMember.u_id == user.u_id)
        dm_ids = self.db.query(DmMember.dm_id).filter(DmMember.u_id == user.u_id)
        messages = (
            self.db.query(Message)
            .filter(Message.is_sent.is_(True))
            .filter(Message.channel_id.in_(channel_ids) | Message.dm_id.in_(dm_ids))
            .order_by(Message.message_id.asc())
            .all()
        )
        needle = query.lower()
        return [m.to_dict(user.u_id) for m in messages if needle in m.body.lower()]


def deliver_scheduled_message(message_id: int) -> None:
    """Scheduler entry point; runs on a worker thread with its own session."""
    with get_db_context() as db:
        MessageService(db).deliver_scheduled(message_id)


def restore_pending_messages(db: Session, scheduler: Optional[JobScheduler] = None) -> int:
    """
    Re-register jobs for deferred sends stored before a restart; returns the count.

    Sends that fell due while the process was down are delivered immediately.
    """
    scheduler = scheduler or get_scheduler()
    pending = db.query(Message).filter(Message.is_sent.is_(False)).all()
    now = int(time.time())
    for message in pending:
        if message.time_sent <= now:
            MessageService(db, scheduler=scheduler).deliver_scheduled(message.message_id)
            continue
        scheduler.schedule_at(
            sendlater_job_id(message.message_id),
            message.time_sent,
            deliver_scheduled_message,
            args=(message.message_id,),
        )
    if pending:
        logger.info("Restored deferred sends", extra={"extra_data": {"count": len(pending)}})
    return len(pending)
