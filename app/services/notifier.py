"""
Notification emission for adds, tags and reacts.

Notification text is rendered once here; later edits or removals of the
triggering message never touch an emitted notification.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from app.core.config import Settings, get_settings
from app.core.logging import get_logger
from app.models.message import Message
from app.models.notification import Notification
from app.models.user import User
from app.services.directory import Conversation, Directory
from app.services.mentions import scan_delta

logger = get_logger(__name__)


def render_added(inviter_handle: str, conversation_name: str) -> str:
    return f"{inviter_handle} added you to {conversation_name}"


def render_tagged(sender_handle: str, conversation_name: str, body: str, preview_length: int) -> str:
    # Hard slice of the current body, not word aware
    return f"{sender_handle} tagged you in {conversation_name}: {body[:preview_length]}"


def render_reacted(reactor_handle: str, conversation_name: str) -> str:
    return f"{reactor_handle} reacted to your message in {conversation_name}"


class Notifier:
    """Resolves mentions against membership and appends feed entries."""

    def __init__(self, directory: Directory, settings: Optional[Settings] = None) -> None:
        self.directory = directory
        self.settings = settings or get_settings()

    def notify_added(self, inviter: User, invitee_id: int, conversation: Conversation) -> Notification:
        """Tell a user they were invited to a channel or included in a new DM."""
        text = render_added(inviter.handle_str, conversation.name)
        return self.directory.append_notification(invitee_id, conversation, text)

    def resolve_and_notify(self, message: Message, mentioned_handles: Iterable[str]) -> List[Notification]:
        """
        Notify every member of the message's conversation whose handle was mentioned.

        Handles of users outside the conversation are ignored, as are unknown
        handles. Never raises for an empty or unmatched mention set.

        Args:
            message: The message as it now reads (post-edit, post-caption)
            mentioned_handles: Handles to notify, typically from `scan_delta`

        Returns:
            The notifications appended, in member order
        """
        handles = set(mentioned_handles)
        if not handles:
            return []

        conversation = self.directory.find_conversation_for_message(message)
        tagged = [member for member in conversation.members if member.handle_str in handles]
        if not tagged:
            return []

        sender = self.directory.find_user(message.u_id)
        text = render_tagged(
            sender.handle_str,
            conversation.name,
            message.body,
            self.settings.tag_preview_length,
        )

        notifications = [
            self.directory.append_notification(member.u_id, conversation, text)
            for member in tagged
        ]
        logger.info(
            "Tag notifications emitted",
            extra={
                "extra_data": {
                    "message_id": message.message_id,
                    "tagged": [member.u_id for member in tagged],
                }
            }
        )
        return notifications

    def notify_tags(self, message: Message, old_body: Optional[str] = None) -> List[Notification]:
        """Scan a sent or edited message and notify newly mentioned members."""
        return self.resolve_and_notify(message, scan_delta(message.body, old_body))

    def notify_react(self, reactor: User, message: Message) -> Optional[Notification]:
        """Tell a message's author about a react, if the author is still a member."""
        conversation = self.directory.find_conversation_for_message(message)
        if not conversation.has_member(message.u_id):
            logger.debug(
                "React author left conversation, not notified",
                extra={"extra_data": {"message_id": message.message_id, "author": message.u_id}}
            )
            return None

        text = render_reacted(reactor.handle_str, conversation.name)
        return self.directory.append_notification(message.u_id, conversation, text)
