"""
Service for timed channel standups.

While a standup runs, members' updates are buffered as "<handle>: <text>"
lines; when it finishes the buffer is posted as one message from the user who
started it, with mentions scanned like any other send.
"""
from __future__ import annotations

import time
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db_context
from app.core.errors import AuthError, InputError
from app.core.logging import get_logger
from app.core.scheduler import JobScheduler, get_scheduler, standup_job_id
from app.models.conversation import Channel
from app.models.user import User
from app.services.directory import Directory
from app.services.message_service import MessageService

logger = get_logger(__name__)


class StandupService:

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

    def _member_channel(self, user: User, channel_id: int) -> Channel:
        channel = self.directory.require_channel(channel_id)
        if not any(m.u_id == user.u_id for m in channel.members):
            raise AuthError("User is not a member of the channel")
        return channel

    def start(self, user: User, channel_id: int, length: int) -> int:
        """Start a standup lasting `length` seconds; returns its finish time."""
        channel = self.directory.require_channel(channel_id)
        if length < 0:
            raise InputError("Length is invalid")
        if channel.standup_active:
            raise InputError("A standup is already active in this channel")
        self._member_channel(user, channel_id)

        time_finish = int(time.time()) + length
        channel.standup_active = True
        channel.standup_finish = time_finish
        channel.standup_message = ""
        channel.standup_user = user.u_id
        self.db.commit()

        self.scheduler.schedule_at(
            standup_job_id(channel_id),
            time_finish,
            finish_standup_job,
            args=(channel_id,),
        )
        logger.info(
            "Standup started",
            extra={"extra_data": {"channel_id": channel_id, "u_id": user.u_id, "time_finish": time_finish}}
        )
        return time_finish

    def active(self, user: User, channel_id: int) -> dict:
        channel = self._member_channel(user, channel_id)
        if channel.standup_active:
            return {"isActive": True, "timeFinish": channel.standup_finish}
        return {"isActive": False, "timeFinish": None}

    def send(self, user: User, channel_id: int, text: str) -> None:
        """Append a line to the running standup's buffer."""
        channel = self.directory.require_channel(channel_id)
        if len(text) > self.settings.message_max_length:
            raise InputError("Message is too long")
        if not channel.standup_active:
            raise InputError("No standup is active in this channel")
        self._member_channel(user, channel_id)

        buffered = f"{user.handle_str}: {text}"
        if channel.standup_message:
            buffered = f"{channel.standup_message}\n{buffered}"
        # The buffer is posted as one message when the standup ends
        if len(buffered) > self.settings.message_max_length:
            raise InputError("Standup summary would exceed the message length limit")
        channel.standup_message = buffered
        self.db.commit()

    def finish(self, channel_id: int) -> Optional[int]:
        """
        Close the standup and post its buffer.

        Returns:
            The id of the posted summary message, or None if nothing was buffered
        """
        channel = self.directory.find_channel(channel_id)
        if channel is None or not channel.standup_active:
            return None

        buffered = channel.standup_message
        starter_id = channel.standup_user
        channel.standup_active = False
        channel.standup_finish = None
        channel.standup_message = ""
        channel.standup_user = None

        message_id = None
        if len(buffered) > self.settings.message_max_length:
            logger.warning(
                "Standup summary discarded, too long",
                extra={"extra_data": {"channel_id": channel_id, "length": len(buffered)}}
            )
        elif buffered:
            messages = MessageService(self.db, self.settings, self.scheduler)
            conversation = self.directory.conversation_for_channel(channel)
            message_id = messages.post_message(starter_id, conversation, buffered).message_id
        self.db.commit()

        logger.info(
            "Standup finished",
            extra={"extra_data": {"channel_id": channel_id, "message_id": message_id}}
        )
        return message_id


def finish_standup_job(channel_id: int) -> None:
    """Scheduler entry point; runs on a worker thread with its own session."""
    with get_db_context() as db:
        StandupService(db).finish(channel_id)


def restore_active_standups(db: Session, scheduler: Optional[JobScheduler] = None) -> int:
    """
    Re-arm standups still running before a restart.

    Standups whose finish time passed while the process was down are finished
    here rather than scheduled.

    Returns:
        The number of active standups handled
    """
    scheduler = scheduler or get_scheduler()
    channels = db.query(Channel).filter(Channel.standup_active.is_(True)).all()
    now = int(time.time())
    for channel in channels:
        if channel.standup_finish is None or channel.standup_finish <= now:
            StandupService(db, scheduler=scheduler).finish(channel.channel_id)
            continue
        scheduler.schedule_at(
            standup_job_id(channel.channel_id),
            channel.standup_finish,
            finish_standup_job,
            args=(channel.channel_id,),
        )
    if channels:
        logger.info("Restored active standups", extra={"extra_data": {"count": len(channels)}})
    return len(channels)
