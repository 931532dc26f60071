"""
Service for direct-message threads.
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.errors import AuthError, InputError
from app.core.logging import get_logger
from app.models.conversation import Dm, DmMember
from app.models.user import User
from app.services.directory import Directory
from app.services.notifier import Notifier
from app.services.pager import page

logger = get_logger(__name__)


class DmService:
    """Create, list, leave and remove DMs."""

    def __init__(self, db: Session, settings: Optional[Settings] = None) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.directory = Directory(db)
        self.notifier = Notifier(self.directory, self.settings)

    @staticmethod
    def _membership(dm: Dm, u_id: int) -> Optional[DmMember]:
        return next((m for m in dm.members if m.u_id == u_id), None)

    def _require_member(self, dm: Dm, user: User) -> DmMember:
        membership = self._membership(dm, user.u_id)
        if membership is None:
            raise AuthError("User is not a member of the dm")
        return membership

    def create(self, user: User, u_ids: List[int]) -> int:
        """
        Create a DM between the creator and `u_ids`.

        The DM is named after its members' handles, sorted and joined with
        ", ". Every invitee (not the creator) gets an added notification.
        """
        if user.u_id in u_ids:
            raise InputError("Creator must not be listed in uIds")
        if len(set(u_ids)) != len(u_ids):
            raise InputError("Duplicate uId in uIds")
        invitees = [self.directory.find_user(u_id) for u_id in u_ids]
        if any(invitee is None for invitee in invitees):
            raise InputError("Some uId in uIds is invalid")

        members = sorted([user, *invitees], key=lambda u: u.handle_str)
        dm = Dm(name=", ".join(u.handle_str for u in members), creator_id=user.u_id)
        for member in members:
            dm.members.append(DmMember(u_id=member.u_id))
        self.db.add(dm)
        self.db.flush()

        conversation = self.directory.conversation_for_dm(dm)
        for u_id in u_ids:
            self.notifier.notify_added(user, u_id, conversation)
        self.db.commit()
        logger.info("DM created", extra={"extra_data": {"dm_id": dm.dm_id, "u_id": user.u_id}})
        return dm.dm_id

    def list_mine(self, user: User) -> List[dict]:
        dms = (
            self.db.query(Dm)
            .join(DmMember)
            .filter(DmMember.u_id == user.u_id)
            .order_by(Dm.dm_id.asc())
            .all()
        )
        return [{"dmId": dm.dm_id, "name": dm.name} for dm in dms]

    def details(self, user: User, dm_id: int) -> dict:
        dm = self.directory.require_dm(dm_id)
        self._require_member(dm, user)
        return {
            "name": dm.name,
            "members": [u.to_dict() for u in self.directory.dm_members(dm)],
        }

    def leave(self, user: User, dm_id: int) -> None:
        """Leave a DM; the DM and its name stay as they are."""
        dm = self.directory.require_dm(dm_id)
        membership = self._require_member(dm, user)
        dm.members.remove(membership)
        self.db.commit()

    def remove(self, user: User, dm_id: int) -> None:
        """Delete a DM and all of its messages; creator only."""
        dm = self.directory.require_dm(dm_id)
        if dm.creator_id != user.u_id:
            raise AuthError("User is not the creator of the dm")
        self._require_member(dm, user)

        self.db.delete(dm)
        self.db.commit()
        logger.info("DM removed", extra={"extra_data": {"dm_id": dm_id}})

    def messages(self, user: User, dm_id: int, start: int) -> dict:
        """A page of the DM's messages, most recent first."""
        dm = self.directory.require_dm(dm_id)
        conversation = self.directory.conversation_for_dm(dm)
        messages = self.directory.conversation_messages(conversation)
        if start > len(messages):
            raise InputError("Start is greater than total messages")
        self._require_member(dm, user)
        return page(messages, start, user.u_id, self.settings.page_size)
