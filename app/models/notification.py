"""
Notification database model.
"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey

from app.core.database import Base
from app.models.user import utcnow


class Notification(Base):
    """An append-only entry in a user's notification feed.

    `channel_id` / `dm_id` are plain integers with -1 for "not this kind";
    they are not foreign keys so that removing a DM leaves the feed intact.
    """

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    u_id = Column(Integer, ForeignKey("users.u_id", ondelete="CASCADE"), nullable=False, index=True)
    channel_id = Column(Integer, nullable=False, default=-1)
    dm_id = Column(Integer, nullable=False, default=-1)
    notification_message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, u_id={self.u_id})>"

    def to_dict(self) -> dict:
        return {
            "channelId": self.channel_id,
            "dmId": self.dm_id,
            "notificationMessage": self.notification_message,
        }
