"""
Message and react database models.
"""
from sqlalchemy import Boolean, Column, Integer, BigInteger, Text, ForeignKey, Index, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.database import Base

# The only react currently offered
THUMBS_UP = 1
VALID_REACT_IDS = (THUMBS_UP,)


class Message(Base):
    """A message posted to exactly one channel or DM.

    This table is the single authoritative store; channels and DMs reach their
    messages through the foreign key, never through a copy.
    """

    __tablename__ = "messages"

    message_id = Column(Integer, primary_key=True, autoincrement=True)
    u_id = Column(Integer, ForeignKey("users.u_id"), nullable=False, index=True)
    channel_id = Column(Integer, ForeignKey("channels.channel_id", ondelete="CASCADE"), nullable=True)
    dm_id = Column(Integer, ForeignKey("dms.dm_id", ondelete="CASCADE"), nullable=True)

    body = Column(Text, nullable=False)
    time_sent = Column(BigInteger, nullable=False)
    time_sent_ms = Column(BigInteger, nullable=False)
    is_pinned = Column(Boolean, nullable=False, default=False)

    # False while a deferred send is waiting for its fire time
    is_sent = Column(Boolean, nullable=False, default=True)

    channel = relationship("Channel", back_populates="messages")
    dm = relationship("Dm", back_populates="messages")
    reacts = relationship(
        "React",
        back_populates="message",
        cascade="all, delete-orphan",
        order_by="React.id",
    )

    __table_args__ = (
        CheckConstraint(
            "(channel_id IS NULL) <> (dm_id IS NULL)",
            name="ck_messages_one_conversation",
        ),
        Index("ix_messages_channel_time", "channel_id", "time_sent_ms"),
        Index("ix_messages_dm_time", "dm_id", "time_sent_ms"),
    )

    def __repr__(self) -> str:
        return f"<Message(message_id={self.message_id}, u_id={self.u_id})>"

    def react_summaries(self, viewer_id: int) -> list:
        """Per-react uIds with the viewer flag computed at read time."""
        summaries = []
        for react_id in VALID_REACT_IDS:
            u_ids = [r.u_id for r in self.reacts if r.react_id == react_id]
            summaries.append({
                "reactId": react_id,
                "uIds": u_ids,
                "isThisUserReacted": viewer_id in u_ids,
            })
        return summaries

    def to_dict(self, viewer_id: int) -> dict:
        """Convert model to the listing representation for one viewer."""
        return {
            "messageId": self.message_id,
            "uId": self.u_id,
            "message": self.body,
            "timeSent": self.time_sent,
            "reacts": self.react_summaries(viewer_id),
            "isPinned": self.is_pinned,
        }


class React(Base):
    """One user's react on one message."""

    __tablename__ = "reacts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    message_id = Column(Integer, ForeignKey("messages.message_id", ondelete="CASCADE"), nullable=False, index=True)
    react_id = Column(Integer, nullable=False)
    u_id = Column(Integer, ForeignKey("users.u_id", ondelete="CASCADE"), nullable=False)

    message = relationship("Message", back_populates="reacts")

    __table_args__ = (
        UniqueConstraint("message_id", "react_id", "u_id", name="uq_reacts_message_react_user"),
    )
