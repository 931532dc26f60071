"""
Channel and DM database models with their membership tables.
"""
from sqlalchemy import Boolean, Column, Integer, String, Text, BigInteger, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.database import Base


class Channel(Base):
    """A named channel; public channels can be joined freely."""

    __tablename__ = "channels"

    channel_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(20), nullable=False)
    is_public = Column(Boolean, nullable=False, default=True)

    # Standup buffer; at most one standup runs per channel
    standup_active = Column(Boolean, nullable=False, default=False)
    standup_finish = Column(BigInteger, nullable=True)
    standup_message = Column(Text, nullable=False, default="")
    standup_user = Column(Integer, ForeignKey("users.u_id"), nullable=True)

    members = relationship(
        "ChannelMember",
        back_populates="channel",
        cascade="all, delete-orphan",
        order_by="ChannelMember.id",
    )
    messages = relationship("Message", back_populates="channel", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Channel(channel_id={self.channel_id}, name={self.name})>"


class ChannelMember(Base):
    __tablename__ = "channel_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    channel_id = Column(Integer, ForeignKey("channels.channel_id", ondelete="CASCADE"), nullable=False, index=True)
    u_id = Column(Integer, ForeignKey("users.u_id", ondelete="CASCADE"), nullable=False)
    is_owner = Column(Boolean, nullable=False, default=False)

    channel = relationship("Channel", back_populates="members")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("channel_id", "u_id", name="uq_channel_members_channel_user"),
    )


class Dm(Base):
    """A direct-message thread; its name is the sorted member handles."""

    __tablename__ = "dms"

    dm_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    creator_id = Column(Integer, ForeignKey("users.u_id"), nullable=False)

    members = relationship(
        "DmMember",
        back_populates="dm",
        cascade="all, delete-orphan",
        order_by="DmMember.id",
    )
    messages = relationship("Message", back_populates="dm", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Dm(dm_id={self.dm_id}, name={self.name})>"


class DmMember(Base):
    __tablename__ = "dm_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dm_id = Column(Integer, ForeignKey("dms.dm_id", ondelete="CASCADE"), nullable=False, index=True)
    u_id = Column(Integer, ForeignKey("users.u_id", ondelete="CASCADE"), nullable=False)

    dm = relationship("Dm", back_populates="members")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("dm_id", "u_id", name="uq_dm_members_dm_user"),
    )
