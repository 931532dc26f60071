"""
User and session database models.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.core.database import Base

GLOBAL_OWNER = 1
GLOBAL_MEMBER = 2


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A registered workspace user."""

    __tablename__ = "users"

    u_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    name_first = Column(String(50), nullable=False)
    name_last = Column(String(50), nullable=False)

    # Lowercase alphanumeric, unique; this is what @mentions match against
    handle_str = Column(String(32), nullable=False, unique=True, index=True)

    password_digest = Column(String(64), nullable=False)
    permission_id = Column(Integer, nullable=False, default=GLOBAL_MEMBER)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_global_owner(self) -> bool:
        return self.permission_id == GLOBAL_OWNER

    def __repr__(self) -> str:
        return f"<User(u_id={self.u_id}, handle_str={self.handle_str})>"

    def to_dict(self) -> dict:
        """Member summary as exposed in details responses."""
        return {
            "uId": self.u_id,
            "email": self.email,
            "nameFirst": self.name_first,
            "nameLast": self.name_last,
            "handleStr": self.handle_str,
        }


class UserSession(Base):
    """An active login; only the token digest is stored."""

    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    u_id = Column(Integer, ForeignKey("users.u_id", ondelete="CASCADE"), nullable=False, index=True)
    token_digest = Column(String(64), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="sessions")
