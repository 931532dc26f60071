"""
Service for reading and editing user profiles.

Members are stored by reference, so a changed handle is what mention scans
resolve against from the next send or edit onwards.
"""
from __future__ import annotations

import re
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.errors import InputError
from app.core.logging import get_logger
from app.models.user import User
from app.services.auth_service import EMAIL_PATTERN, NAME_MAX
from app.services.directory import Directory

logger = get_logger(__name__)

HANDLE_PATTERN = re.compile(r"^[A-Za-z0-9]{3,20}$")


class UserService:

    def __init__(self, db: Session, settings: Optional[Settings] = None) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.directory = Directory(db)

    def all_users(self) -> List[dict]:
        users = self.db.query(User).order_by(User.u_id.asc()).all()
        return [u.to_dict() for u in users]

    def profile(self, u_id: int) -> dict:
        user = self.directory.find_user(u_id)
        if user is None:
            raise InputError("User is invalid")
        return user.to_dict()

    def set_handle(self, user: User, handle_str: str) -> None:
        """Handles are 3 to 20 alphanumeric characters and unique, the caller's own included."""
        if not HANDLE_PATTERN.match(handle_str):
            raise InputError("Handle must be 3 to 20 alphanumeric characters")
        if handle_str == user.handle_str:
            raise InputError("Handle is unchanged")
        if self.directory.handle_exists(handle_str):
            raise InputError("Handle is already in use")

        old_handle = user.handle_str
        user.handle_str = handle_str
        self.db.commit()
        logger.info(
            "Handle changed",
            extra={"extra_data": {"u_id": user.u_id, "old": old_handle, "new": handle_str}}
        )

    def set_name(self, user: User, name_first: str, name_last: str) -> None:
        for name in (name_first, name_last):
            if len(name) < 1 or len(name) > NAME_MAX:
                raise InputError(f"Names must be between 1 and {NAME_MAX} characters")

        user.name_first = name_first
        user.name_last = name_last
        self.db.commit()
        logger.info("Name changed", extra={"extra_data": {"u_id": user.u_id}})

    def set_email(self, user: User, email: str) -> None:
        if not EMAIL_PATTERN.match(email):
            raise InputError("Email is invalid")
        existing = self.directory.find_user_by_email(email)
        if existing is not None and existing.u_id != user.u_id:
            raise InputError("Email is already registered")

        user.email = email
        self.db.commit()
        logger.info("Email changed", extra={"extra_data": {"u_id": user.u_id}})
