"""
Service for registration and minimal token sessions.
"""
from __future__ import annotations

import re
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.errors import InputError
from app.core.logging import get_logger
from app.core.security import compute_digest, new_token, verify_digest
from app.models.user import GLOBAL_MEMBER, GLOBAL_OWNER, User, UserSession
from app.services.directory import Directory

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
HANDLE_BASE_MAX = 20
NAME_MAX = 50


class AuthService:

    def __init__(self, db: Session, settings: Optional[Settings] = None) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.directory = Directory(db)

    def generate_handle(self, name_first: str, name_last: str) -> str:
        """
        Lowercase alphanumeric first+last name, cut to 20 characters, with the
        smallest numeric suffix (0, 1, ...) appended when already taken.
        """
        base = re.sub(r"[^a-z0-9]", "", f"{name_first}{name_last}".lower())[:HANDLE_BASE_MAX]
        handle = base
        suffix = 0
        while not handle or self.directory.handle_exists(handle):
            handle = f"{base}{suffix}"
            suffix += 1
        return handle

    def _open_session(self, user: User) -> str:
        token = new_token()
        user.sessions.append(UserSession(token_digest=compute_digest(self.settings.secret_key, token)))
        return token

    def register(self, email: str, password: str, name_first: str, name_last: str) -> dict:
        """Create a user and log them in; the first user becomes a global owner."""
        if not EMAIL_PATTERN.match(email):
            raise InputError("Email is invalid")
        if self.directory.find_user_by_email(email) is not None:
            raise InputError("Email is already registered")
        if len(password) < self.settings.password_min_length:
            raise InputError(f"Password must be at least {self.settings.password_min_length} characters")
        for name in (name_first, name_last):
            if len(name) < 1 or len(name) > NAME_MAX:
                raise InputError(f"Names must be between 1 and {NAME_MAX} characters")

        is_first = self.db.query(User.u_id).first() is None
        user = User(
            email=email,
            name_first=name_first,
            name_last=name_last,
            handle_str=self.generate_handle(name_first, name_last),
            password_digest=compute_digest(self.settings.secret_key, password),
            permission_id=GLOBAL_OWNER if is_first else GLOBAL_MEMBER,
        )
        self.db.add(user)
        token = self._open_session(user)
        self.db.commit()
        logger.info(
            "User registered",
            extra={"extra_data": {"u_id": user.u_id, "handle_str": user.handle_str}}
        )
        return {"token": token, "authUserId": user.u_id}

    def login(self, email: str, password: str) -> dict:
        user = self.directory.find_user_by_email(email)
        if user is None:
            raise InputError("Email is not registered")
        if not verify_digest(self.settings.secret_key, password, user.password_digest):
            raise InputError("Password is incorrect")

        token = self._open_session(user)
        self.db.commit()
        return {"token": token, "authUserId": user.u_id}

    def logout(self, token: str) -> None:
        digest = compute_digest(self.settings.secret_key, token)
        self.db.query(UserSession).filter(UserSession.token_digest == digest).delete()
        self.db.commit()
