"""
HMAC-SHA256 digests for session tokens and passwords, and the token dependency.
"""
import hmac
import hashlib
import secrets
from typing import Annotated, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.errors import AuthError
from app.core.logging import get_logger
from app.models.user import User, UserSession

logger = get_logger(__name__)


def compute_digest(secret: str, value: str) -> str:
    """
    Compute the HMAC-SHA256 digest of a token or password.

    Args:
        secret: The configured secret key
        value: Plain token or password

    Returns:
        Hex-encoded HMAC-SHA256 digest
    """
    return hmac.new(
        key=secret.encode("utf-8"),
        msg=value.encode("utf-8"),
        digestmod=hashlib.sha256
    ).hexdigest()


def verify_digest(secret: str, value: str, digest: str) -> bool:
    """Compare a plain value against a stored digest in constant time."""
    return hmac.compare_digest(compute_digest(secret, value), digest)


def new_token() -> str:
    """Generate an opaque session token handed to the client."""
    return secrets.token_urlsafe(32)


def find_user_by_token(db: Session, token: Optional[str]) -> User:
    """
    Resolve the user owning a session token.

    Raises:
        AuthError: if the token is missing or not an active session
    """
    if not token:
        raise AuthError("Token is invalid")

    digest = compute_digest(get_settings().secret_key, token)
    session = db.query(UserSession).filter(UserSession.token_digest == digest).first()
    if session is None:
        logger.debug("Unknown session token presented")
        raise AuthError("Token is invalid")
    return session.user


def get_current_user(
    db: Annotated[Session, Depends(get_db)],
    token: Annotated[Optional[str], Header()] = None,
) -> User:
    """FastAPI dependency resolving the `token` header to the acting user."""
    return find_user_by_token(db, token)


CurrentUser = Annotated[User, Depends(get_current_user)]
