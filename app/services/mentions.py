"""
@handle mention detection in message bodies.
"""
import re
from typing import Optional, Set

# Handles are alphanumeric, so anything else separates candidate tokens
_TOKEN_SEPARATOR = re.compile(r"[^A-Za-z0-9]+")


def scan(body: str) -> Set[str]:
    """
    Extract the distinct handles mentioned in a message body.

    The body is split on runs of non-alphanumeric characters and a token is a
    mention only if "@" + token occurs literally in the original body. Checking
    against the original text keeps "hi@alice@bob" resolving both handles.

    Args:
        body: Message text

    Returns:
        Set of mentioned handle tokens (possibly empty)
    """
    if "@" not in body:
        return set()
    return {
        token
        for token in _TOKEN_SEPARATOR.split(body)
        if token and f"@{token}" in body
    }


def scan_delta(new_body: str, old_body: Optional[str] = None) -> Set[str]:
    """Mentions present in `new_body` that `old_body` did not already have."""
    mentioned = scan(new_body)
    if old_body is None:
        return mentioned
    return mentioned - scan(old_body)
