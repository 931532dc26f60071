"""
Fixed-size, newest-first paging over a conversation's messages.
"""
from typing import Sequence

from app.core.errors import InputError
from app.models.message import Message

PAGE_SIZE = 50
END_OF_MESSAGES = -1


def _recency_key(message: Message):
    # Message ids are a monotonic sequence, so they settle same-millisecond ties
    return (message.time_sent_ms, message.message_id)


def page(messages: Sequence[Message], start: int, viewer_id: int, page_size: int = PAGE_SIZE) -> dict:
    """
    Return the window `[start, start + page_size)` of messages, most recent first.

    Ordering is recomputed on every call. `end` is the next `start` to request,
    or -1 once the returned page holds the earliest message (or is empty).

    Args:
        messages: Every delivered message of one conversation
        start: Offset into the recency-ordered list
        viewer_id: User whose react flags are computed
        page_size: Maximum messages per page

    Returns:
        {"messages": [...], "start": start, "end": end}

    Raises:
        InputError: if start is negative or greater than the message count
    """
    if start < 0 or start > len(messages):
        raise InputError("Start is greater than total messages")

    ordered = sorted(messages, key=_recency_key, reverse=True)
    window = ordered[start:start + page_size]

    end = start + page_size
    if not window or window[-1] is ordered[-1]:
        end = END_OF_MESSAGES

    return {
        "messages": [message.to_dict(viewer_id) for message in window],
        "start": start,
        "end": end,
    }
