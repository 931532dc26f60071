"""
Unit tests for newest-first message paging.
"""
import pytest

from app.core.errors import InputError
from app.models.message import Message, React
from app.services.pager import page


def make_messages(count: int, base_ms: int = 1_700_000_000_000) -> list:
    """Messages sent one millisecond apart, ids in send order."""
    return [
        Message(
            message_id=i + 1,
            u_id=1,
            channel_id=1,
            body=f"message {i}",
            time_sent=(base_ms + i) // 1000,
            time_sent_ms=base_ms + i,
            is_pinned=False,
        )
        for i in range(count)
    ]


class TestPage:

    def test_empty_conversation(self):
        assert page([], 0, viewer_id=1) == {"messages": [], "start": 0, "end": -1}

    def test_start_beyond_count_raises(self):
        with pytest.raises(InputError):
            page(make_messages(3), 4, viewer_id=1)

    def test_negative_start_raises(self):
        with pytest.raises(InputError):
            page(make_messages(3), -1, viewer_id=1)

    def test_start_equal_to_count_is_empty_page(self):
        result = page(make_messages(3), 3, viewer_id=1)
        assert result["messages"] == []
        assert result["end"] == -1

    def test_newest_first(self):
        result = page(make_messages(3), 0, viewer_id=1)
        assert [m["message"] for m in result["messages"]] == ["message 2", "message 1", "message 0"]
        assert result["end"] == -1

    def test_order_ignores_storage_order(self):
        messages = make_messages(3)
        result = page(list(reversed(messages)), 0, viewer_id=1)
        assert [m["messageId"] for m in result["messages"]] == [3, 2, 1]

    def test_hundred_and_one_messages(self):
        messages = make_messages(101)

        first = page(messages, 0, viewer_id=1)
        assert len(first["messages"]) == 50
        assert first["end"] == 50
        assert first["messages"][0]["messageId"] == 101

        second = page(messages, 50, viewer_id=1)
        assert len(second["messages"]) == 50
        assert second["end"] == 100

        third = page(messages, 100, viewer_id=1)
        assert len(third["messages"]) == 1
        assert third["start"] == 100
        assert third["end"] == -1
        assert third["messages"][0]["messageId"] == 1

    def test_exactly_one_full_page(self):
        result = page(make_messages(50), 0, viewer_id=1)
        assert len(result["messages"]) == 50
        assert result["end"] == -1

    def test_same_millisecond_ties_break_by_id(self):
        messages = make_messages(3)
        for message in messages:
            message.time_sent_ms = 1_700_000_000_000
        result = page(messages, 0, viewer_id=1)
        assert [m["messageId"] for m in result["messages"]] == [3, 2, 1]

    def test_custom_page_size(self):
        result = page(make_messages(5), 0, viewer_id=1, page_size=2)
        assert len(result["messages"]) == 2
        assert result["end"] == 2

    def test_react_flag_is_per_viewer(self):
        messages = make_messages(1)
        messages[0].reacts = [React(react_id=1, u_id=7)]

        as_reactor = page(messages, 0, viewer_id=7)["messages"][0]["reacts"]
        as_other = page(messages, 0, viewer_id=8)["messages"][0]["reacts"]

        assert as_reactor == [{"reactId": 1, "uIds": [7], "isThisUserReacted": True}]
        assert as_other == [{"reactId": 1, "uIds": [7], "isThisUserReacted": False}]
