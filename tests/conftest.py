"""Shared fixtures for ytlivechat tests."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from ytlivechat.chat.models import ChatMessage, LiveBroadcast

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def raw_message(msg_id: str, offset_sec: float, text: str = "", author: str = "viewer") -> dict:
    """Build a liveChatMessages item published ``offset_sec`` after BASE_TIME."""
    published = BASE_TIME + timedelta(seconds=offset_sec)
    return {
        "kind": "youtube#liveChatMessage",
        "id": msg_id,
        "snippet": {
            "type": "textMessageEvent",
            "publishedAt": published.isoformat().replace("+00:00", "Z"),
            "displayMessage": text or f"message {msg_id}",
            "textMessageDetails": {"messageText": text or f"message {msg_id}"},
        },
        "authorDetails": {
            "channelId": f"UC_{author}",
            "displayName": author,
            "isChatOwner": False,
            "isChatModerator": False,
            "isChatSponsor": False,
            "isVerified": False,
        },
    }


def make_message(msg_id: str, offset_sec: float, text: str = "") -> ChatMessage:
    return ChatMessage.from_raw(raw_message(msg_id, offset_sec, text))


def make_broadcast(video_id: str, title: str = "") -> LiveBroadcast:
    return LiveBroadcast.from_raw(
        {
            "kind": "youtube#searchResult",
            "id": {"kind": "youtube#video", "videoId": video_id},
            "snippet": {"title": title or f"Live {video_id}", "channelTitle": "Channel"},
        }
    )


class FakeDataAPI:
    """In-memory stand-in for YouTubeDataAPI."""

    def __init__(self, broadcasts=None, chat_ids=None, pages=None):
        self.broadcasts = list(broadcasts or [])
        self.chat_ids = dict(chat_ids or {})
        # Each page is a list of ChatMessage or an exception to raise
        self.pages = list(pages or [])
        self.calls = []
        self.fetch_count = 0

    async def search_live_broadcasts(self, channel_id):
        self.calls.append(("search", channel_id))
        return list(self.broadcasts)

    async def get_active_live_chat_id(self, live_id):
        self.calls.append(("videos", live_id))
        return self.chat_ids.get(live_id)

    async def list_chat_messages(self, chat_id):
        self.calls.append(("messages", chat_id))
        self.fetch_count += 1
        if not self.pages:
            return []
        page = self.pages.pop(0)
        if isinstance(page, Exception):
            raise page
        return list(page)


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Yield to the loop until ``predicate()`` is true."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


class Recorder:
    """Collects emitted messages and errors."""

    def __init__(self):
        self.messages = []
        self.errors = []

    async def on_message(self, message):
        self.messages.append(message)

    async def on_error(self, error):
        self.errors.append(error)

    @property
    def ids(self):
        return [m.message_id for m in self.messages]


@pytest.fixture
def recorder():
    return Recorder()
