"""
YouTube live chat client built on the Data API v3.
"""

from ytlivechat.chat.client import LiveSelection, YouTubeChatClient
from ytlivechat.chat.models import Author, ChatMessage, ChatSession, LiveBroadcast
from ytlivechat.chat.http import YouTubeDataAPI
from ytlivechat.chat.poller import ChatPoller
from ytlivechat.chat.resolver import AmbiguousLiveBroadcast, LiveChatResolver
from ytlivechat.chat.exceptions import (
    YouTubeChatError,
    LiveNotFoundError,
    ChatNotFoundError,
    InvalidLiveIdError,
    InvalidChatIdError,
    RequestFailedError,
)

__all__ = [
    "YouTubeChatClient",
    "LiveSelection",
    "Author",
    "ChatMessage",
    "ChatSession",
    "LiveBroadcast",
    "YouTubeDataAPI",
    "ChatPoller",
    "AmbiguousLiveBroadcast",
    "LiveChatResolver",
    "YouTubeChatError",
    "LiveNotFoundError",
    "ChatNotFoundError",
    "InvalidLiveIdError",
    "InvalidChatIdError",
    "RequestFailedError",
]
