"""
Message models for YouTube live chat.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


def parse_timestamp(value: Optional[str]) -> datetime:
    """
    Parse an RFC 3339 timestamp as returned by the Data API.

    Args:
        value: Timestamp string such as ``2024-05-01T12:00:00.123Z``

    Returns:
        Timezone-aware datetime (UTC when the string has no offset)

    Raises:
        ValueError: If the value is missing or not a timestamp
    """
    if not value:
        raise ValueError("Missing timestamp")

    if value.endswith("Z"):
        value = value[:-1] + "+00:00"

    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Author:
    """Author details attached to a chat message."""
    display_name: str
    channel_id: str
    profile_image_url: Optional[str] = None
    is_chat_owner: bool = False
    is_chat_moderator: bool = False
    is_chat_sponsor: bool = False
    is_verified: bool = False

    @classmethod
    def from_raw(cls, data: Optional[Dict[str, Any]]) -> Optional["Author"]:
        """Parse ``authorDetails``; None when the item carries no author."""
        if not data:
            return None

        return cls(
            display_name=data.get("displayName", "Unknown"),
            channel_id=data.get("channelId", ""),
            profile_image_url=data.get("profileImageUrl"),
            is_chat_owner=data.get("isChatOwner", False),
            is_chat_moderator=data.get("isChatModerator", False),
            is_chat_sponsor=data.get("isChatSponsor", False),
            is_verified=data.get("isVerified", False),
        )


@dataclass(frozen=True)
class ChatMessage:
    """Represents a live chat message."""
    message_id: str
    published_at: datetime
    display_message: str
    message_type: str
    author: Optional[Author]
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_raw(cls, data: Dict[str, Any]) -> "ChatMessage":
        """
        Parse ChatMessage from a ``liveChatMessages`` resource.

        Args:
            data: One entry of the ``items`` list

        Returns:
            Parsed ChatMessage instance

        Raises:
            ValueError: If the item has no usable ``snippet.publishedAt``
        """
        snippet = data.get("snippet") or {}

        # Some event types (e.g. deletions) have no display text
        display_message = snippet.get("displayMessage")
        if display_message is None:
            text_details = snippet.get("textMessageDetails") or {}
            display_message = text_details.get("messageText", "")

        return cls(
            message_id=data.get("id", ""),
            published_at=parse_timestamp(snippet.get("publishedAt")),
            display_message=display_message,
            message_type=snippet.get("type", "textMessageEvent"),
            author=Author.from_raw(data.get("authorDetails")),
            raw=data,
        )


@dataclass(frozen=True)
class LiveBroadcast:
    """A live video found by the channel search."""
    video_id: Optional[str]
    title: Optional[str] = None
    channel_title: Optional[str] = None
    published_at: Optional[datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_raw(cls, data: Dict[str, Any]) -> "LiveBroadcast":
        """Parse one ``search`` result item."""
        id_data = data.get("id") or {}
        snippet = data.get("snippet") or {}

        published_at = None
        if snippet.get("publishedAt"):
            try:
                published_at = parse_timestamp(snippet["publishedAt"])
            except ValueError as e:
                logger.warning(f"Failed to parse broadcast timestamp: {e}")

        return cls(
            video_id=id_data.get("videoId"),
            title=snippet.get("title"),
            channel_title=snippet.get("channelTitle"),
            published_at=published_at,
            raw=data,
        )


@dataclass(frozen=True)
class ChatSession:
    """Resolved identifiers of a live broadcast and its chat."""
    live_id: str
    chat_id: str


def parse_messages(items: List[Dict[str, Any]]) -> List[ChatMessage]:
    """Parse a list of message items, preserving response order."""
    return [ChatMessage.from_raw(item) for item in items]
