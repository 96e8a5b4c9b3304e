"""
Custom exceptions for the YouTube live chat client.
"""

from typing import Optional


class YouTubeChatError(Exception):
    """Base exception for all YouTube live chat errors."""
    pass


class LiveNotFoundError(YouTubeChatError):
    """The channel has no live broadcast right now."""
    pass


class ChatNotFoundError(YouTubeChatError):
    """The broadcast has no active live chat."""
    pass


class InvalidLiveIdError(YouTubeChatError):
    """A live broadcast without a usable video id was selected."""
    pass


class InvalidChatIdError(YouTubeChatError):
    """Polling was requested before a chat id was resolved."""
    pass


class RequestFailedError(YouTubeChatError):
    """HTTP request failed or the response could not be decoded."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
