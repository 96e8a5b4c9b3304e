"""
Main YouTube live chat client.
"""

import asyncio
import inspect
import logging
from typing import Callable, Dict, List, Optional, Union

from ytlivechat.chat.http import YouTubeDataAPI
from ytlivechat.chat.models import ChatMessage, ChatSession, LiveBroadcast
from ytlivechat.chat.poller import ChatPoller
from ytlivechat.chat.resolver import AmbiguousLiveBroadcast, LiveChatResolver
from ytlivechat.chat.exceptions import InvalidChatIdError, YouTubeChatError

logger = logging.getLogger(__name__)


class LiveSelection:
    """
    Handed to ``on_multilive`` when a channel has several live broadcasts.

    Call ``select()`` with one of ``candidates`` (or its index), either
    inside the handler or later from another task. Resolution waits until
    a selection is made.
    """

    def __init__(self, candidates: List[LiveBroadcast]):
        self.candidates = candidates
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()

    def select(self, candidate: Union[LiveBroadcast, int]) -> None:
        if self._future.done():
            raise RuntimeError("A live broadcast was already selected")

        if isinstance(candidate, int):
            if not 0 <= candidate < len(self.candidates):
                raise ValueError(
                    f"Selection {candidate} out of range, expected 0-{len(self.candidates) - 1}"
                )
            candidate = self.candidates[candidate]

        self._future.set_result(candidate)

    @property
    def selected(self) -> bool:
        return self._future.done()

    async def wait(self) -> LiveBroadcast:
        return await self._future


class YouTubeChatClient:
    """
    YouTube live chat client.

    Resolves the live chat of a channel and polls it for new messages.
    Results are delivered through event handlers instead of exceptions.
    """

    def __init__(
        self,
        channel_id: str,
        api_key: str,
        api: Optional[YouTubeDataAPI] = None,
    ):
        """
        Initialize chat client.

        Args:
            channel_id: The YouTube channel ID
            api_key: Data API key
            api: Preconfigured API wrapper (built from api_key if omitted)
        """
        self._channel_id = channel_id
        self._api = api or YouTubeDataAPI(api_key)
        self._resolver = LiveChatResolver(self._api)

        self._session: Optional[ChatSession] = None
        self._poller: Optional[ChatPoller] = None
        self._event_handlers: Dict[str, Callable] = {}

        # Statistics
        self._total_messages = 0
        self._total_errors = 0

        logger.info(f"Initialized YouTubeChatClient for channel {channel_id}")

    def event(self, func: Callable) -> Callable:
        """
        Decorator for registering event handlers.

        Usage:
            @client.event
            async def on_message(message: ChatMessage):
                print(f"{message.author.display_name}: {message.display_message}")

        Supported events:
            - on_ready(session: ChatSession): Chat id resolved
            - on_message(message: ChatMessage): New chat message
            - on_error(error: Exception): Any failure
            - on_multilive(selection: LiveSelection): Several live broadcasts
        """
        event_name = func.__name__
        self._event_handlers[event_name] = func
        logger.debug(f"Registered event handler: {event_name}")
        return func

    async def _dispatch_event(self, event_name: str, *args, **kwargs) -> None:
        """Dispatch an event to registered handlers."""
        handler = self._event_handlers.get(event_name)
        if handler:
            try:
                if inspect.iscoroutinefunction(handler):
                    await handler(*args, **kwargs)
                else:
                    handler(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event handler {event_name}: {e}", exc_info=True)

    async def _handle_message(self, message: ChatMessage) -> None:
        self._total_messages += 1
        await self._dispatch_event("on_message", message)

    async def _handle_error(self, error: Exception) -> None:
        self._total_errors += 1
        logger.warning(f"Chat error: {error}")
        await self._dispatch_event("on_error", error)

    async def connect(self) -> Optional[ChatSession]:
        """
        Resolve the channel's live chat.

        Always returns once resolution ends, even on failure (reported
        through on_error). With several live broadcasts it waits for the
        on_multilive handler to select one.

        Returns:
            The resolved ChatSession, or None on failure
        """
        logger.info(f"Resolving live chat for channel {self._channel_id}...")

        try:
            result = await self._resolver.resolve(self._channel_id)

            if isinstance(result, AmbiguousLiveBroadcast):
                selection = LiveSelection(result.candidates)
                await self._dispatch_event("on_multilive", selection)
                candidate = await selection.wait()
                result = await result.resume(candidate)

        except YouTubeChatError as e:
            await self._handle_error(e)
            return None

        if self._poller is not None:
            self._poller.stop()
            self._poller = None

        self._session = result
        await self._dispatch_event("on_ready", result)
        return result

    async def listen(self, interval: float, ignore_backlog: bool = False) -> bool:
        """
        Poll chat messages every ``interval`` seconds.

        Returns immediately; fetches run in the background until stop().

        Args:
            interval: Seconds between fetches
            ignore_backlog: Skip messages sent before listening started

        Returns:
            True if polling started, False if no chat id is resolved yet
        """
        if self._session is None:
            await self._handle_error(InvalidChatIdError("Chat id is invalid."))
            return False

        if self._poller is None:
            self._poller = ChatPoller(
                api=self._api,
                chat_id=self._session.chat_id,
                on_message=self._handle_message,
                on_error=self._handle_error,
            )

        self._poller.start(interval, ignore_backlog)
        return True

    def stop(self) -> None:
        """Stop polling. The watermark is kept for resume()."""
        if self._poller is not None:
            self._poller.stop()

    def resume(self) -> bool:
        """
        Resume polling after stop() with the previous interval.

        Messages seen before stop() are not emitted again.

        Returns:
            False if listen() was never called successfully
        """
        if self._poller is None:
            logger.warning("resume() called before listen()")
            return False

        self._poller.resume()
        return True

    async def close(self) -> None:
        """Stop polling and wait for in-flight fetches."""
        self.stop()
        if self._poller is not None:
            await self._poller.drain()

    @property
    def channel_id(self) -> str:
        return self._channel_id

    @property
    def live_id(self) -> Optional[str]:
        return self._session.live_id if self._session else None

    @property
    def chat_id(self) -> Optional[str]:
        return self._session.chat_id if self._session else None

    @property
    def active(self) -> bool:
        """Check if currently polling."""
        return self._poller is not None and self._poller.running

    @property
    def total_messages(self) -> int:
        """Get total number of messages delivered."""
        return self._total_messages

    @property
    def total_errors(self) -> int:
        """Get total number of errors reported."""
        return self._total_errors
