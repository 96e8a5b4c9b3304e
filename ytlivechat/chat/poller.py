"""
Interval polling of live chat messages with timestamp deduplication.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Set

from ytlivechat.chat.http import YouTubeDataAPI
from ytlivechat.chat.models import ChatMessage
from ytlivechat.chat.exceptions import RequestFailedError

logger = logging.getLogger(__name__)

MessageCallback = Callable[[ChatMessage], Awaitable[None]]
ErrorCallback = Callable[[Exception], Awaitable[None]]


class ChatPoller:
    """
    Fetches a live chat every ``interval`` seconds and emits unseen messages.

    A message is new when its publish time is strictly later than the
    watermark, the publish time of the latest message seen so far. The
    watermark only moves forward and survives stop()/resume().

    Fetches are not serialized: if one takes longer than the interval the
    next one starts anyway, and both advance the same watermark.
    """

    def __init__(
        self,
        api: YouTubeDataAPI,
        chat_id: str,
        on_message: MessageCallback,
        on_error: ErrorCallback,
    ):
        self._api = api
        self._chat_id = chat_id
        self._on_message = on_message
        self._on_error = on_error

        self.watermark: Optional[datetime] = None
        self.ignore_backlog = False

        self._interval: Optional[float] = None
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._fetches: Set[asyncio.Task] = set()

        # Statistics
        self._total_fetches = 0
        self._total_errors = 0

    def start(self, interval: float, ignore_backlog: bool = False) -> None:
        """
        Start polling: one fetch now, then one every ``interval`` seconds.

        Args:
            interval: Seconds between fetches
            ignore_backlog: Do not emit messages returned by the first fetch
        """
        if interval <= 0:
            raise ValueError("interval must be positive")

        if self.running:
            logger.warning("Poller already running, ignoring start()")
            return

        self._interval = interval
        self.ignore_backlog = ignore_backlog
        self._generation += 1
        self._task = asyncio.create_task(self._schedule())
        logger.info(f"Polling chat {self._chat_id} every {interval}s")

    def resume(self) -> None:
        """Start again with the previous interval, keeping the watermark."""
        if self._interval is None:
            raise RuntimeError("resume() called before start()")
        self.start(self._interval)

    def stop(self) -> None:
        """Stop scheduling fetches. Fetches already in flight still complete."""
        if self._task is None:
            return

        self._task.cancel()
        self._task = None
        logger.info(f"Stopped polling chat {self._chat_id}")

    async def drain(self) -> None:
        """Wait for fetches that are still in flight."""
        if self._fetches:
            await asyncio.gather(*list(self._fetches), return_exceptions=True)

    def _launch(self) -> asyncio.Task:
        task = asyncio.create_task(self.fetch(self.ignore_backlog))
        self._fetches.add(task)
        task.add_done_callback(self._fetches.discard)
        return task

    async def _schedule(self) -> None:
        # The first fetch must finish before the next tick so that backlog
        # suppression covers exactly one response. shield() keeps it alive
        # if stop() cancels us meanwhile.
        await asyncio.shield(self._launch())

        while True:
            await asyncio.sleep(self._interval)
            self._launch()

    async def fetch(self, suppress: Optional[bool] = None) -> bool:
        """
        Fetch once and emit every message newer than the watermark.

        Args:
            suppress: Advance the watermark without emitting. Defaults to
                the backlog flag at the time of the call.

        Returns:
            True if the fetch succeeded, False if it failed and was reported
        """
        if suppress is None:
            suppress = self.ignore_backlog
        generation = self._generation
        self._total_fetches += 1

        try:
            messages = await self._api.list_chat_messages(self._chat_id)
        except RequestFailedError as e:
            self._total_errors += 1
            logger.debug(f"Fetch failed for chat {self._chat_id}: {e}")
            await self._on_error(e)
            return False

        emitted = self._advance(messages)

        # A start() since this fetch began owns the flag now
        if suppress and generation == self._generation:
            self.ignore_backlog = False

        if not suppress:
            for message in emitted:
                await self._on_message(message)

        logger.debug(
            f"Fetched {len(messages)} message(s), {len(emitted)} new"
            + (" (backlog ignored)" if suppress else "")
        )
        return True

    def _advance(self, messages: List[ChatMessage]) -> List[ChatMessage]:
        """Move the watermark over ``messages`` and return the new ones in order."""
        new_messages = []
        for message in messages:
            if self.watermark is None or message.published_at > self.watermark:
                self.watermark = message.published_at
                new_messages.append(message)
        return new_messages

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def in_flight(self) -> int:
        """Number of fetches currently in progress."""
        return len(self._fetches)

    @property
    def total_fetches(self) -> int:
        return self._total_fetches

    @property
    def total_errors(self) -> int:
        return self._total_errors
