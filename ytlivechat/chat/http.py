"""
HTTP API for looking up live broadcasts, chat ids and chat messages.
"""

import asyncio
import aiohttp
from typing import Any, Dict, List, Optional
import logging

from ytlivechat.chat.exceptions import RequestFailedError
from ytlivechat.chat.models import ChatMessage, LiveBroadcast, parse_messages

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.googleapis.com/youtube/v3"
DEFAULT_MAX_RESULTS = 2000


class YouTubeDataAPI:
    """
    Thin wrapper around the three YouTube Data API v3 endpoints we need.

    Every call opens its own ClientSession; the API key is sent as the
    ``key`` query parameter.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        max_results: int = DEFAULT_MAX_RESULTS,
        timeout: float = 10.0,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._max_results = max_results
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def max_results(self) -> int:
        return self._max_results

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Perform a GET request and decode the JSON body.

        Raises:
            RequestFailedError: On non-2xx status, network error, timeout
                or a body that is not a JSON object
        """
        url = f"{self._base_url}/{path}"
        query = dict(params, key=self._api_key)

        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.get(url, params=query) as response:
                    if not 200 <= response.status < 300:
                        raise RequestFailedError(
                            f"Request to {path} failed: HTTP {response.status}",
                            status=response.status,
                        )

                    data = await response.json(content_type=None)

        except aiohttp.ClientError as e:
            raise RequestFailedError(f"Network error: {e}")
        except asyncio.TimeoutError:
            raise RequestFailedError(f"Request to {path} timed out")
        except ValueError as e:
            raise RequestFailedError(f"Invalid JSON from {path}: {e}")

        if not isinstance(data, dict):
            raise RequestFailedError(f"Unexpected response from {path}")

        return data

    @staticmethod
    def _items(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        items = data.get("items", [])
        if not isinstance(items, list):
            raise RequestFailedError("Response items is not a list")
        return items

    async def search_live_broadcasts(self, channel_id: str) -> List[LiveBroadcast]:
        """
        Find the videos of a channel that are currently live.

        Args:
            channel_id: The YouTube channel ID

        Returns:
            Live broadcasts in the order returned by the API (may be empty)

        Raises:
            RequestFailedError: If the request fails or an item is malformed
        """
        data = await self._get_json(
            "search",
            {
                "eventType": "live",
                "part": "id,snippet",
                "channelId": channel_id,
                "type": "video",
            },
        )

        try:
            broadcasts = [LiveBroadcast.from_raw(item) for item in self._items(data)]
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise RequestFailedError(f"Malformed search result: {e}")

        logger.debug(f"Found {len(broadcasts)} live broadcast(s) for channel {channel_id}")
        return broadcasts

    async def get_active_live_chat_id(self, live_id: str) -> Optional[str]:
        """
        Get the active live chat id of a broadcast.

        Args:
            live_id: The video id of the live broadcast

        Returns:
            The chat id, or None if the video or its chat is not found

        Raises:
            RequestFailedError: If the request fails or an item is malformed
        """
        data = await self._get_json(
            "videos",
            {
                "part": "liveStreamingDetails",
                "id": live_id,
            },
        )

        items = self._items(data)
        if not items:
            logger.warning(f"No video details for live {live_id}")
            return None

        try:
            details = items[0].get("liveStreamingDetails") or {}
            chat_id = details.get("activeLiveChatId")
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise RequestFailedError(f"Malformed video details: {e}")

        if chat_id is not None and not isinstance(chat_id, str):
            raise RequestFailedError("Malformed video details: activeLiveChatId is not a string")

        return chat_id

    async def list_chat_messages(self, chat_id: str) -> List[ChatMessage]:
        """
        Fetch the current page of chat messages.

        Only the first ``max_results`` messages are returned; there is no
        pagination.

        Args:
            chat_id: The live chat id

        Returns:
            Parsed messages in response order

        Raises:
            RequestFailedError: If the request fails or an item is malformed
        """
        data = await self._get_json(
            "liveChat/messages",
            {
                "liveChatId": chat_id,
                "part": "id,snippet,authorDetails",
                "maxResults": self._max_results,
            },
        )

        try:
            return parse_messages(self._items(data))
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise RequestFailedError(f"Malformed chat message: {e}")
