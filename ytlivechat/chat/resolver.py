"""
Resolution of a channel id into the chat id of its live broadcast.
"""

import logging
from dataclasses import dataclass
from typing import List, Union

from ytlivechat.chat.http import YouTubeDataAPI
from ytlivechat.chat.models import ChatSession, LiveBroadcast
from ytlivechat.chat.exceptions import (
    ChatNotFoundError,
    InvalidLiveIdError,
    LiveNotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass
class AmbiguousLiveBroadcast:
    """
    The channel has more than one live broadcast.

    Not an error: pick one of ``candidates`` and call ``resume()`` to
    finish resolution.
    """
    channel_id: str
    candidates: List[LiveBroadcast]
    resolver: "LiveChatResolver"

    async def resume(self, candidate: LiveBroadcast) -> ChatSession:
        """Continue resolution with the chosen broadcast."""
        return await self.resolver.resolve_chat(candidate)


class LiveChatResolver:
    """Turns a channel id into a ChatSession via two dependent lookups."""

    def __init__(self, api: YouTubeDataAPI):
        self._api = api

    async def resolve(self, channel_id: str) -> Union[ChatSession, AmbiguousLiveBroadcast]:
        """
        Resolve the live chat of a channel.

        Args:
            channel_id: The YouTube channel ID

        Returns:
            ChatSession when exactly one broadcast is live, otherwise an
            AmbiguousLiveBroadcast listing every candidate

        Raises:
            LiveNotFoundError: If the channel is not live
            ChatNotFoundError: If the broadcast has no active chat
            RequestFailedError: If a request fails
        """
        broadcasts = await self._api.search_live_broadcasts(channel_id)

        if not broadcasts:
            raise LiveNotFoundError("Cannot find live.")

        if len(broadcasts) > 1:
            logger.info(
                f"Channel {channel_id} has {len(broadcasts)} live broadcasts, "
                "waiting for a selection"
            )
            return AmbiguousLiveBroadcast(
                channel_id=channel_id,
                candidates=list(broadcasts),
                resolver=self,
            )

        return await self.resolve_chat(broadcasts[0])

    async def resolve_chat(self, broadcast: LiveBroadcast) -> ChatSession:
        """
        Look up the active chat of a broadcast.

        Raises:
            InvalidLiveIdError: If the broadcast has no video id
            ChatNotFoundError: If no active chat is found
            RequestFailedError: If the request fails
        """
        live_id = broadcast.video_id
        if not live_id:
            raise InvalidLiveIdError("Live id is invalid.")

        chat_id = await self._api.get_active_live_chat_id(live_id)
        if not chat_id:
            raise ChatNotFoundError("Can not find chat.")

        logger.info(f"Got chat id {chat_id} for live {live_id}")
        return ChatSession(live_id=live_id, chat_id=chat_id)
