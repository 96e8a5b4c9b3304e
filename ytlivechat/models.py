"""Configuration model for ytlivechat."""

from typing import Optional

from pydantic import BaseModel, Field

from ytlivechat.chat.http import DEFAULT_BASE_URL, DEFAULT_MAX_RESULTS


class Config(BaseModel):
    """Configuration model."""

    # YouTube Data API credentials
    api_key: Optional[str] = None

    # Channel to follow
    channel_id: Optional[str] = None

    # Polling settings
    poll_interval_sec: float = Field(default=1.0, gt=0)
    ignore_backlog: bool = False
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, ge=200, le=2000)

    # HTTP settings
    base_url: str = DEFAULT_BASE_URL
    request_timeout_sec: float = Field(default=10.0, gt=0)
