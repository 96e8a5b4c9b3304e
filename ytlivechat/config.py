"""Configuration management."""

import os
from pathlib import Path
from typing import Optional

import yaml

from ytlivechat.models import Config

API_KEY_ENV = "YOUTUBE_API_KEY"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file.

    A missing or empty file gives the defaults. When the file sets no
    ``api_key``, the ``YOUTUBE_API_KEY`` environment variable is used.
    """
    if config_path is None:
        config_path = Path("config.yaml")

    data = {}
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping")

    if not data.get("api_key") and os.environ.get(API_KEY_ENV):
        data["api_key"] = os.environ[API_KEY_ENV]

    return Config(**data)
