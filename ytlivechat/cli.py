"""Command-line interface for ytlivechat."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError

from ytlivechat.chat import (
    ChatMessage,
    ChatSession,
    LiveSelection,
    YouTubeChatClient,
    YouTubeDataAPI,
)
from ytlivechat.config import load_config
from ytlivechat.models import Config

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _build_config(
    config_path: Path,
    channel: Optional[str],
    api_key: Optional[str],
    **overrides,
) -> Config:
    """Load the YAML config and apply command-line overrides."""
    try:
        cfg = load_config(config_path)
    except (ValueError, yaml.YAMLError) as e:
        raise click.UsageError(f"Invalid config: {e}")

    updates = {k: v for k, v in overrides.items() if v is not None}
    if channel:
        updates["channel_id"] = channel
    if api_key:
        updates["api_key"] = api_key
    try:
        cfg = Config(**{**cfg.model_dump(), **updates})
    except ValidationError as e:
        raise click.UsageError(str(e))

    if not cfg.api_key:
        raise click.UsageError("No API key. Use --api-key, YOUTUBE_API_KEY or config.yaml")
    if not cfg.channel_id:
        raise click.UsageError("No channel. Use --channel or config.yaml")

    return cfg


def _build_client(cfg: Config) -> YouTubeChatClient:
    api = YouTubeDataAPI(
        cfg.api_key,
        base_url=cfg.base_url,
        max_results=cfg.max_results,
        timeout=cfg.request_timeout_sec,
    )
    client = YouTubeChatClient(cfg.channel_id, cfg.api_key, api=api)

    @client.event
    def on_multilive(selection: LiveSelection):
        click.echo(f"Channel has {len(selection.candidates)} live broadcasts:")
        for i, broadcast in enumerate(selection.candidates, start=1):
            click.echo(f"  {i}. {broadcast.title or '(untitled)'} [{broadcast.video_id}]")

        index = click.prompt(
            "Select a broadcast",
            type=click.IntRange(1, len(selection.candidates)),
            default=1,
        )
        selection.select(index - 1)

    @client.event
    def on_error(error: Exception):
        click.echo(f"Error: {error}", err=True)

    return client


def _common_options(func):
    func = click.option(
        "--config",
        type=click.Path(path_type=Path),
        default="config.yaml",
        help="Path to config YAML file",
    )(func)
    func = click.option(
        "--api-key",
        help="YouTube Data API key (falls back to YOUTUBE_API_KEY)",
    )(func)
    func = click.option("--channel", help="Channel ID to follow")(func)
    func = click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")(func)
    return func


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """ytlivechat - Follow the live chat of a YouTube channel."""
    pass


@cli.command()
@_common_options
def resolve(channel: Optional[str], api_key: Optional[str], config: Path, verbose: bool):
    """Find the live broadcast and chat id of a channel."""
    _setup_logging(verbose)
    cfg = _build_config(config, channel, api_key)
    client = _build_client(cfg)

    session = asyncio.run(client.connect())
    if session is None:
        sys.exit(1)

    click.echo(f"live_id: {session.live_id}")
    click.echo(f"chat_id: {session.chat_id}")


async def _listen(client: YouTubeChatClient, cfg: Config, duration: Optional[float]) -> bool:
    @client.event
    def on_ready(session: ChatSession):
        logger.info(f"Chat ready for live {session.live_id}")

    @client.event
    def on_message(message: ChatMessage):
        name = message.author.display_name if message.author else "Unknown"
        click.echo(f"{name}: {message.display_message}")

    if await client.connect() is None:
        return False

    if not await client.listen(cfg.poll_interval_sec, cfg.ignore_backlog):
        return False

    try:
        if duration:
            await asyncio.sleep(duration)
        else:
            await asyncio.Event().wait()
    finally:
        await client.close()
        logger.info(
            f"Stopped after {client.total_messages} message(s), "
            f"{client.total_errors} error(s)"
        )

    return True


@cli.command()
@_common_options
@click.option("--interval", type=float, help="Seconds between fetches")
@click.option(
    "--ignore-backlog/--no-ignore-backlog",
    default=None,
    help="Do not print messages sent before listening started",
)
@click.option("--duration", type=float, help="Stop after this many seconds")
def listen(
    channel: Optional[str],
    api_key: Optional[str],
    config: Path,
    verbose: bool,
    interval: Optional[float],
    ignore_backlog: Optional[bool],
    duration: Optional[float],
):
    """Print live chat messages as they arrive."""
    _setup_logging(verbose)
    cfg = _build_config(
        config,
        channel,
        api_key,
        poll_interval_sec=interval,
        ignore_backlog=ignore_backlog,
    )
    client = _build_client(cfg)

    try:
        ok = asyncio.run(_listen(client, cfg, duration))
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, stopped listening")
        return

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    cli()
