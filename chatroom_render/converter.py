#!/usr/bin/env python3
"""Top-level entry points: load a transcript, render it, write it out."""

import logging
import time
from pathlib import Path
from typing import Optional, Protocol

from .fetch import Fetcher
from .html.utils import render_page
from .models import ChatroomConfig
from .parser import load_transcript
from .renderer import RenderServices, TranscriptRenderer, get_default_services
from .renderer_timings import log_timing
from .template_store import StyleScope

logger = logging.getLogger(__name__)


# =============================================================================
# Render Targets
# =============================================================================


class RenderTarget(Protocol):
    """Output sink receiving the assembled markup, once, after rendering."""

    def write(self, markup: str) -> None: ...


class MemoryTarget:
    """Keep rendered markup in memory.

    A detached target ignores writes, so a render that outlives its
    consumer completes without error.
    """

    def __init__(self) -> None:
        self.markup: Optional[str] = None
        self.detached = False

    def detach(self) -> None:
        self.detached = True

    def write(self, markup: str) -> None:
        if self.detached:
            logger.debug("Discarding render for detached target")
            return
        self.markup = markup


class PageFileTarget:
    """Write markup into a standalone HTML page file."""

    def __init__(
        self,
        output_path: Path,
        title: str,
        mount_id: str = "chatroom",
        style_scope: Optional[StyleScope] = None,
    ):
        self.output_path = output_path
        self.title = title
        self.mount_id = mount_id
        self.style_scope = style_scope

    def write(self, markup: str) -> None:
        styles_html = self.style_scope.render() if self.style_scope else ""
        page = render_page(markup, self.title, self.mount_id, styles_html)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text(page, encoding="utf-8")


# =============================================================================
# Entry Points
# =============================================================================


async def render_chatroom(
    config: ChatroomConfig,
    target: RenderTarget,
    services: Optional[RenderServices] = None,
    fetcher: Optional[Fetcher] = None,
) -> str:
    """Load the configured transcript, render it and write it to the target.

    The transcript is read with ``fetcher`` when given, otherwise with the
    services' fetcher. Returns the assembled container markup.

    Raises:
        FatalLoadError: If the transcript cannot be fetched or parsed.
    """
    t_start = time.time()
    services = services if services is not None else get_default_services()

    with log_timing("Load transcript", t_start):
        records = await load_transcript(
            config.json_file_path, fetcher if fetcher is not None else services.fetcher
        )

    renderer = TranscriptRenderer(
        services,
        templates_base_url=config.templates_url,
        chat_viewer_url=config.chat_viewer_url,
    )
    with log_timing(lambda: f"Render ({len(records)} records)", t_start):
        markup = await renderer.render_container(
            records, config.my_avatar, config.hide_avatar, config.title
        )

    with log_timing("Write output", t_start):
        target.write(markup)
    return markup


async def convert_transcript_to_html(
    config: ChatroomConfig,
    output_path: Path,
    services: Optional[RenderServices] = None,
) -> Path:
    """Render a transcript into a standalone HTML page file."""
    services = services if services is not None else get_default_services()
    target = PageFileTarget(
        output_path, config.title, config.chatroom_name, services.style_scope
    )
    await render_chatroom(config, target, services)
    return output_path
