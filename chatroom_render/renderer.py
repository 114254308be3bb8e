#!/usr/bin/env python3
"""Render chat transcripts to HTML markup."""

import functools
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Hashable, Optional, Sequence

from .avatars import AvatarAssigner, AvatarMap
from .cards import CardRenderer
from .fetch import DefaultFetcher, Fetcher
from .handlers import ClickHandlerRegistry
from .html.fragments import (
    render_chat_container,
    render_chat_item,
    render_system_notification,
)
from .markup import InlineMarkupParser
from .models import DEFAULT_TITLE, TranscriptRecord, get_default_templates_url
from .template_engine import TemplateEngine
from .template_store import StyleScope, TemplateStore

logger = logging.getLogger(__name__)

UNKNOWN_SENDER_NAME = "Unknown"
SELF_DISPLAY_NAME = "Me"
EMPTY_CONTENT_TEXT = "No content"


# -- Shared Services ----------------------------------------------------------


@dataclass
class RenderServices:
    """Stateful services shared across render calls.

    The avatar map, template cache, style scope and click handler registry
    all outlive a single render so repeated renders reuse fetched templates
    and keep avatar assignments stable. Tests build fresh instances.
    """

    fetcher: Fetcher = field(default_factory=DefaultFetcher)
    avatar_map: AvatarMap = field(default_factory=AvatarMap)
    style_scope: StyleScope = field(default_factory=StyleScope)
    handlers: ClickHandlerRegistry = field(default_factory=ClickHandlerRegistry)
    template_store: Optional[TemplateStore] = None

    def __post_init__(self) -> None:
        if self.template_store is None:
            self.template_store = TemplateStore(self.fetcher, self.style_scope)


@functools.lru_cache(maxsize=1)
def get_default_services() -> RenderServices:
    """Get the process-wide service bundle (created on first call)."""
    return RenderServices()


def content_identity(content: Any) -> Hashable:
    """Key used to compare record contents for system-notification dedup.

    Strings compare by exact value; structured contents compare by their
    canonical JSON text.
    """
    if isinstance(content, str) or content is None:
        return content
    return ("json", json.dumps(content, sort_keys=True, ensure_ascii=False))


def content_as_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    return json.dumps(content, ensure_ascii=False)


# -- Transcript Renderer ------------------------------------------------------


class TranscriptRenderer:
    """Turn an ordered transcript into chat markup.

    Records are processed strictly in order. System notifications (sender
    "sys") are always shown, and any later record whose content exactly
    equals an already shown notification is dropped.
    """

    def __init__(
        self,
        services: Optional[RenderServices] = None,
        templates_base_url: Optional[str] = None,
        chat_viewer_url: Optional[str] = None,
    ):
        self.services = services if services is not None else get_default_services()
        assert self.services.template_store is not None
        self.avatars = AvatarAssigner(self.services.avatar_map)
        self.markup = InlineMarkupParser(chat_viewer_url)
        self.cards = CardRenderer(
            self.services.template_store,
            TemplateEngine(self.services.handlers),
            templates_base_url or get_default_templates_url(),
        )

    async def render(
        self,
        transcript: Sequence[TranscriptRecord],
        my_avatar_url: str,
        hide_avatars: bool = False,
    ) -> str:
        """Render all records and return the concatenated item markup."""
        parts: list[str] = []
        seen_system: set[Hashable] = set()

        for record in transcript:
            identity = content_identity(record.content)
            if record.is_system:
                parts.append(self.render_system_notification(record))
                seen_system.add(identity)
            elif identity in seen_system:
                logger.debug("Skipping duplicate of system notification: %r", record.content)
            else:
                parts.append(
                    await self.render_chat_item(record, my_avatar_url, hide_avatars)
                )

        return "".join(parts)

    async def render_container(
        self,
        transcript: Sequence[TranscriptRecord],
        my_avatar_url: str,
        hide_avatars: bool = False,
        title: str = DEFAULT_TITLE,
    ) -> str:
        """Render all records wrapped in the titled chat container."""
        items_html = await self.render(transcript, my_avatar_url, hide_avatars)
        return render_chat_container(items_html, title)

    def render_system_notification(self, record: TranscriptRecord) -> str:
        content = record.content if record.content is not None else EMPTY_CONTENT_TEXT
        if isinstance(content, str):
            content_html = self.markup.parse(content.strip())
        else:
            content_html = content_as_text(content)
        return render_system_notification(content_html)

    async def render_chat_item(
        self,
        record: TranscriptRecord,
        my_avatar_url: str,
        hide_avatars: bool = False,
    ) -> str:
        is_self = record.is_self
        name = record.sender_name or UNKNOWN_SENDER_NAME
        display_name = SELF_DISPLAY_NAME if is_self else name

        # Assign even when hidden so pool order matches a visible render
        avatar_url = self.avatars.resolve(
            name, record.avatar_hint, is_self, my_avatar_url
        )
        if hide_avatars:
            avatar_url = None

        content = record.content
        if content is None or content == "":
            content = EMPTY_CONTENT_TEXT

        if record.is_card:
            content_html = await self.cards.render_raw(content)
        elif isinstance(content, str):
            content_html = self.markup.parse(content.strip())
        else:
            content_html = content_as_text(content)

        return render_chat_item(
            display_name,
            content_html,
            avatar_url=avatar_url,
            is_self=is_self,
            is_card=record.is_card,
        )
