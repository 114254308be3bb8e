"""Render stored chat transcripts, inline markup and template cards to HTML."""

from .avatars import AvatarAssigner, AvatarMap
from .cards import CardRenderer, classify_card
from .converter import (
    MemoryTarget,
    PageFileTarget,
    convert_transcript_to_html,
    render_chatroom,
)
from .errors import FatalLoadError, FetchError, RecoverableCardError
from .handlers import ClickAction, ClickHandlerRegistry
from .markup import InlineMarkupParser
from .models import CardPayload, CardVariant, ChatroomConfig, TranscriptRecord
from .renderer import RenderServices, TranscriptRenderer, get_default_services
from .template_engine import TemplateEngine
from .template_store import StyleScope, TemplateStore

__all__ = [
    "AvatarAssigner",
    "AvatarMap",
    "CardPayload",
    "CardRenderer",
    "CardVariant",
    "ChatroomConfig",
    "ClickAction",
    "ClickHandlerRegistry",
    "FatalLoadError",
    "FetchError",
    "InlineMarkupParser",
    "MemoryTarget",
    "PageFileTarget",
    "RecoverableCardError",
    "RenderServices",
    "StyleScope",
    "TemplateEngine",
    "TemplateStore",
    "TranscriptRecord",
    "TranscriptRenderer",
    "classify_card",
    "convert_transcript_to_html",
    "get_default_services",
    "render_chatroom",
]
