"""Pydantic models for chat transcript records, card payloads and configuration."""

import os
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_TEMPLATES_URL = "https://cdn.jsdmirror.com/gh/b23-kim/ChatRoom.js@main/ARKTemplates/"
DEFAULT_CHAT_VIEWER_URL = "https://blog.awaae001.top/Chatroom/"
DEFAULT_TITLE = "Group chat transcript"


def get_default_templates_url() -> str:
    """Get the card template root, honouring CHATROOM_RENDER_TEMPLATES_URL."""
    return os.getenv("CHATROOM_RENDER_TEMPLATES_URL") or DEFAULT_TEMPLATES_URL


class ElementType(str, Enum):
    """How a record's content is rendered.

    Using str as base class keeps comparisons with raw JSON values working.
    """

    TEXT = "Text"
    CARD = "Card"


class CardVariant(str, Enum):
    """Rendering style chosen for a card from its (app, view) pair."""

    NEWS = "news"
    CHAT_RECORD = "chat_record"
    MINI_PROGRAM = "mini_program"
    CHANNEL = "channel"
    SOCIAL = "social"
    DEFAULT = "default"


# =============================================================================
# Transcript Records
# =============================================================================


class TranscriptRecord(BaseModel):
    """One message in a stored chat transcript.

    JSON shape: {"name": ..., "element": "Text" | "Card" | "ARK",
    "content": str | object, "avatar": str | int}
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sender_name: str = Field(default="", alias="name")
    element: ElementType = ElementType.TEXT
    content: Any = None
    avatar_hint: Optional[str] = Field(default=None, alias="avatar")

    @field_validator("sender_name", mode="before")
    @classmethod
    def _normalize_name(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise ValueError("name must be a string")
        return str(value).strip()

    @field_validator("element", mode="before")
    @classmethod
    def _normalize_element(cls, value: Any) -> ElementType:
        # "ARK" is the legacy name for structured cards
        if isinstance(value, str) and value.strip().lower() in ("card", "ark"):
            return ElementType.CARD
        return ElementType.TEXT

    @field_validator("avatar_hint", mode="before")
    @classmethod
    def _coerce_avatar(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        # Numeric hints are account ids and may arrive as JSON numbers
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise ValueError("avatar must be a URL or a numeric id")
        return str(value).strip()

    @property
    def is_system(self) -> bool:
        return self.sender_name.lower() == "sys"

    @property
    def is_self(self) -> bool:
        return self.sender_name.lower() == "me"

    @property
    def is_card(self) -> bool:
        return self.element == ElementType.CARD


# =============================================================================
# Card Payloads
# =============================================================================


class CardOverwrite(BaseModel):
    """Click behaviour override carried by a card payload."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    click_handler: Optional[str] = Field(default=None, alias="clickHandler")
    click_handler_id: Optional[str] = Field(default=None, alias="clickHandlerId")
    click_params: Any = Field(default_factory=dict, alias="clickParams")

    @field_validator("click_handler", "click_handler_id", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> Optional[str]:
        # Handler ids are sometimes written as bare numbers
        if value is None or isinstance(value, (dict, list)):
            return None
        return str(value)


class CardPayload(BaseModel):
    """Structured card content.

    Extra keys are kept so templates can reference anything the payload
    carries, not just the declared fields.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    app: str = ""
    view: str = ""
    meta: dict[str, Any] = Field(default_factory=dict)
    overwrite: Optional[CardOverwrite] = None
    config: Any = Field(default_factory=dict)

    @field_validator("app", "view", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def template_context(self) -> dict[str, Any]:
        """Return the payload as a plain dict keyed by its JSON names."""
        return self.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# Configuration
# =============================================================================


class ChatroomConfig(BaseModel):
    """Configuration accepted by the top-level entry point.

    Field aliases match the keys used by embedding pages, e.g.
    {"chatroomName": "chat", "jsonFilePath": "...", "MyAvatar": "..."}.
    """

    model_config = ConfigDict(populate_by_name=True)

    chatroom_name: str = Field(default="chatroom", alias="chatroomName")
    json_file_path: str = Field(alias="jsonFilePath")
    my_avatar: str = Field(alias="MyAvatar")
    title: str = DEFAULT_TITLE
    hide_avatar: bool = Field(default=False, alias="hideAvatar")
    templates_url: str = Field(
        default_factory=get_default_templates_url, alias="templatesUrl"
    )
    chat_viewer_url: str = Field(
        default=DEFAULT_CHAT_VIEWER_URL, alias="chatViewerUrl"
    )

    @field_validator("json_file_path", "my_avatar")
    @classmethod
    def _required_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value
