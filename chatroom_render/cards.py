"""Classification and rendering of structured card messages."""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from .errors import RecoverableCardError
from .html.fragments import render_error_fragment
from .models import CardPayload, CardVariant, get_default_templates_url
from .template_engine import TemplateEngine
from .template_store import TemplateStore

logger = logging.getLogger(__name__)


# (variant, app markers, required view); evaluated in order, first match wins
CARD_RULES: tuple[tuple[CardVariant, tuple[str, ...], Optional[str]], ...] = (
    (CardVariant.NEWS, ("tuwen",), "news"),
    (CardVariant.CHAT_RECORD, ("multimsg",), "contact"),
    (CardVariant.MINI_PROGRAM, ("miniprogram", "app"), None),
    (CardVariant.CHANNEL, ("guild", "channel"), None),
    (CardVariant.SOCIAL, ("contact", "social"), None),
)


def classify_card(app: str, view: str) -> CardVariant:
    """Map a card's (app, view) pair to its rendering variant."""
    app = (app or "").lower()
    for variant, markers, required_view in CARD_RULES:
        if required_view is not None and view != required_view:
            continue
        if any(marker in app for marker in markers):
            return variant
    return CardVariant.DEFAULT


def template_path_for(base_url: str, app: str, variant: CardVariant) -> str:
    """Build the template location for an app namespace and variant."""
    namespace = (app or "").strip().lower() or "default"
    return f"{base_url.rstrip('/')}/{namespace}/{variant.value}.html"


def parse_card_payload(content: Any) -> CardPayload:
    """Turn raw record content into a CardPayload.

    Raises:
        RecoverableCardError: If the content is not a JSON object.
    """
    if isinstance(content, str):
        try:
            content = json.loads(content)
        except json.JSONDecodeError as e:
            raise RecoverableCardError(f"invalid JSON: {e.msg}") from e
    if not isinstance(content, dict):
        raise RecoverableCardError(
            f"expected a JSON object, got {type(content).__name__}"
        )
    try:
        return CardPayload.model_validate(content)
    except ValidationError as e:
        raise RecoverableCardError(
            f"invalid card payload ({e.error_count()} errors)"
        ) from e


class CardRenderer:
    """Render card payloads through fetched templates."""

    def __init__(
        self,
        template_store: TemplateStore,
        engine: TemplateEngine,
        templates_base_url: Optional[str] = None,
    ):
        self.template_store = template_store
        self.engine = engine
        self.templates_base_url = templates_base_url or get_default_templates_url()

    async def render(self, payload: CardPayload) -> str:
        """Render a card. Failures become an inline error fragment."""
        try:
            variant = classify_card(payload.app, payload.view)
            template_path = template_path_for(
                self.templates_base_url, payload.app, variant
            )
            template_text = await self.template_store.get(template_path)
            return self.engine.render(template_text, payload.template_context())
        except Exception as e:
            logger.error("Error generating card for app %r: %s", payload.app, e)
            return render_error_fragment("Card render failed", e)

    async def render_raw(self, content: Any) -> str:
        """Parse raw record content as a card, then render it."""
        try:
            payload = parse_card_payload(content)
        except RecoverableCardError as e:
            logger.error("Error parsing card: %s", e)
            return render_error_fragment("Card parse failed", e)
        return await self.render(payload)
