"""Click handlers referenced from rendered card markup.

Cards never carry executable code. A card's ``overwrite.clickHandler`` names
one of a fixed set of actions; the action is bound to the card payload and
registered under a handler id that the markup exposes through
``data-click-handler``. Host glue looks the id up with
``ClickHandlerRegistry.dispatch`` and carries out the returned ClickAction.
"""

import functools
import json
import logging
import random
import string
import time
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

ClickHandler = Callable[[Mapping[str, Any]], Optional["ClickAction"]]
ActionFunction = Callable[[Mapping[str, Any], Mapping[str, Any]], Optional["ClickAction"]]

CHAT_WINDOW_FEATURES = "width=450,height=650,scrollbars=yes"

_ID_ALPHABET = string.ascii_lowercase + string.digits


class ClickAction(BaseModel):
    """What the host page should do in response to a click."""

    kind: str  # "open_url", "open_window"
    url: str = ""
    features: str = ""


def find_jump_url(payload: Mapping[str, Any]) -> Optional[str]:
    """Find the first jumpUrl in a card's meta sections."""
    meta = payload.get("meta")
    if not isinstance(meta, Mapping):
        return None
    if isinstance(meta.get("jumpUrl"), str):
        return meta["jumpUrl"]
    for section in meta.values():
        if isinstance(section, Mapping) and isinstance(section.get("jumpUrl"), str):
            return section["jumpUrl"]
    return None


def open_url(payload: Mapping[str, Any], params: Mapping[str, Any]) -> Optional[ClickAction]:
    url = params.get("url") or find_jump_url(payload)
    if not url:
        logger.warning("open_url clicked without a url")
        return None
    return ClickAction(kind="open_url", url=str(url))


def open_chat_window(
    payload: Mapping[str, Any], params: Mapping[str, Any]
) -> Optional[ClickAction]:
    url = params.get("url") or find_jump_url(payload)
    if not url:
        logger.warning("open_chat_window clicked without a url")
        return None
    return ClickAction(kind="open_window", url=str(url), features=CHAT_WINDOW_FEATURES)


def noop(payload: Mapping[str, Any], params: Mapping[str, Any]) -> None:
    return None


DEFAULT_CLICK_ACTIONS: dict[str, ActionFunction] = {
    "open_url": open_url,
    "open_chat_window": open_chat_window,
    "noop": noop,
}


def generate_handler_id() -> str:
    """Generate an opaque handler id from the current time plus a random suffix."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=5))
    return f"handler_{int(time.time() * 1000)}_{suffix}"


def parse_click_params(raw: Optional[str]) -> dict[str, Any]:
    """Decode a data-click-params attribute value; bad input yields {}."""
    if not raw:
        return {}
    try:
        params = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed click params: %r", raw)
        return {}
    return params if isinstance(params, dict) else {}


class ClickHandlerRegistry:
    """Handler id to callable mapping shared by the renders that use it.

    Entries stay until ``clear()`` is called; registering an existing id
    replaces its handler.
    """

    def __init__(self, actions: Optional[Mapping[str, ActionFunction]] = None):
        self.actions: dict[str, ActionFunction] = dict(
            actions if actions is not None else DEFAULT_CLICK_ACTIONS
        )
        self._handlers: dict[str, ClickHandler] = {}

    def __contains__(self, handler_id: object) -> bool:
        return handler_id in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def new_id(self) -> str:
        handler_id = generate_handler_id()
        while handler_id in self._handlers:
            handler_id = generate_handler_id()
        return handler_id

    def register(self, handler_id: str, handler: ClickHandler) -> str:
        self._handlers[handler_id] = handler
        return handler_id

    def register_action(
        self,
        action_name: str,
        payload: Mapping[str, Any],
        handler_id: Optional[str] = None,
    ) -> Optional[str]:
        """Bind a named action to a card payload and register it.

        Returns the handler id, or None if the action is unknown.
        """
        action = self.actions.get(action_name.strip())
        if action is None:
            logger.warning("Unknown click action %r; no handler registered", action_name)
            return None
        handler_id = handler_id or self.new_id()
        return self.register(handler_id, functools.partial(action, payload))

    def get(self, handler_id: str) -> Optional[ClickHandler]:
        return self._handlers.get(handler_id)

    def dispatch(
        self, handler_id: str, params: Optional[Mapping[str, Any]] = None
    ) -> Optional[ClickAction]:
        """Invoke a handler by id; unknown ids are reported, not raised."""
        handler = self._handlers.get(handler_id)
        if handler is None:
            logger.warning('Custom click handler "%s" not found', handler_id)
            return None
        return handler(params or {})

    def clear(self) -> None:
        self._handlers.clear()
