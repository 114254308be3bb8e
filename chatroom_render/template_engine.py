"""A minimal interpreter for card templates.

Grammar:
- ``{{ path }}``                      scalar substitution
- ``{{#each path}} ... {{/each}}``    loop over an array (not nestable)
- ``{{__clickAttrs}}``                click handler attributes, if any

Paths are dot-separated keys; a segment may carry one numeric index, e.g.
``meta.news.items[0].title``. Rendering runs in two passes: loops are
expanded first, then the remaining placeholders are substituted. Values are
never evaluated, only looked up and converted to their display string.
"""

import html
import json
import logging
import re
from typing import Any, Mapping, Optional

from .handlers import ClickHandlerRegistry

logger = logging.getLogger(__name__)

EACH_PATTERN = re.compile(r"{{\s*#each\s+([^}]+?)\s*}}(.*?){{\s*/each\s*}}", re.DOTALL)
VARIABLE_PATTERN = re.compile(r"{{\s*([^}]+?)\s*}}")
INDEXED_SEGMENT_PATTERN = re.compile(r"^(\w+)\[(\d+)\]$")

CLICK_ATTRS_KEY = "__clickAttrs"
HANDLER_ID_KEY = "__clickHandlerId"
OVERWRITE_KEY = "__overwrite"
SPECIAL_KEYS = ("@index", "@first", "@last", HANDLER_ID_KEY, OVERWRITE_KEY)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def get_nested_value(data: Any, path: str) -> Any:
    """Look up a dotted path, returning MISSING if any segment is absent."""
    path = path.strip()
    if not path or not isinstance(data, Mapping):
        return MISSING

    if path in SPECIAL_KEYS:
        return data.get(path, MISSING)

    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return MISSING

        if indexed := INDEXED_SEGMENT_PATTERN.match(part):
            name, index = indexed.group(1), int(indexed.group(2))
            sequence = current.get(name)
            if not isinstance(sequence, list) or index >= len(sequence):
                return MISSING
            current = sequence[index]
        elif part in current:
            current = current[part]
        else:
            return MISSING

    return current


def to_display_string(value: Any) -> str:
    """Convert a looked-up value to the text shown in markup."""
    if value is MISSING or value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


class TemplateEngine:
    """Render card templates against a payload context."""

    def __init__(self, handlers: Optional[ClickHandlerRegistry] = None):
        self.handlers = handlers if handlers is not None else ClickHandlerRegistry()

    def render(self, template_text: str, context: Mapping[str, Any]) -> str:
        handler_id = self.register_click_handler(context)
        overwrite = context.get("overwrite")
        enhanced = {
            **context,
            HANDLER_ID_KEY: handler_id,
            OVERWRITE_KEY: overwrite if isinstance(overwrite, Mapping) else {},
        }
        rendered = self.expand_loops(template_text, enhanced)
        return self.substitute(rendered, enhanced)

    def register_click_handler(self, context: Mapping[str, Any]) -> Optional[str]:
        """Register the payload's click handler, if it declares one.

        Returns the handler id, or None when nothing was registered.
        """
        overwrite = context.get("overwrite")
        if not isinstance(overwrite, Mapping):
            return None
        action_name = overwrite.get("clickHandler")
        if not action_name:
            return None
        return self.handlers.register_action(
            str(action_name), context, overwrite.get("clickHandlerId") or None
        )

    def expand_loops(self, template_text: str, context: Mapping[str, Any]) -> str:
        def expand(match: re.Match[str]) -> str:
            array_path, body = match.group(1), match.group(2)
            items = get_nested_value(context, array_path)
            if not isinstance(items, list):
                return ""

            parts: list[str] = []
            last = len(items) - 1
            for index, item in enumerate(items):
                local = {
                    **context,
                    **(item if isinstance(item, Mapping) else {}),
                    "this": item,
                    "@index": index,
                    "@first": index == 0,
                    "@last": index == last,
                }
                parts.append(self.substitute(body, local))
            return "".join(parts)

        return EACH_PATTERN.sub(expand, template_text)

    def substitute(self, template_text: str, context: Mapping[str, Any]) -> str:
        def replace(match: re.Match[str]) -> str:
            key = match.group(1).strip()

            if key == CLICK_ATTRS_KEY:
                return self.click_attributes(context)

            if key == "this":
                return to_display_string(context.get("this"))

            value = get_nested_value(context, key)
            if value is MISSING:
                logger.debug("Template variable not found: %s", key)
            return to_display_string(value)

        return VARIABLE_PATTERN.sub(replace, template_text)

    def click_attributes(self, context: Mapping[str, Any]) -> str:
        handler_id = context.get(HANDLER_ID_KEY)
        if not handler_id:
            return ""
        overwrite = context.get(OVERWRITE_KEY) or {}
        params = json.dumps(overwrite.get("clickParams") or {}, ensure_ascii=False)
        return f'data-click-handler="{handler_id}" data-click-params="{html.escape(params)}"'
