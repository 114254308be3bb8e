"""HTML rendering utilities package."""

from .utils import escape_html, get_template_environment, render_page
from .fragments import (
    render_avatar,
    render_chat_container,
    render_chat_item,
    render_error_fragment,
    render_system_notification,
)

__all__ = [
    "escape_html",
    "get_template_environment",
    "render_page",
    "render_avatar",
    "render_chat_container",
    "render_chat_item",
    "render_error_fragment",
    "render_system_notification",
]
