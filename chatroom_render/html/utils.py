"""HTML-specific rendering utilities.

This module contains:
- HTML escaping
- Template environment management for full page output
"""

import functools
import html
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape


def escape_html(text: str) -> str:
    """Escape HTML special characters in text.

    Also normalizes line endings (CRLF -> LF).
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return html.escape(normalized)


@functools.lru_cache(maxsize=1)
def get_template_environment() -> Environment:
    """Get cached Jinja2 template environment for page rendering.

    Returns:
        Environment loading from the package templates directory, with
        HTML auto-escaping (cached after first call)
    """
    templates_dir = Path(__file__).parent / "templates"
    return Environment(
        loader=FileSystemLoader(templates_dir),
        autoescape=select_autoescape(["html", "xml"]),
    )


def render_page(
    container_html: str,
    title: str,
    mount_id: str = "chatroom",
    styles_html: Optional[str] = None,
) -> str:
    """Render a standalone HTML page around an assembled chat container."""
    template = get_template_environment().get_template("page.html")
    return template.render(
        title=title,
        mount_id=mount_id,
        container_html=container_html,
        styles_html=styles_html or "",
    )
