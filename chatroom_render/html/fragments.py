"""HTML fragments for transcript items.

Message content passed in here is already rendered markup and is inserted
as is. Only values that come from outside the transcript content (titles,
names, error messages) are escaped.
"""

from typing import Optional

from ..avatars import PLACEHOLDER_AVATAR_URL
from .utils import escape_html


def render_error_fragment(label: str, error: BaseException) -> str:
    """Inline, visible diagnostic for a part that failed to render."""
    message = str(error) or type(error).__name__
    return f'<div class="error">{escape_html(label)}: {escape_html(message)}</div>'


def render_avatar(avatar_url: Optional[str]) -> str:
    if not avatar_url:
        return ""
    return (
        f'<img class="chatAvatar no-lightbox" src="{escape_html(avatar_url)}" '
        f"onerror=\"this.src='{PLACEHOLDER_AVATAR_URL}';\">"
    )


def render_system_notification(content_html: str) -> str:
    return f"""
<div class="systemNotification">
  <div class="systemContent">{content_html}</div>
</div>"""


def render_chat_item(
    display_name: str,
    content_html: str,
    avatar_url: Optional[str] = None,
    is_self: bool = False,
    is_card: bool = False,
) -> str:
    """Wrap rendered message content in a chat item container.

    Args:
        display_name: Name shown above the message
        content_html: Already rendered message or card markup
        avatar_url: Avatar to show, or None when avatars are hidden
        is_self: Adds the "me" class so the item is aligned as the viewer's own
        is_card: Card markup goes in a plain wrapper instead of a chat bubble
    """
    item_class = "chatItem me" if is_self else "chatItem"
    content_class = "chatCardContent" if is_card else "chatContent"
    return f"""
<div class="{item_class}">
  {render_avatar(avatar_url)}
  <div class="chatContentWrapper">
    <b class="chatName">{escape_html(display_name)}</b>
    <div class="{content_class}">{content_html}</div>
  </div>
</div>"""


def render_chat_container(items_html: str, title: str) -> str:
    """Wrap all rendered items with the title bar and scrolling body."""
    title_html = (
        '<div class="chatBoxTitle"><i class="fa fa-chevron-left"></i>'
        f'<span class="chatTitleText">{escape_html(title)}</span>'
        '<div class="chatBoxIcons"><i class="fa fa-group"></i>'
        '<i class="fa fa-dedent"></i></div></div>'
    )
    return f'<div class="chatContainer">{title_html}<div class="chatBox">{items_html}</div></div>'
