"""Parser for the inline markup embedded in chat message text.

Supported tokens:
- [:image::https://...::]           embedded image
- [:chat:(title)::path/to.json::]    forwarded transcript card
- [:a::https://...::]               link opening in a new window
- [:call::@name::]                  mention
- [:rep:[user]:quoted text::]       quoted reply

Rules are applied in the order above. Each rule only looks at literal text
left over by the previous rules, so markup produced by one rule is never
matched again by a later one. Text that matches no rule, including
malformed tokens, is passed through unchanged and is not HTML-escaped.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Optional
from urllib.parse import quote

from .models import DEFAULT_CHAT_VIEWER_URL


@dataclass(frozen=True)
class Token:
    """A lexed piece of message text."""

    kind: str  # "literal", "image", "chat", "link", "mention", "quote"
    text: str  # Raw source text of the token
    groups: tuple[str, ...] = field(default=())


@dataclass(frozen=True)
class MarkupRule:
    kind: str
    pattern: re.Pattern[str]


MARKUP_RULES: tuple[MarkupRule, ...] = (
    MarkupRule("image", re.compile(r"\[:image::(https?://[^\s]+?)::\]")),
    MarkupRule("chat", re.compile(r"\[:chat:\(([^)]+)\)::([^\s]+?)::\]")),
    MarkupRule("link", re.compile(r"\[:a::(https?://[^\s]+?)::\]")),
    MarkupRule("mention", re.compile(r"\[:call::@([^:]+?)::\]")),
    MarkupRule("quote", re.compile(r"\[:rep:\[([^\]]+)\]:(.*?)::\]")),
)


def encode_uri_component(value: str) -> str:
    """Percent-encode a value the way browsers encode URI components."""
    return quote(value, safe="-_.!~*'()")


def _split_literal(token: Token, rule: MarkupRule) -> list[Token]:
    pieces: list[Token] = []
    position = 0
    for match in rule.pattern.finditer(token.text):
        if match.start() > position:
            pieces.append(Token("literal", token.text[position : match.start()]))
        pieces.append(Token(rule.kind, match.group(0), match.groups()))
        position = match.end()
    if not pieces:
        return [token]
    if position < len(token.text):
        pieces.append(Token("literal", token.text[position:]))
    return pieces


def tokenize(text: str) -> list[Token]:
    """Split message text into literal and markup tokens."""
    tokens = [Token("literal", text)] if text else []
    for rule in MARKUP_RULES:
        next_tokens: list[Token] = []
        for token in tokens:
            if token.kind == "literal":
                next_tokens.extend(_split_literal(token, rule))
            else:
                next_tokens.append(token)
        tokens = next_tokens
    return tokens


class InlineMarkupParser:
    """Render inline markup tokens into HTML fragments."""

    def __init__(self, chat_viewer_url: Optional[str] = None):
        self.chat_viewer_url = chat_viewer_url or DEFAULT_CHAT_VIEWER_URL
        self._renderers: dict[str, Callable[[Token], str]] = {
            "literal": lambda token: token.text,
            "image": self.render_image,
            "chat": self.render_chat,
            "link": self.render_link,
            "mention": self.render_mention,
            "quote": self.render_quote,
        }

    def parse(self, text: str) -> str:
        return "".join(self._renderers[token.kind](token) for token in tokenize(text))

    def chat_link(self, title: str, reference_path: str) -> str:
        """Build the transcript viewer URL for a forwarded transcript."""
        return (
            f"{self.chat_viewer_url}?jsonFilePath={encode_uri_component(reference_path)}"
            f"&title={encode_uri_component(title)}"
        )

    def render_image(self, token: Token) -> str:
        (url,) = token.groups
        return f'<img class="chatMedia" src="{url}" alt="Image" />'

    def render_chat(self, token: Token) -> str:
        title, reference_path = token.groups
        link = self.chat_link(title, reference_path)
        return f"""<div class="chatQuoteCard">
  <div class="chatQuoteTitle">
    <i class="fa fa-database"></i>
    <span>Forwarded chat transcript</span>
  </div>
  <a class="chatMessage" href="{link}" target="_blank" onclick="openChatWindow('{link}'); return false;">Forwarded from: {title}</a>
</div>"""

    def render_link(self, token: Token) -> str:
        (url,) = token.groups
        return f'<a href="{url}" class="chatLink" target="_blank">{url}</a>'

    def render_mention(self, token: Token) -> str:
        (name,) = token.groups
        return f'<span class="chatCall">@{name}</span>'

    def render_quote(self, token: Token) -> str:
        username, quoted = token.groups
        return f"""<div class="chatQuote">
  <div class="quoteUser">
    <i class="fa fa-share-square-o"></i>
    <span>{username}</span>
  </div>
  <span class="quotedMessage">{quoted}</span>
</div>"""
