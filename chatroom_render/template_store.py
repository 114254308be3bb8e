"""Fetching and caching of card templates and their style assets."""

import asyncio
import logging
import re
from typing import Iterator, Optional

from .errors import FetchError
from .fetch import DefaultFetcher, Fetcher

logger = logging.getLogger(__name__)

STYLE_TAG_PATTERN = re.compile(
    r"<style\b[^>]*>.*?</style\s*>|<link\b[^>]*\brel\s*=\s*[\"']?stylesheet[\"']?[^>]*>",
    re.DOTALL | re.IGNORECASE,
)

DEFAULT_CARD_TEMPLATE = """
<div class="ark-card default-card">
  <div class="card-content">
    <h3>Card failed to load</h3>
    <p>This card could not be displayed.</p>
  </div>
</div>
<style>
  .ark-card {
    border: 1px solid #e0e0e0;
    border-radius: 12px;
    overflow: hidden;
    background-color: #FFFFFF;
    box-shadow: 0 2px 10px rgba(0, 0, 0, 0.08);
    margin: 12px 0;
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
  }
  .card-content {
    padding: 16px;
  }
  .card-footer {
    padding: 8px 16px;
    border-top: 1px solid #f0f0f0;
    background-color: #fafafa;
    font-size: 13px;
    color: #999;
  }
</style>
"""


def extract_style_tags(template_text: str) -> list[str]:
    """Return the <style> and stylesheet <link> tags found in a template."""
    return [match.group(0) for match in STYLE_TAG_PATTERN.finditer(template_text)]


class StyleScope:
    """Style tags registered for the page, deduplicated by exact text."""

    def __init__(self) -> None:
        self._tags: dict[str, None] = {}

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def add(self, tag: str) -> bool:
        """Register a style tag; returns False if it was already present."""
        if tag in self._tags:
            return False
        self._tags[tag] = None
        return True

    def render(self) -> str:
        return "\n".join(self._tags)


class TemplateStore:
    """Memoized access to card templates by resolved path.

    Successful fetches are cached for the lifetime of the store and their
    styles are registered into the style scope exactly once. Failed fetches
    return the built-in default template and are not cached.
    """

    def __init__(
        self,
        fetcher: Optional[Fetcher] = None,
        style_scope: Optional[StyleScope] = None,
        default_template: str = DEFAULT_CARD_TEMPLATE,
    ):
        self.fetcher: Fetcher = fetcher if fetcher is not None else DefaultFetcher()
        self.style_scope = style_scope if style_scope is not None else StyleScope()
        self.default_template = default_template
        self._cache: dict[str, str] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def __contains__(self, template_path: object) -> bool:
        return template_path in self._cache

    def cached(self, template_path: str) -> Optional[str]:
        return self._cache.get(template_path)

    async def get(self, template_path: str) -> str:
        if template_path in self._cache:
            return self._cache[template_path]

        lock = self._locks.setdefault(template_path, asyncio.Lock())
        async with lock:
            # Another caller may have filled the cache while we waited
            if template_path in self._cache:
                return self._cache[template_path]

            try:
                template_text = await self.fetcher.fetch_text(template_path)
            except FetchError as e:
                logger.warning("Using default card template: %s", e)
                return self.default_template

            self._cache[template_path] = template_text
            self.register_styles(template_text)
            return template_text

    def register_styles(self, template_text: str) -> int:
        """Add a template's style tags to the style scope; returns how many were new."""
        added = 0
        for tag in extract_style_tags(template_text):
            if self.style_scope.add(tag):
                added += 1
        return added
