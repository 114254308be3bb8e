"""Pytest configuration and shared fixtures."""

import json
from collections import Counter
from typing import Any, Optional

import pytest

from chatroom_render.errors import FetchError
from chatroom_render.renderer import RenderServices


class FakeFetcher:
    """In-memory fetcher that records every location it was asked for."""

    def __init__(self, resources: Optional[dict[str, str]] = None):
        self.resources: dict[str, str] = dict(resources or {})
        self.calls: Counter[str] = Counter()

    def add_json(self, location: str, data: Any) -> None:
        self.resources[location] = json.dumps(data, ensure_ascii=False)

    async def fetch_text(self, location: str) -> str:
        self.calls[location] += 1
        if location not in self.resources:
            raise FetchError(location, "HTTP 404")
        return self.resources[location]


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def services(fetcher: FakeFetcher) -> RenderServices:
    """Fresh, isolated service bundle per test."""
    return RenderServices(fetcher=fetcher)
