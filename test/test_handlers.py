#!/usr/bin/env python3
"""Tests for the click handler registry and built-in click actions."""

import logging
import re

from chatroom_render.handlers import (
    CHAT_WINDOW_FEATURES,
    ClickAction,
    ClickHandlerRegistry,
    find_jump_url,
    generate_handler_id,
    parse_click_params,
)


class TestHandlerIds:
    def test_format(self):
        assert re.fullmatch(r"handler_\d+_[a-z0-9]{5}", generate_handler_id())

    def test_registry_ids_are_unique(self):
        registry = ClickHandlerRegistry()
        ids = {registry.register(registry.new_id(), lambda params: None) for _ in range(50)}
        assert len(ids) == 50


class TestDispatch:
    def test_missing_handler_is_reported_not_raised(self, caplog):
        registry = ClickHandlerRegistry()
        with caplog.at_level(logging.WARNING):
            assert registry.dispatch("handler_missing", {}) is None
        assert 'Custom click handler "handler_missing" not found' in caplog.text

    def test_open_url_prefers_params(self):
        registry = ClickHandlerRegistry()
        payload = {"meta": {"news": {"jumpUrl": "https://news.test/a"}}}
        handler_id = registry.register_action("open_url", payload)
        assert handler_id is not None

        assert registry.dispatch(handler_id) == ClickAction(
            kind="open_url", url="https://news.test/a"
        )
        assert registry.dispatch(handler_id, {"url": "https://other.test/"}) == ClickAction(
            kind="open_url", url="https://other.test/"
        )

    def test_open_chat_window(self):
        registry = ClickHandlerRegistry()
        handler_id = registry.register_action("open_chat_window", {}, "chat-1")
        action = registry.dispatch("chat-1", {"url": "https://viewer.test/?x=1"})
        assert handler_id == "chat-1"
        assert action == ClickAction(
            kind="open_window",
            url="https://viewer.test/?x=1",
            features=CHAT_WINDOW_FEATURES,
        )

    def test_open_url_without_url(self):
        registry = ClickHandlerRegistry()
        handler_id = registry.register_action("open_url", {"meta": {}})
        assert registry.dispatch(handler_id) is None

    def test_custom_action_set(self):
        calls = []

        def record(payload, params):
            calls.append((payload["app"], dict(params)))
            return None

        registry = ClickHandlerRegistry({"record": record})
        registry.register_action("record", {"app": "demo"}, "h1")
        registry.dispatch("h1", {"n": 1})
        assert calls == [("demo", {"n": 1})]
        assert registry.register_action("open_url", {}) is None

    def test_reusing_id_replaces_handler_and_clear_empties(self):
        registry = ClickHandlerRegistry()
        registry.register("h", lambda params: ClickAction(kind="open_url", url="a"))
        registry.register("h", lambda params: ClickAction(kind="open_url", url="b"))
        assert len(registry) == 1
        assert registry.dispatch("h").url == "b"
        registry.clear()
        assert "h" not in registry


class TestHelpers:
    def test_find_jump_url(self):
        assert find_jump_url({"meta": {"jumpUrl": "https://a"}}) == "https://a"
        assert find_jump_url({"meta": {"detail": {"jumpUrl": "https://b"}}}) == "https://b"
        assert find_jump_url({"meta": "x"}) is None
        assert find_jump_url({}) is None

    def test_parse_click_params(self):
        assert parse_click_params('{"a": 1}') == {"a": 1}
        assert parse_click_params("") == {}
        assert parse_click_params("{bad") == {}
        assert parse_click_params("[1]") == {}
