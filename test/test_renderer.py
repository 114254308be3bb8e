#!/usr/bin/env python3
"""Tests for renderer.py - transcript ordering, dedup and chat item markup."""

import json

import pytest

from chatroom_render.avatars import DEFAULT_AVATAR_POOL
from chatroom_render.models import TranscriptRecord
from chatroom_render.parser import parse_transcript
from chatroom_render.renderer import TranscriptRenderer

TEMPLATES_BASE = "https://templates.test/cards"
MY_AVATAR = "https://example.com/me.png"


def records(*items: dict) -> list[TranscriptRecord]:
    return parse_transcript(list(items))


def count_items(html: str) -> int:
    return html.count('<div class="chatItem')


def count_notifications(html: str) -> int:
    return html.count('<div class="systemNotification">')


@pytest.fixture
def renderer(services) -> TranscriptRenderer:
    return TranscriptRenderer(services, templates_base_url=TEMPLATES_BASE)


class TestSystemNotificationDedup:
    """Test that content shown as a system notification is not repeated."""

    @pytest.mark.asyncio
    async def test_sys_then_user_with_same_content(self, renderer):
        html = await renderer.render(
            records({"name": "sys", "content": "A"}, {"name": "user", "content": "A"}),
            MY_AVATAR,
        )
        assert count_notifications(html) == 1
        assert count_items(html) == 0

    @pytest.mark.asyncio
    async def test_earlier_identical_message_is_kept(self, renderer):
        html = await renderer.render(
            records({"name": "user", "content": "A"}, {"name": "sys", "content": "A"}),
            MY_AVATAR,
        )
        assert count_items(html) == 1
        assert count_notifications(html) == 1

    @pytest.mark.asyncio
    async def test_repeated_sys_notifications_are_all_shown(self, renderer):
        html = await renderer.render(
            records({"name": "SYS", "content": "joined"}, {"name": "Sys", "content": "joined"}),
            MY_AVATAR,
        )
        assert count_notifications(html) == 2

    @pytest.mark.asyncio
    async def test_dedup_is_exact_match_only(self, renderer):
        html = await renderer.render(
            records(
                {"name": "sys", "content": "A"},
                {"name": "u1", "content": "a"},
                {"name": "u2", "content": "A "},
                {"name": "u3", "content": "xAx"},
            ),
            MY_AVATAR,
        )
        assert count_items(html) == 3

    @pytest.mark.asyncio
    async def test_item_count_matches_non_sys_non_duplicate_records(self, renderer):
        transcript = records(
            {"name": "alice", "content": "hello"},
            {"name": "sys", "content": "alice joined"},
            {"name": "bob", "content": "alice joined"},
            {"name": "me", "content": "hi"},
            {"name": "sys", "content": "bob left"},
            {"name": "carol", "content": "hello"},
            {"name": "dave", "content": "bob left"},
        )
        html = await renderer.render(transcript, MY_AVATAR)
        assert count_items(html) == 3
        assert count_notifications(html) == 2

    @pytest.mark.asyncio
    async def test_structured_sys_content_dedup(self, renderer):
        card = {"app": "x", "meta": {}}
        html = await renderer.render(
            records(
                {"name": "sys", "content": card},
                {"name": "bob", "element": "ARK", "content": dict(card)},
            ),
            MY_AVATAR,
        )
        assert count_items(html) == 0


class TestChatItems:
    @pytest.mark.asyncio
    async def test_self_message(self, renderer):
        html = await renderer.render(records({"name": "Me", "content": "hi"}), MY_AVATAR)
        assert '<div class="chatItem me">' in html
        assert '<b class="chatName">Me</b>' in html
        assert f'src="{MY_AVATAR}"' in html

    @pytest.mark.asyncio
    async def test_other_message_uses_pool_avatar(self, renderer):
        html = await renderer.render(
            records({"name": "alice", "content": "hi [:call::@bob::]"}), MY_AVATAR
        )
        assert '<div class="chatItem">' in html
        assert '<b class="chatName">alice</b>' in html
        assert DEFAULT_AVATAR_POOL[0] in html
        assert '<span class="chatCall">@bob</span>' in html

    @pytest.mark.asyncio
    async def test_numeric_avatar_hint(self, renderer):
        html = await renderer.render(
            records({"name": "alice", "content": "hi", "avatar": 10001}), MY_AVATAR
        )
        assert "https://q1.qlogo.cn/g?b=qq&amp;nk=10001&amp;s=100" in html

    @pytest.mark.asyncio
    async def test_hide_avatars(self, renderer):
        html = await renderer.render(
            records({"name": "alice", "content": "hi"}), MY_AVATAR, hide_avatars=True
        )
        assert "chatAvatar" not in html
        assert "alice" in renderer.services.avatar_map

        html = await renderer.render(
            records({"name": "bob", "content": "hey"}, {"name": "alice", "content": "yo"}),
            MY_AVATAR,
        )
        assert html.index(DEFAULT_AVATAR_POOL[1]) < html.index(DEFAULT_AVATAR_POOL[0])

    @pytest.mark.asyncio
    async def test_missing_name_and_content(self, renderer):
        html = await renderer.render(records({}), MY_AVATAR)
        assert '<b class="chatName">Unknown</b>' in html
        assert "No content" in html

    @pytest.mark.asyncio
    async def test_structured_text_content_rendered_as_json(self, renderer):
        html = await renderer.render(
            records({"name": "bob", "content": {"k": "v"}}), MY_AVATAR
        )
        assert '{"k": "v"}' in html

    @pytest.mark.asyncio
    async def test_order_is_preserved(self, renderer):
        html = await renderer.render(
            records(
                {"name": "a", "content": "first"},
                {"name": "b", "content": "second"},
                {"name": "c", "content": "third"},
            ),
            MY_AVATAR,
        )
        assert html.index("first") < html.index("second") < html.index("third")


class TestCards:
    @pytest.mark.asyncio
    async def test_card_record(self, renderer, fetcher):
        fetcher.resources[f"{TEMPLATES_BASE}/xxxtuwenyyy/news.html"] = (
            '<div class="article-card" {{__clickAttrs}}>{{meta.news.title}}</div>'
        )
        content = json.dumps(
            {"app": "xxxtuwenyyy", "view": "news", "meta": {"news": {"title": "Story"}}}
        )
        html = await renderer.render(
            records({"name": "bob", "element": "ARK", "content": content}), MY_AVATAR
        )
        assert '<div class="chatCardContent"><div class="article-card" >Story</div></div>' in html

    @pytest.mark.asyncio
    async def test_bad_card_does_not_stop_siblings(self, renderer):
        html = await renderer.render(
            records(
                {"name": "a", "content": "before"},
                {"name": "b", "element": "Card", "content": "{not json"},
                {"name": "c", "content": "after"},
            ),
            MY_AVATAR,
        )
        assert count_items(html) == 3
        assert "Card parse failed" in html
        assert "before" in html and "after" in html

    @pytest.mark.asyncio
    async def test_templates_fetched_once_across_records(self, renderer, fetcher):
        path = f"{TEMPLATES_BASE}/xxxtuwenyyy/news.html"
        fetcher.resources[path] = "<div>{{meta.news.title}}</div>"
        card = {"app": "xxxtuwenyyy", "view": "news", "meta": {"news": {"title": "t"}}}
        await renderer.render(
            records(
                {"name": "a", "element": "Card", "content": card},
                {"name": "b", "element": "Card", "content": json.dumps(card)},
            ),
            MY_AVATAR,
        )
        assert fetcher.calls[path] == 1


class TestContainer:
    @pytest.mark.asyncio
    async def test_container_wraps_items(self, renderer):
        html = await renderer.render_container(
            records({"name": "a", "content": "x"}), MY_AVATAR, title="Team <chat>"
        )
        assert html.startswith('<div class="chatContainer"><div class="chatBoxTitle">')
        assert '<span class="chatTitleText">Team &lt;chat&gt;</span>' in html
        assert '<div class="chatBox">' in html
        assert html.endswith("</div></div>")
