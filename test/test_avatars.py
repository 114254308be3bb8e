#!/usr/bin/env python3
"""Tests for avatar resolution and the rotating fallback pool."""

from chatroom_render.avatars import (
    DEFAULT_AVATAR_POOL,
    AvatarAssigner,
    AvatarMap,
    is_absolute_url,
)

MY_AVATAR = "https://example.com/me.png"


class TestAvatarResolution:
    """Test the resolution order of AvatarAssigner.resolve."""

    def test_self_always_uses_my_avatar(self):
        assigner = AvatarAssigner()
        url = assigner.resolve("me", "https://example.com/other.png", True, MY_AVATAR)
        assert url == MY_AVATAR
        assert len(assigner.avatar_map) == 0

    def test_absolute_url_hint_is_used(self):
        assigner = AvatarAssigner()
        hint = "https://cdn.example.com/alice.jpg"
        assert assigner.resolve("alice", hint, False, MY_AVATAR) == hint

    def test_numeric_hint_uses_avatar_service(self):
        assigner = AvatarAssigner()
        url = assigner.resolve("bob", "123456", False, MY_AVATAR)
        assert url == "https://q1.qlogo.cn/g?b=qq&nk=123456&s=100"

    def test_unusable_hint_falls_back_to_pool(self):
        assigner = AvatarAssigner()
        url = assigner.resolve("carol", "not a url", False, MY_AVATAR)
        assert url == DEFAULT_AVATAR_POOL[0]

    def test_relative_url_is_not_absolute(self):
        assert not is_absolute_url("/avatars/a.png")
        assert not is_absolute_url("http://")
        assert is_absolute_url("http://example.com/a.png")


class TestAvatarPool:
    """Test round-robin assignment and idempotency."""

    def test_distinct_names_consume_pool_in_order(self):
        assigner = AvatarAssigner()
        urls = [assigner.resolve(name, None, False, MY_AVATAR) for name in "abc"]
        assert urls == list(DEFAULT_AVATAR_POOL[:3])
        assert assigner.avatar_map.cursor == 3

    def test_same_name_is_idempotent(self):
        assigner = AvatarAssigner()
        first = assigner.resolve("dave", None, False, MY_AVATAR)
        second = assigner.resolve("dave", None, False, MY_AVATAR)
        assert first == second
        assert assigner.avatar_map.cursor == 1

    def test_pool_wraps_around(self):
        avatar_map = AvatarMap(["https://a/1.png", "https://a/2.png"])
        assert [avatar_map.assign(n) for n in ("x", "y", "z")] == [
            "https://a/1.png",
            "https://a/2.png",
            "https://a/1.png",
        ]

    def test_shared_map_is_stable_across_assigners(self):
        avatar_map = AvatarMap()
        AvatarAssigner(avatar_map).resolve("erin", None, False, MY_AVATAR)
        url = AvatarAssigner(avatar_map).resolve("frank", None, False, MY_AVATAR)
        assert url == DEFAULT_AVATAR_POOL[1]
