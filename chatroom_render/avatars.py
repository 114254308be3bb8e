"""Avatar resolution for transcript senders."""

import logging
from typing import Optional, Sequence
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_AVATAR_POOL: tuple[str, ...] = (
    "https://i.p-i.vip/30/20240920-66ed9a608c2cf.png",
    "https://i.p-i.vip/30/20240920-66ed9b0655cba.png",
    "https://i.p-i.vip/30/20240920-66ed9b18a56ee.png",
    "https://i.p-i.vip/30/20240920-66ed9b2c199bf.png",
    "https://i.p-i.vip/30/20240920-66ed9b3350ed1.png",
    "https://i.p-i.vip/30/20240920-66ed9b5181630.png",
)

# Numeric hints are account ids on the external avatar service
NUMERIC_AVATAR_URL = "https://q1.qlogo.cn/g?b=qq&nk={id}&s=100"

PLACEHOLDER_AVATAR_URL = "https://via.placeholder.com/100"


def is_absolute_url(value: str) -> bool:
    """Check whether a string is an absolute http(s) URL with a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class AvatarMap:
    """Append-only mapping of sender name to fallback avatar URL.

    Names are assigned pool entries round-robin in the order they are first
    seen; the rotation cursor only advances on a new name.
    """

    def __init__(self, pool: Optional[Sequence[str]] = None):
        self.pool: tuple[str, ...] = tuple(pool) if pool else DEFAULT_AVATAR_POOL
        self._assigned: dict[str, str] = {}
        self._cursor = 0

    def __contains__(self, name: object) -> bool:
        return name in self._assigned

    def __len__(self) -> int:
        return len(self._assigned)

    @property
    def cursor(self) -> int:
        return self._cursor

    def assign(self, name: str) -> str:
        if name not in self._assigned:
            self._assigned[name] = self.pool[self._cursor % len(self.pool)]
            self._cursor += 1
        return self._assigned[name]


class AvatarAssigner:
    """Pick the avatar URL to show for a sender."""

    def __init__(self, avatar_map: Optional[AvatarMap] = None):
        self.avatar_map = avatar_map if avatar_map is not None else AvatarMap()

    def resolve(
        self,
        sender_name: str,
        avatar_hint: Optional[str],
        is_self: bool,
        my_avatar_url: str,
    ) -> str:
        """Resolve a sender's avatar URL.

        Resolution order:
        1. The caller's own avatar when the sender is the caller
        2. An explicit absolute URL hint
        3. A numeric hint, formatted into the avatar service URL
        4. A stable entry from the fallback pool, assigned on first sight

        Never raises; always returns a URL string.
        """
        if is_self:
            return my_avatar_url

        hint = (avatar_hint or "").strip()
        if hint:
            if is_absolute_url(hint):
                return hint
            if hint.isdigit():
                return NUMERIC_AVATAR_URL.format(id=hint)
            logger.debug("Ignoring unusable avatar hint %r for %s", hint, sender_name)

        return self.avatar_map.assign(sender_name)
