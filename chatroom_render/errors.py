"""Exception types raised while loading and rendering chat transcripts.

Only FatalLoadError is expected to reach callers of the top-level entry
point. The other types are raised inside the pipeline and recovered there
as inline error fragments or default templates.
"""


class ChatroomRenderError(Exception):
    """Base class for all chatroom rendering errors."""


class FatalLoadError(ChatroomRenderError):
    """The transcript itself could not be fetched or parsed."""


class RecoverableCardError(ChatroomRenderError):
    """A single card payload could not be parsed or rendered."""


class FetchError(ChatroomRenderError):
    """A resource could not be fetched (network error, bad status, missing file)."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Failed to load {location}: {reason}")
