"""Load and parse chat transcript JSON documents.

A transcript is a JSON array of record objects:
[{"name": "alice", "element": "Text", "content": "hi", "avatar": "12345"}, ...]
"""

import json
from typing import Any

from pydantic import ValidationError

from .errors import FatalLoadError, FetchError
from .fetch import Fetcher
from .models import TranscriptRecord


def parse_transcript(data: Any) -> list[TranscriptRecord]:
    """Validate decoded JSON into transcript records.

    Raises:
        FatalLoadError: If the document is not an array of record objects.
    """
    if not isinstance(data, list):
        raise FatalLoadError(
            f"Transcript must be a JSON array, got {type(data).__name__}"
        )
    records: list[TranscriptRecord] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise FatalLoadError(
                f"Transcript record {index} must be an object, got {type(item).__name__}"
            )
        try:
            records.append(TranscriptRecord.model_validate(item))
        except ValidationError as e:
            raise FatalLoadError(f"Invalid transcript record {index}: {e}") from e
    return records


def parse_transcript_text(text: str) -> list[TranscriptRecord]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FatalLoadError(f"Transcript is not valid JSON: {e}") from e
    return parse_transcript(data)


async def load_transcript(source: str, fetcher: Fetcher) -> list[TranscriptRecord]:
    """Fetch and parse a transcript.

    Unlike card templates there is no fallback: a transcript that cannot be
    loaded has nothing to render.

    Raises:
        FatalLoadError: On fetch failure or malformed content.
    """
    try:
        text = await fetcher.fetch_text(source)
    except FetchError as e:
        raise FatalLoadError(f"Failed to load chat data from {source}: {e.reason}") from e
    return parse_transcript_text(text)
