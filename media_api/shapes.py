"""Known response shapes of the third-party TikTok resolution APIs.

Each matcher takes the decoded JSON body and returns:

- ``None`` when the shape does not apply (its container key is absent or
  null, false, 0 or ""; empty objects and lists still apply),
- a ``MediaFields`` otherwise, whose ``video_url`` may still be empty.

Matchers are tried in ``TIKTOK_SHAPES`` order and the first applicable one
decides, so a body carrying ``videos`` is never read as ``data`` or ``url``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence


@dataclass
class MediaFields:
    """Raw fields picked out of an API response, before defaults."""

    video_url: Optional[str]
    title: Optional[str] = None
    thumbnail: Optional[str] = None
    author: Optional[str] = None
    shape: str = ""


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _first_text(*values: Any) -> Optional[str]:
    for value in values:
        text = _text(value)
        if text:
            return text
    return None


def _truthy(value: Any) -> bool:
    """JSON truthiness as the APIs' JavaScript clients see it: {} and [] count."""
    if value is None or value is False or value == "":
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    return True


def _nickname(author: Any) -> Optional[str]:
    if isinstance(author, dict):
        return _text(author.get("nickname"))
    return None


def match_videos(data: dict[str, Any]) -> Optional[MediaFields]:
    """Tiklydown style: ``videos.hd``/``sd``/``wm`` plus top-level metadata."""
    videos = data.get("videos")
    if not _truthy(videos):
        return None
    if not isinstance(videos, dict):
        return MediaFields(None, shape="videos")
    return MediaFields(
        video_url=_first_text(videos.get("hd"), videos.get("sd"), videos.get("wm")),
        title=_text(data.get("title")),
        thumbnail=_text(data.get("cover")),
        author=_nickname(data.get("author")),
        shape="videos",
    )


def match_data(data: dict[str, Any]) -> Optional[MediaFields]:
    """TikWM style: ``data.play``/``data.wmplay`` with nested metadata."""
    inner = data.get("data")
    if not _truthy(inner):
        return None
    if not isinstance(inner, dict):
        return MediaFields(None, shape="data")
    return MediaFields(
        video_url=_first_text(inner.get("play"), inner.get("wmplay")),
        title=_text(inner.get("title")),
        thumbnail=_text(inner.get("cover")),
        author=_nickname(inner.get("author")),
        shape="data",
    )


def match_flat(data: dict[str, Any]) -> Optional[MediaFields]:
    """Flat style: ``url``/``title``/``thumbnail``/``author`` at top level."""
    if not _truthy(data.get("url")):
        return None
    return MediaFields(
        video_url=_text(data.get("url")),
        title=_text(data.get("title")),
        thumbnail=_text(data.get("thumbnail")),
        author=_text(data.get("author")),
        shape="flat",
    )


Matcher = Callable[[dict[str, Any]], Optional[MediaFields]]

TIKTOK_SHAPES: Sequence[Matcher] = (match_videos, match_data, match_flat)


def match_first(data: Any, matchers: Sequence[Matcher] = TIKTOK_SHAPES) -> Optional[MediaFields]:
    """Apply matchers in order and return the first applicable result."""
    if not isinstance(data, dict):
        return None
    for matcher in matchers:
        fields = matcher(data)
        if fields is not None:
            return fields
    return None
