"""Data models for resolved media and download results."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from json import loads as json_loads
from typing import Any, Optional
from urllib.parse import urlsplit

from .exceptions import InvalidUrlError

UNKNOWN_DURATION = "Unknown"

_hostname_regex = re.compile(r"^[a-z0-9_-]+(?:\.[a-z0-9_-]+)*\.?$")
_ipv6_regex = re.compile(r"^[0-9a-f:.]+$")


class PlatformKind(str, Enum):
    """Supported platforms. Values are the display names."""

    TIKTOK = "TikTok"
    INSTAGRAM = "Instagram"
    TWITTER = "Twitter"
    YOUTUBE = "YouTube"


def valid_hostname(hostname: str) -> bool:
    """Check hostname characters the way a browser URL parser would."""
    if hostname.startswith("[") or ":" in hostname:
        return bool(_ipv6_regex.match(hostname.strip("[]")))
    try:
        # IDN labels are checked in their ASCII form
        ascii_host = hostname.encode("idna").decode("ascii")
    except UnicodeError:
        return False
    return bool(_hostname_regex.match(ascii_host.lower()))


def url_hostname(value: str) -> Optional[str]:
    """Lower-cased hostname of an absolute URL, or None when malformed."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value:
        return None
    try:
        parts = urlsplit(value)
        # Accessing port validates it
        parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.hostname:
        return None
    if not valid_hostname(parts.hostname):
        return None
    return parts.hostname


def is_absolute_url(value: str) -> bool:
    """Check that value parses as an absolute URL with a valid host."""
    return url_hostname(value) is not None


@dataclass(frozen=True)
class VideoDescriptor:
    """Normalized result of a resolution pipeline.

    Attributes:
        title: Video title or the platform default
        thumbnail_url: Cover image URL or the platform stock image
        duration: Always "Unknown", no platform exposes a real duration
        platform: Platform the video belongs to
        author: Author display name or the platform default
        download_url: Absolute URL of the media or of a redirect worker
        filename: Suggested local filename, platform-prefixed
    """

    title: str
    thumbnail_url: str
    platform: PlatformKind
    author: str
    download_url: str
    filename: str
    duration: str = UNKNOWN_DURATION

    def __post_init__(self) -> None:
        if not is_absolute_url(self.download_url):
            raise InvalidUrlError(f"Invalid download URL: {self.download_url!r}")

    def as_dict(self) -> dict[str, Any]:
        """Serialize to plain types (platform stored by value)."""
        data = asdict(self)
        data["platform"] = self.platform.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VideoDescriptor:
        return cls(
            title=data["title"],
            thumbnail_url=data["thumbnail_url"],
            platform=PlatformKind(data["platform"]),
            author=data["author"],
            download_url=data["download_url"],
            filename=data["filename"],
            duration=data.get("duration", UNKNOWN_DURATION),
        )


@dataclass
class Attempt:
    """One failed candidate (API endpoint or relay route) of a single request."""

    name: str
    error: str

    def __str__(self) -> str:
        return f"{self.name}: {self.error}"


@dataclass
class RelayResponse:
    """Buffered HTTP response returned by the proxy relay.

    Attributes:
        status: HTTP status code
        url: URL actually requested (proxy-wrapped or direct)
        route: Name of the relay route that produced the response
        body: Full response body
        content_type: Content-Type header value, if any
    """

    status: int
    url: str
    route: str
    body: bytes = b""
    content_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON regardless of the declared content type.

        Raises:
            ValueError: Body is not valid JSON
        """
        return json_loads(self.body.decode("utf-8", errors="replace"))


class DownloadOutcome(str, Enum):
    SAVED = "saved"
    OPENED_EXTERNALLY = "opened_externally"


@dataclass
class DownloadResult:
    """Outcome of the download executor.

    Attributes:
        outcome: SAVED when the bytes reached the sink, OPENED_EXTERNALLY otherwise
        url: The descriptor's download URL, unmodified
        filename: Filename handed to the sink
        location: Whatever the sink returned (a path for FileSink), None on fallback
        error: Swallowed cause of the fallback, if any
    """

    outcome: DownloadOutcome
    url: str
    filename: str
    location: Any = None
    error: Optional[BaseException] = field(default=None, repr=False)

    @property
    def saved(self) -> bool:
        return self.outcome is DownloadOutcome.SAVED
