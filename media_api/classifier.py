"""URL validation and platform detection."""

from typing import Optional

from .exceptions import InvalidUrlError, UnsupportedPlatformError
from .models import PlatformKind, url_hostname

# Hostname substrings per platform. Matching is containment, not equality,
# so e.g. "m.tiktok.com" and "mobile.twitter.com" are accepted as well.
PLATFORM_HOSTS: dict[PlatformKind, tuple[str, ...]] = {
    PlatformKind.TIKTOK: ("tiktok.com", "vm.tiktok.com"),
    PlatformKind.INSTAGRAM: ("instagram.com", "www.instagram.com"),
    PlatformKind.TWITTER: ("twitter.com", "x.com"),
    PlatformKind.YOUTUBE: ("youtube.com", "www.youtube.com", "youtu.be"),
}

PLATFORM_EXAMPLES: dict[PlatformKind, str] = {
    PlatformKind.TIKTOK: "https://www.tiktok.com/@username/video/123456789",
    PlatformKind.INSTAGRAM: "https://www.instagram.com/reel/ABC1234567/",
    PlatformKind.TWITTER: "https://twitter.com/user/status/123456789",
    PlatformKind.YOUTUBE: "https://youtube.com/watch?v=ABC1234567",
}


def platform_for_host(hostname: str) -> Optional[PlatformKind]:
    hostname = hostname.lower()
    for platform, needles in PLATFORM_HOSTS.items():
        if any(needle in hostname for needle in needles):
            return platform
    return None


def classify(raw: str) -> Optional[PlatformKind]:
    """Classify a raw string as a supported platform URL.

    Returns:
        The platform, or None when the string is not an absolute URL or
        its hostname belongs to no supported platform.
    """
    hostname = url_hostname(raw)
    if hostname is None:
        return None
    return platform_for_host(hostname)


def validate_url(raw: str) -> bool:
    """Whether the pipeline should be allowed to run for this input."""
    return classify(raw) is not None


def require_platform(raw: str) -> PlatformKind:
    """Classify or raise.

    Raises:
        InvalidUrlError: Input is not an absolute URL
        UnsupportedPlatformError: Host matches no supported platform
    """
    hostname = url_hostname(raw)
    if hostname is None:
        raise InvalidUrlError("Invalid URL")
    platform = platform_for_host(hostname)
    if platform is None:
        raise UnsupportedPlatformError(f"Unsupported platform: {hostname}")
    return platform
