"""Social media video resolver.

Turns TikTok, Instagram, Twitter/X and YouTube page links into a normalized
VideoDescriptor through public third-party APIs reached via an ordered chain
of CORS relays, and downloads the media with an open-externally fallback.

Example:
    >>> from media_api import MediaClient, FileSink, classify
    >>>
    >>> classify("https://vm.tiktok.com/ZMabc123/")
    <PlatformKind.TIKTOK: 'TikTok'>
    >>> client = MediaClient()
    >>> try:
    ...     descriptor = await client.video("https://www.tiktok.com/@user/video/123")
    ...     print(descriptor.title, descriptor.download_url)
    ... except AllApisExhaustedError:
    ...     print("No TikTok API answered")
"""

from .classifier import PLATFORM_EXAMPLES, classify, require_platform, validate_url
from .client import MediaClient
from .downloader import Downloader, FileSink, MediaSink, sanitize_filename
from .exceptions import (
    AllApisExhaustedError,
    AllProxiesExhaustedError,
    EmptyOrInvalidBodyError,
    InvalidIdError,
    InvalidUrlError,
    MediaError,
    NotFoundError,
    UnsupportedPlatformError,
)
from .models import (
    Attempt,
    DownloadOutcome,
    DownloadResult,
    PlatformKind,
    RelayResponse,
    VideoDescriptor,
)
from .relay import ProxyRelay, RelayRoute
from .resolvers import (
    InstagramResolver,
    TikTokResolver,
    TwitterResolver,
    YouTubeResolver,
    extract_youtube_id,
)

__all__ = [
    # Client
    "MediaClient",
    # Classifier
    "classify",
    "validate_url",
    "require_platform",
    "PLATFORM_EXAMPLES",
    # Relay
    "ProxyRelay",
    "RelayRoute",
    # Resolvers
    "TikTokResolver",
    "InstagramResolver",
    "TwitterResolver",
    "YouTubeResolver",
    "extract_youtube_id",
    # Download
    "Downloader",
    "FileSink",
    "MediaSink",
    "sanitize_filename",
    # Models
    "PlatformKind",
    "VideoDescriptor",
    "RelayResponse",
    "Attempt",
    "DownloadOutcome",
    "DownloadResult",
    # Exceptions
    "MediaError",
    "InvalidUrlError",
    "UnsupportedPlatformError",
    "AllProxiesExhaustedError",
    "AllApisExhaustedError",
    "NotFoundError",
    "InvalidIdError",
    "EmptyOrInvalidBodyError",
]
