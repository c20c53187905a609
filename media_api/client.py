"""Client facade: classify a URL, dispatch to its resolver, download."""

import logging
from typing import Any, Optional

from .classifier import require_platform
from .downloader import DEFAULT_FALLBACK_DELAY, Downloader, MediaSink, OpenExternally
from .models import DownloadResult, PlatformKind, VideoDescriptor
from .relay import DEFAULT_TIMEOUT, ProxyRelay
from .resolvers import (
    InstagramResolver,
    Resolver,
    TikTokResolver,
    TwitterResolver,
    YouTubeResolver,
)

logger = logging.getLogger(__name__)


class MediaClient:
    """Resolve social media links to downloadable media.

    Every call starts from a fresh candidate list; nothing is kept between
    requests except the relay's HTTP session.

    Args:
        relay: ProxyRelay shared by all resolvers and the downloader
        tiktok_apis: Optional TikTok API templates overriding the defaults
        fallback_delay: Seconds to wait before the external-open fallback

    Example:
        >>> from media_api import MediaClient, FileSink
        >>> client = MediaClient()
        >>> descriptor = await client.video("https://youtu.be/dQw4w9WgXcQ")
        >>> result = await client.download(descriptor, FileSink("downloads"), webbrowser_open)
        >>> await client.close()
    """

    def __init__(
        self,
        relay: Optional[ProxyRelay] = None,
        tiktok_apis: Optional[list[str]] = None,
        fallback_delay: float = DEFAULT_FALLBACK_DELAY,
    ):
        self.relay = relay or ProxyRelay()
        self.resolvers: dict[PlatformKind, Resolver] = {
            PlatformKind.TIKTOK: TikTokResolver(self.relay, tiktok_apis),
            PlatformKind.INSTAGRAM: InstagramResolver(self.relay),
            PlatformKind.TWITTER: TwitterResolver(self.relay),
            PlatformKind.YOUTUBE: YouTubeResolver(self.relay),
        }
        self.downloader = Downloader(self.relay, fallback_delay)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "MediaClient":
        """Build a client from the application config dict."""
        api_config = config.get("api", {})
        download_config = config.get("download", {})
        relay = ProxyRelay(
            templates=api_config.get("relay_routes"),
            include_direct=api_config.get("relay_include_direct", True),
            timeout=api_config.get("relay_timeout", DEFAULT_TIMEOUT),
        )
        return cls(
            relay=relay,
            tiktok_apis=api_config.get("tiktok_apis"),
            fallback_delay=download_config.get("fallback_delay", DEFAULT_FALLBACK_DELAY),
        )

    async def video(self, url: str) -> VideoDescriptor:
        """Resolve a page URL into a VideoDescriptor.

        Raises:
            InvalidUrlError: Not an absolute URL
            UnsupportedPlatformError: Unknown host
            MediaError: Platform-specific resolution failure
        """
        url = url.strip()
        platform = require_platform(url)
        logger.debug(f"Resolving {platform.value} link {url}")
        descriptor = await self.resolvers[platform].resolve(url)
        logger.info(f"Resolved {platform.value} link {url} -> {descriptor.download_url}")
        return descriptor

    async def download(
        self,
        descriptor: VideoDescriptor,
        sink: MediaSink,
        open_external: OpenExternally,
    ) -> DownloadResult:
        return await self.downloader.download(descriptor, sink, open_external)

    async def close(self) -> None:
        """Close the relay session. Call on application shutdown."""
        await self.relay.close()
