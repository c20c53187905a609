"""Per-platform resolvers turning a page URL into a VideoDescriptor."""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from time import time
from typing import Any, Iterable, Optional

from .exceptions import (
    AllApisExhaustedError,
    InvalidIdError,
    MediaError,
    NotFoundError,
)
from .fallback import first_success
from .models import PlatformKind, RelayResponse, VideoDescriptor
from .relay import ProxyRelay, encode_component
from .shapes import MediaFields, match_first

logger = logging.getLogger(__name__)

STOCK_THUMBNAIL = (
    "https://images.unsplash.com/photo-1611605698335-8b1569810432?w=300&h=200&fit=crop"
)
STOCK_THUMBNAIL_ALT = (
    "https://images.unsplash.com/photo-1611162617474-5b21e879e113?w=300&h=200&fit=crop"
)

DEFAULT_TIKTOK_APIS = [
    "https://api.tiklydown.eu.org/api/download?url={url}",
    "https://www.tikwm.com/api/?url={url}",
    "https://tikdown.org/api?url={url}",
]
INSTAGRAM_API = (
    "https://instagram-downloader-download-instagram-videos-stories.p.rapidapi.com"
    "/index?url={url}"
)
TWITTER_API = "https://twitsave.com/info?url={url}"
YOUTUBE_WORKER = "https://ytdl.shipit.workers.dev/?url={url}"
YOUTUBE_THUMBNAIL = "https://img.youtube.com/vi/{id}/hqdefault.jpg"

_youtube_id_regex = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)"
    r"([^\"&?/\s]{11})"
)


def timestamp_ms() -> int:
    return int(time() * 1000)


def _with_prefix(error: MediaError, prefix: str) -> MediaError:
    """Copy of error (same class, same attributes) with a prefixed message."""
    prefixed = copy.copy(error)
    prefixed.args = (f"{prefix}: {error}",)
    return prefixed


@dataclass(frozen=True)
class PlatformDefaults:
    title: str
    thumbnail: str
    author: str
    prefix: str


class Resolver:
    """Base class for platform resolvers."""

    platform: PlatformKind
    defaults: PlatformDefaults

    def __init__(self, relay: Optional[ProxyRelay] = None):
        self.relay = relay

    async def resolve(self, url: str) -> VideoDescriptor:
        raise NotImplementedError

    async def _get_json(self, api_url: str) -> Any:
        response: RelayResponse = await self.relay.fetch(api_url)
        if not response.ok:
            raise NotFoundError("API did not respond")
        return response.json()

    def _descriptor(
        self,
        video_url: str,
        title: Optional[str] = None,
        thumbnail: Optional[str] = None,
        author: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> VideoDescriptor:
        """Build a descriptor, filling missing fields with platform defaults."""
        return VideoDescriptor(
            title=title or self.defaults.title,
            thumbnail_url=thumbnail or self.defaults.thumbnail,
            platform=self.platform,
            author=author or self.defaults.author,
            download_url=video_url,
            filename=filename or f"{self.defaults.prefix}_{timestamp_ms()}.mp4",
        )


class TikTokResolver(Resolver):
    """Resolve TikTok links through several independent public APIs.

    APIs are queried one at a time through the relay; the first one whose
    response matches a known shape with a playable URL wins.
    """

    platform = PlatformKind.TIKTOK
    defaults = PlatformDefaults("TikTok Video", STOCK_THUMBNAIL, "TikTok User", "tiktok")

    def __init__(
        self,
        relay: Optional[ProxyRelay] = None,
        api_templates: Optional[Iterable[str]] = None,
    ):
        super().__init__(relay)
        self.api_templates = list(api_templates or DEFAULT_TIKTOK_APIS)

    async def _try_api(self, api_url: str) -> Optional[VideoDescriptor]:
        data = await self._get_json(api_url)
        fields: Optional[MediaFields] = match_first(data)
        if fields is None or not fields.video_url:
            return None
        logger.debug(f"TikTok response matched '{fields.shape}' shape")
        return self._descriptor(
            fields.video_url,
            title=fields.title,
            thumbnail=fields.thumbnail,
            author=fields.author,
        )

    async def resolve(self, url: str) -> VideoDescriptor:
        """Resolve a TikTok URL.

        Raises:
            AllApisExhaustedError: No API produced a playable URL
        """
        encoded = encode_component(url)
        candidates = [
            (f"TikTok API {number}", template.format(url=encoded))
            for number, template in enumerate(self.api_templates, start=1)
        ]

        async def attempt(candidate: tuple[str, str]) -> Optional[VideoDescriptor]:
            return await self._try_api(candidate[1])

        descriptor, failures = await first_success(
            candidates, attempt, name=lambda c: c[0]
        )
        if descriptor is None:
            logger.error(f"All {len(candidates)} TikTok APIs failed for {url}")
            raise AllApisExhaustedError(
                "All TikTok APIs failed. Try again later.", failures
            )
        return descriptor


class SingleApiResolver(Resolver):
    """Resolver backed by a single third-party API queried once."""

    api_template: str

    def __init__(self, relay: Optional[ProxyRelay] = None, api_template: Optional[str] = None):
        super().__init__(relay)
        if api_template:
            self.api_template = api_template

    def _parse(self, data: Any) -> VideoDescriptor:
        raise NotImplementedError

    async def resolve(self, url: str) -> VideoDescriptor:
        """Query the platform API once and normalize its response.

        Raises:
            MediaError: Any failure, its message prefixed with the platform name
        """
        api_url = self.api_template.format(url=encode_component(url))
        try:
            data = await self._get_json(api_url)
            if not isinstance(data, dict):
                raise NotFoundError("Unexpected API response")
            return self._parse(data)
        except MediaError as e:
            raise _with_prefix(e, self.platform.value) from e
        except ValueError as e:
            raise NotFoundError(f"{self.platform.value}: Invalid API response") from e


class InstagramResolver(SingleApiResolver):
    platform = PlatformKind.INSTAGRAM
    defaults = PlatformDefaults(
        "Instagram Video", STOCK_THUMBNAIL_ALT, "Instagram User", "instagram"
    )
    api_template = INSTAGRAM_API

    def _parse(self, data: dict[str, Any]) -> VideoDescriptor:
        media = data.get("media")
        if not isinstance(media, str) or not media:
            raise NotFoundError("Video not found")
        return self._descriptor(
            media,
            title=data.get("title"),
            thumbnail=data.get("thumbnail"),
            author=data.get("author"),
        )


class TwitterResolver(SingleApiResolver):
    platform = PlatformKind.TWITTER
    defaults = PlatformDefaults("Twitter Video", STOCK_THUMBNAIL, "Twitter User", "twitter")
    api_template = TWITTER_API

    @staticmethod
    def _video_url(data: dict[str, Any]) -> Optional[str]:
        videos = data.get("videos")
        if isinstance(videos, list) and videos and isinstance(videos[0], dict):
            url = videos[0].get("url")
            if isinstance(url, str) and url:
                return url
        media = data.get("media")
        if isinstance(media, str) and media:
            return media
        return None

    def _parse(self, data: dict[str, Any]) -> VideoDescriptor:
        video_url = self._video_url(data)
        if not video_url:
            raise NotFoundError("Download link not found")
        return self._descriptor(
            video_url,
            title=data.get("title"),
            thumbnail=data.get("thumbnail"),
            author=data.get("author"),
        )


def extract_youtube_id(url: str) -> Optional[str]:
    match = _youtube_id_regex.search(url)
    if match:
        return match.group(1)
    return None


class YouTubeResolver(Resolver):
    """Synthesize a YouTube descriptor without calling any API.

    The download URL points at an external redirect worker which does the
    actual resolution when the file is fetched.
    """

    platform = PlatformKind.YOUTUBE
    defaults = PlatformDefaults("YouTube Video", STOCK_THUMBNAIL, "YouTube Channel", "youtube")

    def __init__(self, relay: Optional[ProxyRelay] = None, worker_template: str = YOUTUBE_WORKER):
        super().__init__(relay)
        self.worker_template = worker_template

    async def resolve(self, url: str) -> VideoDescriptor:
        """Build the descriptor from the video id.

        Raises:
            InvalidIdError: No 11-character id in the URL
        """
        video_id = extract_youtube_id(url)
        if not video_id:
            raise InvalidIdError("YouTube: Invalid YouTube URL")
        return self._descriptor(
            self.worker_template.format(url=encode_component(url)),
            thumbnail=YOUTUBE_THUMBNAIL.format(id=video_id),
            filename=f"youtube_{video_id}.mp4",
        )
