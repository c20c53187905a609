"""Download executor: fetch media bytes or fall back to opening the URL."""

import asyncio
import logging
import os
import re
import unicodedata
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Protocol

from .exceptions import EmptyOrInvalidBodyError, MediaError
from .models import DownloadOutcome, DownloadResult, VideoDescriptor
from .relay import ProxyRelay
from .resolvers import timestamp_ms

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_DELAY = 1.0

# Called with the untouched download URL when the bytes cannot be fetched
OpenExternally = Callable[[str], Awaitable[Any]]


class MediaSink(Protocol):
    """Destination for downloaded bytes."""

    async def save(self, filename: str, data: bytes) -> Any: ...


def sanitize_filename(name: str, max_length: int = 200) -> str:
    """Sanitize filename for cross-platform compatibility"""
    name = unicodedata.normalize("NFKC", name)
    name = re.sub(r'[\\/:*?"<>|\x00-\x1f]', "_", name)

    windows_reserved = {
        "CON", "PRN", "AUX", "NUL",
        "COM1", "COM2", "COM3", "COM4", "COM5", "COM6", "COM7", "COM8", "COM9",
        "LPT1", "LPT2", "LPT3", "LPT4", "LPT5", "LPT6", "LPT7", "LPT8", "LPT9",
    }
    if name.split(".")[0].upper() in windows_reserved:
        name = f"_{name}"

    name = name[:max_length].strip().lstrip(".")
    return name or f"video_{timestamp_ms()}.mp4"


class FileSink:
    """Write downloaded media into a local directory.

    Args:
        directory: Target directory, created on first save
    """

    def __init__(self, directory: str):
        if not os.path.isabs(directory):
            directory = os.path.abspath(directory)
        self.directory = Path(directory)

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)

    async def save(self, filename: str, data: bytes) -> Path:
        path = self.directory / sanitize_filename(filename)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write, path, data)
        logger.info(f"Saved {len(data)} bytes to {path}")
        return path


class Downloader:
    """Fetch a descriptor's media through the relay and hand it to a sink.

    Any failure (relay exhausted, non-2xx, empty body, sink error) is
    swallowed: after ``fallback_delay`` seconds ``open_external`` is called
    with the download URL unmodified and the outcome is OPENED_EXTERNALLY.

    Args:
        relay: Relay used for the fetch
        fallback_delay: Seconds to wait before opening the URL externally
    """

    def __init__(self, relay: ProxyRelay, fallback_delay: float = DEFAULT_FALLBACK_DELAY):
        self.relay = relay
        self.fallback_delay = fallback_delay

    async def _fetch(self, url: str) -> bytes:
        response = await self.relay.fetch(url)
        if not response.ok:
            raise MediaError(f"HTTP error! status: {response.status}")
        if not response.body:
            raise EmptyOrInvalidBodyError("Empty or invalid file")
        return response.body

    async def download(
        self,
        descriptor: VideoDescriptor,
        sink: MediaSink,
        open_external: OpenExternally,
    ) -> DownloadResult:
        """Download the media or fall back to opening its URL.

        Returns:
            DownloadResult with outcome SAVED or OPENED_EXTERNALLY
        """
        url = descriptor.download_url
        filename = descriptor.filename or f"video_{timestamp_ms()}.mp4"
        error: Optional[BaseException] = None
        try:
            data = await self._fetch(url)
            location = await sink.save(filename, data)
            logger.info(
                f"Downloaded {descriptor.platform.value} media {filename} "
                f"({len(data)} bytes)"
            )
            return DownloadResult(DownloadOutcome.SAVED, url, filename, location)
        except Exception as e:
            error = e
            logger.warning(f"Direct download of {url} failed, opening externally: {e}")

        await asyncio.sleep(self.fallback_delay)
        await open_external(url)
        return DownloadResult(
            DownloadOutcome.OPENED_EXTERNALLY, url, filename, None, error=error
        )
