"""Per-user in-flight limits for the resolve and download pipelines."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from data.config import config

logger = logging.getLogger(__name__)

INFO = "info"
DOWNLOAD = "download"


class QueueManager:
    """
    Singleton tracking how many pipelines each user has in flight.

    A user may run at most ``max_user_queue`` resolutions and the same number
    of downloads at once. Requests over the limit are rejected, not queued;
    the handler tells the user to wait for the running one.

    Usage:
        queue = QueueManager.get_instance()

        async with queue.info_queue(user_id) as acquired:
            if not acquired:
                await message.reply(locale[lang]['wait'])
                return
            descriptor = await media_client.video(url)
    """

    _instance: QueueManager | None = None

    def __init__(self, max_user_queue: int):
        """
        Initialize the queue manager.

        Args:
            max_user_queue: Maximum in-flight pipelines per user and kind
        """
        self.max_user_queue = max_user_queue
        self._counts: dict[tuple[str, int], int] = {}
        self._lock = asyncio.Lock()

        logger.info(f"QueueManager initialized: max_user_queue={max_user_queue}")

    @classmethod
    def get_instance(cls) -> QueueManager:
        """Get or create the singleton instance."""
        if cls._instance is None:
            cls._instance = cls(max_user_queue=config["queue"]["max_user_queue_size"])
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (useful for testing)."""
        cls._instance = None

    def get_user_queue_count(self, kind: str, user_id: int) -> int:
        return self._counts.get((kind, user_id), 0)

    async def acquire(self, kind: str, user_id: int) -> bool:
        """
        Acquire a slot for a user.

        Returns:
            True if acquired, False if the user limit is reached
        """
        key = (kind, user_id)
        async with self._lock:
            current_count = self._counts.get(key, 0)
            if current_count >= self.max_user_queue:
                logger.debug(
                    f"User {user_id} rejected: {current_count}/{self.max_user_queue} {kind} in flight"
                )
                return False
            self._counts[key] = current_count + 1
        return True

    async def release(self, kind: str, user_id: int) -> None:
        key = (kind, user_id)
        async with self._lock:
            if key in self._counts:
                self._counts[key] -= 1
                if self._counts[key] <= 0:
                    del self._counts[key]

    @asynccontextmanager
    async def _slot(self, kind: str, user_id: int) -> AsyncGenerator[bool, None]:
        acquired = await self.acquire(kind, user_id)
        try:
            yield acquired
        finally:
            if acquired:
                await self.release(kind, user_id)

    def info_queue(self, user_id: int):
        """Context manager yielding whether a resolution slot was acquired."""
        return self._slot(INFO, user_id)

    def download_queue(self, user_id: int):
        """Context manager yielding whether a download slot was acquired."""
        return self._slot(DOWNLOAD, user_id)

    @property
    def active_users_count(self) -> int:
        return len({user_id for _, user_id in self._counts})
