"""Media resolution exception classes."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .models import Attempt


class MediaError(Exception):
    """Base exception for media resolution errors."""

    pass


class InvalidUrlError(MediaError):
    """Input is not a parseable absolute URL."""

    pass


class UnsupportedPlatformError(MediaError):
    """URL parsed fine but its host belongs to no supported platform."""

    pass


class AllProxiesExhaustedError(MediaError):
    """Every relay route failed for a target URL."""

    def __init__(self, message: str, attempts: Optional[List[Attempt]] = None):
        super().__init__(message)
        self.attempts = attempts or []


class AllApisExhaustedError(MediaError):
    """Every candidate resolution API failed (TikTok only)."""

    def __init__(self, message: str, attempts: Optional[List[Attempt]] = None):
        super().__init__(message)
        self.attempts = attempts or []


class NotFoundError(MediaError):
    """API answered but the response carries no media URL."""

    pass


class InvalidIdError(MediaError):
    """No video id could be extracted from the URL."""

    pass


class EmptyOrInvalidBodyError(MediaError):
    """Download returned an empty or unusable body."""

    pass
