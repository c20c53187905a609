"""Ordered "first success wins" iteration over candidate strategies."""

import logging
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple, TypeVar

from .models import Attempt

logger = logging.getLogger(__name__)

C = TypeVar("C")
T = TypeVar("T")


async def first_success(
    candidates: Iterable[C],
    attempt: Callable[[C], Awaitable[Optional[T]]],
    name: Callable[[C], str] = str,
) -> Tuple[Optional[T], List[Attempt]]:
    """Try candidates one at a time until one yields a result.

    A candidate fails when ``attempt`` raises or returns None. Failures are
    logged and collected; nothing is retried.

    Args:
        candidates: Ordered candidates, consumed lazily
        attempt: Coroutine function tried once per candidate
        name: Label for a candidate in logs and in the returned attempts

    Returns:
        Tuple of (first result or None, failed attempts in order)
    """
    failures: List[Attempt] = []
    for candidate in candidates:
        label = name(candidate)
        logger.debug(f"Trying {label}")
        try:
            result = await attempt(candidate)
        except Exception as e:
            logger.warning(f"{label} failed: {e}")
            failures.append(Attempt(label, str(e) or type(e).__name__))
            continue
        if result is None:
            logger.warning(f"{label} returned nothing usable")
            failures.append(Attempt(label, "no usable result"))
            continue
        return result, failures
    return None, failures
