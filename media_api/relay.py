"""Ordered CORS-proxy relay with a direct-connection fallback."""

import logging
import re
import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional
from urllib.parse import quote

import aiohttp
from aiohttp import ClientTimeout

from .exceptions import AllProxiesExhaustedError, MediaError
from .fallback import first_success
from .models import RelayResponse

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_TEMPLATES = [
    "https://api.allorigins.win/raw?url={url}",
    "https://corsproxy.io/?{url}",
    "https://cors-anywhere.herokuapp.com/{raw}",
]

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json",
}

DEFAULT_TIMEOUT = 30.0


def encode_component(value: str) -> str:
    """Percent-encode a whole URL for use as a query value (encodeURIComponent)."""
    return quote(value, safe="-_.!~*'()")


def _route_name(template: str) -> str:
    """Short label for a route template, without credentials or the target."""
    match = re.match(r"^(https?://)(?:[^@/]+@)?([^/?]+)", template)
    if match:
        return match.group(2)
    return template


@dataclass(frozen=True)
class RelayRoute:
    """One outbound path to a target.

    The template may reference ``{url}`` (encoded target) or ``{raw}``
    (target as-is). The direct route is simply ``{raw}``.
    """

    name: str
    template: str

    @classmethod
    def from_template(cls, template: str) -> "RelayRoute":
        if template == "{raw}":
            return cls("direct", template)
        return cls(_route_name(template), template)

    @property
    def is_direct(self) -> bool:
        return self.template == "{raw}"

    def build(self, target_url: str) -> str:
        return self.template.format(url=encode_component(target_url), raw=target_url)


DIRECT_ROUTE = RelayRoute("direct", "{raw}")


class ProxyRelay:
    """Fetch a URL through an ordered list of relay routes.

    Every route is tried once, in order, until one returns a 2xx response.
    Non-2xx answers and transport errors move on to the next route. The
    response body is read inside the attempt and returned buffered.

    Args:
        templates: Proxy route templates, in order. Defaults to the public
            allorigins, corsproxy.io and cors-anywhere relays.
        include_direct: Append the unproxied target as the last route
        timeout: Per-attempt timeout in seconds; 0 or None disables it
        session: Optional aiohttp session to use instead of an owned one

    Example:
        >>> relay = ProxyRelay()
        >>> response = await relay.fetch("https://www.tikwm.com/api/?url=...")
        >>> data = response.json()
        >>> await relay.close()
    """

    def __init__(
        self,
        templates: Optional[Iterable[str]] = None,
        include_direct: bool = True,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        if templates is None:
            templates = DEFAULT_ROUTE_TEMPLATES
        self.routes: List[RelayRoute] = [
            RelayRoute.from_template(t) for t in templates if t and t != "{raw}"
        ]
        if include_direct:
            self.routes.append(DIRECT_ROUTE)
        if not self.routes:
            logger.warning("No relay routes configured, will use direct connection")
            self.routes = [DIRECT_ROUTE]
        self.headers = dict(headers or DEFAULT_HEADERS)
        self.timeout = ClientTimeout(total=timeout or None)
        self._session = session
        self._owns_session = session is None
        self._session_lock = threading.Lock()
        logger.debug(
            f"Relay routes: {', '.join(r.name for r in self.routes)} "
            f"(timeout={timeout or 'none'})"
        )

    def _get_session(self) -> aiohttp.ClientSession:
        with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession()
                self._owns_session = True
            return self._session

    async def close(self) -> None:
        """Close the owned aiohttp session. Injected sessions are left open."""
        with self._session_lock:
            if not self._owns_session:
                return
            session = self._session
            self._session = None
        if session is not None and not session.closed:
            await session.close()

    async def _attempt(self, route: RelayRoute, target_url: str) -> RelayResponse:
        url = route.build(target_url)
        session = self._get_session()
        async with session.get(url, headers=self.headers, timeout=self.timeout) as response:
            if not 200 <= response.status < 300:
                raise MediaError(f"HTTP {response.status}")
            body = await response.read()
            return RelayResponse(
                status=response.status,
                url=url,
                route=route.name,
                body=body,
                content_type=response.headers.get("Content-Type"),
            )

    async def fetch(self, target_url: str) -> RelayResponse:
        """GET target_url through the first route that answers with 2xx.

        Raises:
            AllProxiesExhaustedError: Every route failed
        """

        async def attempt(route: RelayRoute) -> RelayResponse:
            return await self._attempt(route, target_url)

        response, failures = await first_success(
            self.routes, attempt, name=lambda r: f"relay {r.name}"
        )
        if response is None:
            logger.error(f"All {len(self.routes)} relay routes failed for {target_url}")
            raise AllProxiesExhaustedError("All proxies failed", failures)
        logger.debug(f"Relay {response.route} answered {response.status} for {target_url}")
        return response
