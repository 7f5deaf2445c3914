"""
Default page fetcher: requests driven from asyncio.

Any callable ``async (url) -> str`` can replace it; the pipeline only
requires that failures surface as TransportError.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Mapping

import requests

from . import __version__
from .errors import TransportError

log = logging.getLogger(__name__)

Fetch = Callable[[str], Awaitable[str]]

DEFAULT_TIMEOUT = 30.0
USER_AGENT = f"whatsdue/{__version__} (+https://github.com/whatsdue/whatsdue)"


class HttpTransport:
    """
    Fetch pages with plain ``requests.get`` calls.

    requests is blocking, so each GET runs in a worker thread and the
    event loop only ever waits on the returned awaitable. Concurrent GETs
    share no requests.Session, only the immutable header values.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.timeout = timeout
        self.headers = {"User-Agent": USER_AGENT, **(headers or {})}

    def _get(self, url: str) -> str:
        log.debug("GET %s", url)
        try:
            resp = requests.get(url, headers=dict(self.headers), timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            log.warning("Fetching %s failed: %s", url, e)
            raise TransportError(f"Could not fetch {url}") from e
        return resp.text

    async def __call__(self, url: str) -> str:
        return await asyncio.to_thread(self._get, url)
