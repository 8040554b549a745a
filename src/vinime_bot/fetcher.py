"""
HTTP page fetcher for vinime-bot.

Downloads HTML from the source site with a browser-like header profile,
manual redirect handling and a fixed-delay retry on transport failures.
"""
import asyncio
import logging
from typing import Dict, Optional

import httpx

from .constants import ACCEPT, ACCEPT_LANGUAGE, MAX_REDIRECTS, USER_AGENT
from .errors import FetchError
from .utils import to_abs_url

logger = logging.getLogger(__name__)


class PageFetcher:
    """Retrying, redirect-following page downloader.

    Relative ``Location`` headers are resolved against the site origin, not
    against the URL that issued the redirect. This matches the source site,
    which only ever redirects within its own origin.

    Args:
        base_url: Site origin, used for the ``Referer`` header and redirects.
        timeout: Per-request timeout in seconds.
        retries: Default number of retries after a transport failure.
        backoff: Fixed delay in seconds before each retry.
        client: Optional pre-built ``httpx.AsyncClient`` (not closed by us).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 20.0,
        retries: int = 2,
        backoff: float = 2.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.retries = retries
        self.backoff = backoff
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=False,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "User-Agent": USER_AGENT,
            "Accept": ACCEPT,
            "Accept-Language": ACCEPT_LANGUAGE,
            "Accept-Encoding": "identity",
            "Referer": self.base_url,
        }

    async def fetch_page(self, url: str, retries: Optional[int] = None) -> str:
        """Fetch ``url`` and return the response body as text.

        Args:
            url: Absolute URL to fetch.
            retries: Retry budget for transport failures (default: ``self.retries``).

        Returns:
            The decoded HTML body.

        Raises:
            FetchError: On a non-2xx/3xx status, too many redirects, or when
                the retry budget is exhausted.
        """
        budget = self.retries if retries is None else retries
        current = url
        for _hop in range(MAX_REDIRECTS + 1):
            response = await self._get_with_retries(current, budget)
            status = response.status_code
            location = response.headers.get("location")
            if 300 <= status < 400 and location:
                current = to_abs_url(location, self.base_url)
                logger.debug("Redirect %s -> %s", response.url, current)
                continue
            if not 200 <= status < 300:
                raise FetchError(current, status=status)
            return response.text
        raise FetchError(url, reason="too many redirects")

    async def _get_with_retries(self, url: str, retries: int) -> httpx.Response:
        remaining = retries
        while True:
            try:
                return await self._client.get(url, headers=self.headers)
            except httpx.TransportError as exc:
                timed_out = isinstance(exc, httpx.TimeoutException)
                if remaining <= 0:
                    raise FetchError(url, timeout=timed_out, reason=str(exc) or type(exc).__name__) from exc
                logger.warning(
                    "Fetching %s failed (%s), retrying in %.1fs (%d left)",
                    url,
                    type(exc).__name__,
                    self.backoff,
                    remaining,
                )
                remaining -= 1
                await asyncio.sleep(self.backoff)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PageFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
