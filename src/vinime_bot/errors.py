"""
Exception types for vinime-bot.

Only :class:`FetchError` ever reaches callers of the scraper client;
:class:`ParseError` and :class:`DecodeError` are raised and handled inside
the extraction layer.
"""
from typing import Optional


class ScraperError(Exception):
    """Base class for scraper failures."""


class FetchError(ScraperError):
    """A page could not be downloaded.

    Raised for non-2xx responses, exhausted transport retries and timeouts.
    """

    def __init__(self, url: str, status: Optional[int] = None, timeout: bool = False, reason: str = "") -> None:
        self.url = url
        self.status = status
        self.timeout = timeout
        if status is not None:
            message = f"HTTP {status} for {url}"
        elif timeout:
            message = f"Timeout fetching {url}"
        else:
            message = f"Failed fetching {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ParseError(ScraperError):
    """Markup did not have the expected structure."""


class DecodeError(ScraperError):
    """An embedded mirror payload was not valid base64 JSON."""
