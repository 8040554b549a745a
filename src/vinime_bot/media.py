"""
Media relay for vinime-bot.

Picks a directly downloadable stream for an episode and downloads media into
the local download directory so it can be re-uploaded to Telegram. CDN links
cannot be fetched by Telegram itself, hence the relay.
"""
import logging
import os
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import httpx

from .constants import DOWNLOAD_CHUNK_SIZE, PREFERRED_QUALITIES, USER_AGENT
from .models import StreamEntry, VideoInfo
from .utils import safe_filename

logger = logging.getLogger(__name__)

PIXELDRAIN_RE = re.compile(r"pixeldrain\.com/u/([A-Za-z0-9]+)")
NOT_DIRECT_PATTERNS = (
    re.compile(r"\.html?($|\?)", re.I),
    re.compile(r"mega\.nz", re.I),
    re.compile(r"gofile\.io", re.I),
    re.compile(r"acefile\.co", re.I),
    re.compile(r"krakenfiles\.com", re.I),
)


def resolve_direct_link(link: Optional[str]) -> Optional[str]:
    """Return a URL that serves the file bytes, or None for landing pages.

    Args:
        link: Download link scraped from the episode page.

    Returns:
        The pixeldrain API URL for pixeldrain share links, ``link`` itself
        when it looks like direct media, otherwise None.
    """
    if not link:
        return None
    match = PIXELDRAIN_RE.search(link)
    if match:
        return f"https://pixeldrain.com/api/file/{match.group(1)}"
    if any(p.search(link) for p in NOT_DIRECT_PATTERNS):
        return None
    return link


def pick_direct_stream(
    video: VideoInfo,
    preferred: Sequence[str] = PREFERRED_QUALITIES,
) -> Optional[Tuple[StreamEntry, str]]:
    """Choose the first direct stream in preferred quality order.

    Returns:
        Tuple of (stream entry, resolved direct URL), or None.
    """
    available = video.available_resolutions
    order = [q for q in preferred if q in available] or list(available)
    for quality in order:
        for entry in video.streams:
            if entry.resolution != quality or entry.is_embedded_mirror:
                continue
            direct = resolve_direct_link(entry.direct_link)
            if direct:
                logger.info("Resolved: %s via %s -> %s", quality, entry.provider_label, direct[:80])
                return entry, direct
    return None


@dataclass
class DownloadResult:
    filepath: Optional[str]
    size: int
    content_type: str = ""
    success: bool = False
    too_large: bool = False
    reason: Optional[str] = None


class MediaRelay:
    """Downloads media files with a size cap.

    Args:
        download_dir: Directory for downloaded files.
        referer: Referer header sent with downloads.
        timeout: Whole-download timeout in seconds.
        client: Optional ``httpx.AsyncClient`` (not closed by us).
    """

    def __init__(
        self,
        download_dir: str,
        referer: str,
        timeout: float = 300.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.download_dir = download_dir
        self.headers = {"User-Agent": USER_AGENT, "Accept": "*/*", "Referer": referer + "/"}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout), follow_redirects=True)
        os.makedirs(download_dir, exist_ok=True)

    async def probe_size(self, url: str) -> int:
        """Content-Length from a HEAD request, 0 when unknown."""
        try:
            res = await self._client.head(url, headers=self.headers)
            return int(res.headers.get("content-length") or 0)
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("HEAD %s failed: %s", url, exc)
            return 0

    async def download(self, url: str, filename: str, max_bytes: int = 0) -> DownloadResult:
        """Stream ``url`` into ``download_dir``.

        Args:
            url: Direct media URL.
            filename: Target file name (sanitized).
            max_bytes: Abort once the file exceeds this size (0 = unlimited).

        Returns:
            DownloadResult describing the outcome; partial files are removed.
        """
        path = os.path.join(self.download_dir, safe_filename(filename))
        size = 0
        try:
            async with self._client.stream("GET", url, headers=self.headers) as res:
                if res.status_code != 200:
                    logger.error("Download error: %s for %s", res.status_code, url)
                    return DownloadResult(None, 0, reason=f"HTTP {res.status_code}")
                content_type = res.headers.get("content-type", "")
                length = int(res.headers.get("content-length") or 0)
                if max_bytes and length > max_bytes:
                    logger.info("File too large: %d > %d bytes", length, max_bytes)
                    return DownloadResult(None, length, content_type, too_large=True)
                with open(path, "wb") as fh:
                    async for chunk in res.aiter_bytes(DOWNLOAD_CHUNK_SIZE):
                        size += len(chunk)
                        if max_bytes and size > max_bytes:
                            break
                        fh.write(chunk)
        except (httpx.HTTPError, OSError, ValueError) as exc:
            logger.error("Download failed for %s: %s", url, exc)
            self._remove(path)
            return DownloadResult(None, size, reason=str(exc))

        if max_bytes and size > max_bytes:
            self._remove(path)
            return DownloadResult(None, size, content_type, too_large=True)
        return DownloadResult(path, size, content_type, success=True)

    @staticmethod
    def _remove(path: str) -> None:
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError:
            logger.exception("Failed to delete file %s", path)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
