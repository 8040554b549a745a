"""
Otakudesu scraper client for vinime-bot.

Provides the async operations the bot and the REST API call: listings,
search, detail, video links, the A-Z catalog and genres. Every list-shaped
result is fed into the catalog store.
"""
import base64
import logging
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup

from .catalog import CatalogStore
from .constants import (
    ADMIN_AJAX_PATH,
    ANIME_LIST_PATH,
    EMBED_ACTION,
    HOME_PATH,
    MOVIE_PATH,
    NONCE_ACTION,
    RECOMMENDED_FALLBACK_SIZE,
    RECOMMENDED_PATH,
)
from .errors import FetchError
from .extractors import (
    Extraction,
    parse_anime_index,
    parse_detail,
    parse_latest,
    parse_movies,
    parse_recommended,
    parse_search_results,
    parse_video,
)
from .fetcher import PageFetcher
from .genres import GenreBrowser
from .models import AnimeDetail, CatalogEntry, GenrePage, GenreRef, ListItem, VideoInfo
from .utils import to_abs_url

logger = logging.getLogger(__name__)


class OtakudesuClient:
    """Async scraper for the otakudesu catalog site.

    Args:
        fetcher: Page fetcher bound to the site origin.
        catalog: Catalog store fed with every listing result.
        genres: Optional genre browser (built from ``fetcher`` and ``catalog``
            when omitted).
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        catalog: CatalogStore,
        genres: Optional[GenreBrowser] = None,
    ) -> None:
        self.fetcher = fetcher
        self.catalog = catalog
        self.genres = genres or GenreBrowser(fetcher, catalog)

    @property
    def base_url(self) -> str:
        return self.fetcher.base_url

    def absolute(self, url_or_path: str) -> str:
        return to_abs_url(url_or_path, self.base_url)

    async def _fetch(self, url: str, name: str) -> Optional[str]:
        try:
            return await self.fetcher.fetch_page(url)
        except FetchError as exc:
            logger.error("[%s] %s", name, exc)
            return None

    async def _listing(
        self,
        url: str,
        name: str,
        parser: Callable[[str, str], Extraction],
    ) -> List[ListItem]:
        html = await self._fetch(url, name)
        if html is None:
            return []
        items = parser(html, self.base_url).unwrap_or([])
        self.catalog.upsert_many(items)
        return items

    async def get_latest(self) -> List[ListItem]:
        """Latest ongoing episodes from the home page."""
        return await self._listing(self.base_url + HOME_PATH, "getLatest", parse_latest)

    async def get_recommended(self) -> List[ListItem]:
        """Recommended anime.

        Falls back to the first catalog entries, then to :meth:`get_latest`,
        when the recommendation page yields nothing.
        """
        items = await self._listing(self.base_url + RECOMMENDED_PATH, "getRecommended", parse_recommended)
        if items:
            return items
        fallback = self.catalog.top(RECOMMENDED_FALLBACK_SIZE)
        if fallback:
            return [entry.to_list_item() for entry in fallback]
        return await self.get_latest()

    async def get_movies(self) -> List[ListItem]:
        """Movie listing."""
        return await self._listing(self.base_url + MOVIE_PATH, "getMovies", parse_movies)

    async def search_anime(self, query: str) -> List[ListItem]:
        """Search anime by title.

        Args:
            query: Free-text title query.

        Returns:
            Matching list items, with the status as ``last_episode_label``.
        """
        url = f"{self.base_url}/?s={quote(query, safe='')}&post_type=anime"
        return await self._listing(url, "searchAnime", parse_search_results)

    async def get_detail(self, url_or_path: str) -> Optional[AnimeDetail]:
        """Anime detail page.

        Args:
            url_or_path: Full URL or path such as ``/anime/naruto-sub-indo/``.

        Returns:
            The parsed detail, or None when the page is missing or malformed.
        """
        html = await self._fetch(self.absolute(url_or_path), "getDetail")
        if html is None:
            return None
        return parse_detail(html, self.base_url).value

    async def get_video(self, url_or_path: str) -> Optional[VideoInfo]:
        """Stream candidates for an episode page.

        Args:
            url_or_path: Full episode URL or path.

        Returns:
            VideoInfo (possibly with no streams), or None when the page could
            not be fetched or parsed.
        """
        html = await self._fetch(self.absolute(url_or_path), "getVideo")
        if html is None:
            return None
        return parse_video(html).value

    def get_all_anime_az(self) -> List[CatalogEntry]:
        """Whole catalog in title order."""
        return self.catalog.list_all_sorted_by_title()

    async def get_genre_list(self) -> List[GenreRef]:
        return await self.genres.list_genres()

    async def get_anime_by_genre(self, slug: str, page: int = 1) -> GenrePage:
        return await self.genres.list_by_genre(slug, page)

    async def fetch_anime_index(self) -> List[CatalogEntry]:
        """Entries of the full A-Z page (used for seeding)."""
        html = await self._fetch(self.base_url + ANIME_LIST_PATH, "animeIndex")
        if html is None:
            return []
        return parse_anime_index(html, self.base_url).unwrap_or([])

    async def seed_catalog(self) -> int:
        return await self.catalog.seed_if_sparse(self)

    async def resolve_mirror(self, embed_payload: Dict[str, Any]) -> Optional[str]:
        """Turn an embedded-mirror payload into its player iframe URL.

        The site hands out a nonce first, then answers the payload plus nonce
        with base64 HTML containing the iframe.

        Args:
            embed_payload: Decoded ``data-content`` of a mirror anchor.

        Returns:
            The iframe ``src``, or None if any step fails.
        """
        ajax_url = self.base_url + ADMIN_AJAX_PATH
        client: httpx.AsyncClient = self.fetcher.client
        try:
            res = await client.post(ajax_url, data={"action": NONCE_ACTION}, headers=self.fetcher.headers)
            res.raise_for_status()
            nonce = res.json().get("data")
            if not nonce:
                logger.warning("[resolveMirror] No nonce returned")
                return None

            payload = dict(embed_payload)
            payload["nonce"] = nonce
            payload["action"] = EMBED_ACTION
            res = await client.post(ajax_url, data=payload, headers=self.fetcher.headers)
            res.raise_for_status()
            embed_data = res.json().get("data")
            if not embed_data:
                return None
            embed_html = base64.b64decode(embed_data).decode("utf-8")
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            logger.error("[resolveMirror] %s", exc)
            return None

        iframe = BeautifulSoup(embed_html, "html.parser").find("iframe")
        if iframe and iframe.get("src"):
            return iframe["src"]
        return None

    async def aclose(self) -> None:
        await self.fetcher.aclose()
