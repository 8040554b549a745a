"""
Genre browsing for vinime-bot.

Lists the site's genres and pages through genre-filtered anime listings.
"""
import logging
from typing import List, Optional
from urllib.parse import quote

from .catalog import CatalogStore
from .constants import GENRE_LIST_PATH
from .errors import FetchError
from .extractors import parse_genre_list, parse_genre_page
from .fetcher import PageFetcher
from .models import GenrePage, GenreRef

logger = logging.getLogger(__name__)


class GenreBrowser:
    """Genre list and paginated genre listings.

    Args:
        fetcher: Page fetcher bound to the source site.
        catalog: Optional catalog fed with every listed anime.
    """

    def __init__(self, fetcher: PageFetcher, catalog: Optional[CatalogStore] = None) -> None:
        self.fetcher = fetcher
        self.catalog = catalog

    def genre_url(self, slug: str, page: int = 1) -> str:
        base = f"{self.fetcher.base_url}/genres/{quote(slug)}/"
        return f"{base}page/{page}/" if page > 1 else base

    async def list_genres(self) -> List[GenreRef]:
        """Genres sorted by name, one per slug."""
        try:
            html = await self.fetcher.fetch_page(self.fetcher.base_url + GENRE_LIST_PATH)
        except FetchError as exc:
            logger.error("[getGenreList] %s", exc)
            return []
        return parse_genre_list(html).unwrap_or([])

    async def list_by_genre(self, slug: str, page: int = 1) -> GenrePage:
        """One page of anime for ``slug``.

        Args:
            slug: Genre slug, e.g. ``action``.
            page: 1-based page number.

        Returns:
            The page items with the current page and total page count; an
            empty single-page result when anything fails.
        """
        page = max(1, page)
        empty = GenrePage(items=[], current_page=page, total_pages=1)
        try:
            html = await self.fetcher.fetch_page(self.genre_url(slug, page))
        except FetchError as exc:
            logger.error("[getAnimeByGenre] %s", exc)
            return empty
        result = parse_genre_page(html, self.fetcher.base_url, page=page).unwrap_or(empty)
        if self.catalog is not None and result.items:
            self.catalog.upsert_many(result.items)
        return result
