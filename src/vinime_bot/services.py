"""
Service container shared by the bot handlers and the REST API.
"""
import logging
from dataclasses import dataclass

from .anime_api import OtakudesuClient
from .catalog import CatalogStore
from .config import Settings
from .fetcher import PageFetcher
from .links import LinkRegistry
from .media import MediaRelay

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    fetcher: PageFetcher
    catalog: CatalogStore
    api: OtakudesuClient
    links: LinkRegistry
    relay: MediaRelay


def build_services(settings: Settings) -> Services:
    """Wire the scraper, catalog, link registry and media relay from settings.

    The catalog is not loaded here; callers decide when to read it from disk.
    """
    fetcher = PageFetcher(
        settings.base_url,
        timeout=settings.request_timeout_seconds,
        retries=settings.request_retries,
        backoff=settings.retry_backoff_seconds,
    )
    catalog = CatalogStore(
        settings.catalog_file,
        debounce_seconds=settings.catalog_debounce_seconds,
        seed_threshold=settings.catalog_seed_threshold,
        seed_search_delay=settings.seed_search_delay_seconds,
    )
    relay = MediaRelay(
        settings.download_dir,
        referer=fetcher.base_url,
        timeout=settings.download_timeout_seconds,
    )
    return Services(
        settings=settings,
        fetcher=fetcher,
        catalog=catalog,
        api=OtakudesuClient(fetcher, catalog),
        links=LinkRegistry(),
        relay=relay,
    )


async def close_services(services: Services) -> None:
    """Flush the catalog and close HTTP clients."""
    try:
        await services.catalog.flush()
    finally:
        await services.api.aclose()
        await services.relay.aclose()
    logger.info("Services closed")
