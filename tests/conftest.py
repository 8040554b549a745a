"""Shared test fixtures for the vinime-bot test suite."""
from typing import List

import pytest
import pytest_asyncio

from vinime_bot.anime_api import OtakudesuClient
from vinime_bot.catalog import CatalogStore
from vinime_bot.fetcher import PageFetcher
from vinime_bot.models import CatalogEntry, ListItem

BASE_URL = "https://otakudesu.cloud"


class FakeSource:
    """In-memory stand-in for the scraper during catalog seeding."""

    def __init__(self, index: List[CatalogEntry] = None, search: dict = None, fail: bool = False):
        self.index = index or []
        self.search = search or {}
        self.fail = fail
        self.index_calls = 0
        self.search_calls: List[str] = []

    async def fetch_anime_index(self) -> List[CatalogEntry]:
        self.index_calls += 1
        if self.fail:
            raise RuntimeError("index down")
        return list(self.index)

    async def search_anime(self, query: str) -> List[ListItem]:
        self.search_calls.append(query)
        return list(self.search.get(query, []))


@pytest.fixture()
def catalog_path(tmp_path):
    return tmp_path / "data" / "anime_catalog.json"


@pytest.fixture()
def catalog(catalog_path) -> CatalogStore:
    return CatalogStore(
        catalog_path,
        debounce_seconds=0.05,
        seed_threshold=3,
        seed_keywords=("naruto", "bleach"),
        seed_search_delay=0,
    )


@pytest_asyncio.fixture()
async def fetcher():
    fetcher = PageFetcher(BASE_URL, timeout=5, retries=2, backoff=0)
    yield fetcher
    await fetcher.aclose()


@pytest_asyncio.fixture()
async def client(fetcher, catalog):
    api = OtakudesuClient(fetcher, catalog)
    yield api
    await catalog.flush()
