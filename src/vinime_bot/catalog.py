"""
Catalog store for vinime-bot.

Keeps every anime seen by the scraper in a URL-keyed map, persists it as a
JSON array with debounced writes, and seeds itself from the A-Z page (or a
handful of searches) while it is still sparse.
"""
import asyncio
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Union

from pydantic import ValidationError

from .constants import SEED_KEYWORDS
from .models import CatalogEntry, ListItem
from .utils import collation_key

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class CatalogSource(Protocol):
    """What seeding needs from the scraper."""

    async def fetch_anime_index(self) -> List[CatalogEntry]: ...

    async def search_anime(self, query: str) -> List[ListItem]: ...


class CatalogStore:
    """Deduplicated, disk-backed catalog of known anime.

    All mutation happens synchronously on the event loop thread, so cancelling
    and rescheduling the pending flush is a single critical section. File
    writes run in the default executor; ``_write_lock`` and the snapshot
    version keep an older snapshot from replacing a newer one.

    Args:
        path: JSON file holding the catalog.
        debounce_seconds: Quiet period before a scheduled write runs.
        seed_threshold: Seeding is skipped once the catalog has this many entries.
        seed_keywords: Search terms used when the A-Z page yields nothing.
        seed_search_delay: Pause after each seed search.
    """

    def __init__(
        self,
        path: PathLike,
        debounce_seconds: float = 5.0,
        seed_threshold: int = 50,
        seed_keywords: Sequence[str] = SEED_KEYWORDS,
        seed_search_delay: float = 1.5,
    ) -> None:
        self.path = Path(path)
        self.debounce_seconds = debounce_seconds
        self.seed_threshold = seed_threshold
        self.seed_keywords = tuple(seed_keywords)
        self.seed_search_delay = seed_search_delay
        self.state = "uninitialized"

        self._entries: Dict[str, CatalogEntry] = {}
        self._pending_flush: Optional[asyncio.Task] = None
        self._seed_lock = asyncio.Lock()
        self._write_lock = threading.Lock()
        self._version = 0
        self._written_version = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def get(self, url: str) -> Optional[CatalogEntry]:
        return self._entries.get(url)

    # ── lifecycle ──────────────────────────────────────────────────────────

    def load(self) -> int:
        """Load persisted entries; a missing or invalid file means an empty start.

        Returns:
            Number of entries loaded.
        """
        self._entries.clear()
        self.state = "loaded"
        if not self.path.exists():
            logger.info("[catalog] %s not found, starting empty", self.path)
            return 0
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("[catalog] Could not read %s: %s", self.path, exc)
            return 0
        if not isinstance(data, list):
            logger.warning("[catalog] %s is not a JSON array, starting empty", self.path)
            return 0

        skipped = 0
        for raw in data:
            try:
                entry = CatalogEntry.model_validate(raw)
            except ValidationError:
                skipped += 1
                continue
            if entry.url:
                self._entries[entry.url] = entry
        if skipped:
            logger.warning("[catalog] Skipped %d malformed entries", skipped)
        logger.info("[catalog] Loaded %d entries", len(self._entries))
        return len(self._entries)

    # ── mutation ───────────────────────────────────────────────────────────

    def upsert_many(self, items: Iterable[Any]) -> int:
        """Insert or overwrite the catalog projection of ``items``.

        Items need ``title``, ``url`` and optionally ``cover_url``; items
        missing a title or URL are ignored.

        Returns:
            Number of URLs that were not in the catalog before.
        """
        added = 0
        for item in items:
            title = getattr(item, "title", "")
            url = getattr(item, "url", "")
            if not (title and url):
                continue
            if url not in self._entries:
                added += 1
            self._entries[url] = CatalogEntry(title=title, url=url, cover_url=getattr(item, "cover_url", "") or "")
        self.state = "active"
        if added > 0:
            self._version += 1
            self.persist()
        return added

    def persist(self) -> None:
        """Schedule a debounced write, or write now when no loop is running."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.save()
            return
        if self._pending_flush is not None and not self._pending_flush.done():
            self._pending_flush.cancel()
        self._pending_flush = loop.create_task(self._debounced_flush())

    async def _debounced_flush(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        # From here on a new mutation schedules a fresh task instead of
        # cancelling this write.
        self._pending_flush = None
        await self._write_async()

    async def flush(self) -> None:
        """Write pending changes now, cancelling any scheduled write."""
        if self._pending_flush is not None and not self._pending_flush.done():
            self._pending_flush.cancel()
        self._pending_flush = None
        if self._version > self._written_version:
            await self._write_async()

    def save(self) -> None:
        """Synchronously write the catalog."""
        self._write(self._snapshot(), self._version)

    async def _write_async(self) -> None:
        loop = asyncio.get_running_loop()
        snapshot, version = self._snapshot(), self._version
        try:
            await loop.run_in_executor(None, self._write, snapshot, version)
        except OSError:
            logger.exception("[catalog] Save error")

    def _snapshot(self) -> str:
        return json.dumps([e.model_dump() for e in self._entries.values()], ensure_ascii=False, indent=2)

    def _write(self, snapshot: str, version: int) -> None:
        with self._write_lock:
            if version < self._written_version:
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".catalog-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(snapshot)
                os.replace(tmp_path, self.path)
            except OSError:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
            self._written_version = version
        logger.debug("[catalog] Saved %s (version %d)", self.path, version)

    # ── queries ────────────────────────────────────────────────────────────

    def list_all_sorted_by_title(self) -> List[CatalogEntry]:
        """All entries in accent- and case-insensitive title order.

        Equal keys keep insertion order.
        """
        return sorted(self._entries.values(), key=lambda e: collation_key(e.title))

    def top(self, n: int) -> List[CatalogEntry]:
        return self.list_all_sorted_by_title()[:n]

    # ── seeding ────────────────────────────────────────────────────────────

    def is_sparse(self) -> bool:
        return len(self._entries) < self.seed_threshold

    async def seed_if_sparse(self, source: CatalogSource) -> int:
        """Populate a sparse catalog from the A-Z page or seed searches.

        Best effort and safe to call repeatedly.

        Returns:
            Number of entries added.
        """
        if not self.is_sparse():
            return 0
        async with self._seed_lock:
            if not self.is_sparse():
                return 0
            before = len(self._entries)
            logger.info("[catalog] Seeding from anime-list...")
            try:
                entries = await source.fetch_anime_index()
            except Exception:
                logger.exception("[catalog] Seed error")
                entries = []
            if entries:
                self.upsert_many(entries)
                logger.info("[catalog] Seeded %d entries from anime-list", len(entries))
            else:
                await self._seed_from_search(source)
            return len(self._entries) - before

    async def _seed_from_search(self, source: CatalogSource) -> None:
        for keyword in self.seed_keywords:
            try:
                results = await source.search_anime(keyword)
            except Exception:
                logger.exception("[catalog] Seed search %r failed", keyword)
                results = []
            self.upsert_many(results)
            logger.info('[catalog] Seed "%s": +%d', keyword, len(results))
            await asyncio.sleep(self.seed_search_delay)

    async def seed_later(self, source: CatalogSource, delay: float) -> int:
        """Sleep ``delay`` seconds, then seed if still sparse."""
        await asyncio.sleep(delay)
        return await self.seed_if_sparse(source)
