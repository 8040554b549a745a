"""
HTML extractors for otakudesu pages.

Each ``parse_*`` function turns one page template into records and returns an
:class:`Extraction`. The site renders the same kind of page with different
markup across sections, so every list extractor tries a primary selector set
and falls back to alternates when it finds nothing. Any exception raised while
parsing is logged and turned into an empty extraction; nothing here raises to
the caller.
"""
import base64
import functools
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Sequence, Tuple, TypeVar

from bs4 import BeautifulSoup, Tag

from .constants import EPISODE_PATH_MARKER
from .errors import DecodeError, ParseError
from .models import (
    AnimeDetail,
    CatalogEntry,
    EpisodeRef,
    GenreAnimeItem,
    GenrePage,
    GenreRef,
    ListItem,
    StreamEntry,
    VideoInfo,
)
from .utils import genre_slug, to_abs_url

logger = logging.getLogger(__name__)

T = TypeVar("T")

RESOLUTION_RE = re.compile(r"(\d{3,4}p)", re.I)
MIRROR_CLASS_RE = re.compile(r"\bm(\d{3,4}p)\b", re.I)
STATUS_PREFIX_RE = re.compile(r".*Status\s*:\s*", re.I | re.S)
SYNOPSIS_PREFIX_RE = re.compile(r"^Sinopsis\s*:\s*", re.I)

# Detail field -> info-block labels, tried in order.
DETAIL_FIELD_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "rating": ("skor", "rating", "score"),
    "status": ("status",),
    "release_date": ("tanggal rilis", "published", "rilis", "released"),
    "type": ("tipe", "type"),
    "studio": ("studio",),
    "duration_label": ("durasi", "duration"),
    "total_episode_label": ("total episode", "episodes"),
}
GENRE_LABELS = ("genre", "genres")


@dataclass
class Extraction(Generic[T]):
    """Tagged extractor result: either records or empty with a reason."""

    value: Optional[T] = None
    reason: str = ""
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, value: T) -> "Extraction[T]":
        return cls(value=value)

    @classmethod
    def empty(cls, reason: str = "no records", error: Optional[BaseException] = None) -> "Extraction[T]":
        return cls(value=None, reason=reason, error=error)

    @property
    def is_empty(self) -> bool:
        return self.value is None

    def unwrap_or(self, default: T) -> T:
        return default if self.value is None else self.value


def extractor(name: str) -> Callable[[Callable[..., Any]], Callable[..., Extraction]]:
    """Wrap a parse function so it always returns an :class:`Extraction`.

    Exceptions are logged and become ``Extraction.empty``; a ``None`` or empty
    list result becomes ``Extraction.empty("no records")``.
    """

    def decorate(func: Callable[..., Any]) -> Callable[..., Extraction]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Extraction:
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                logger.warning("[%s] discarded page: %s", name, exc, exc_info=True)
                return Extraction.empty(f"parse failed: {exc}", error=exc)
            if result is None or (isinstance(result, list) and not result):
                logger.debug("[%s] no records", name)
                return Extraction.empty()
            return Extraction.ok(result)

        return wrapper

    return decorate


# ─── shared helpers ─────────────────────────────────────────────────────────


def _soup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup or "", "html.parser")


def _text(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return " ".join(node.get_text(" ").split())


def _first_text(root: Tag, selector: str) -> str:
    return _text(root.select_one(selector))


def _img_src(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return (node.get("src") or node.get("data-src") or "").strip()


def _href(node: Optional[Tag]) -> str:
    if node is None:
        return ""
    return (node.get("href") or "").strip()


def _first_non_empty(strategies: Sequence[Callable[[], List[T]]]) -> List[T]:
    for strategy in strategies:
        records = strategy()
        if records:
            return records
    return []


def _venz_items(soup: BeautifulSoup, origin: str) -> List[ListItem]:
    items = []
    for li in soup.select(".venz ul li"):
        title = _first_text(li, ".jdlflm")
        url = to_abs_url(_href(li.select_one(".thumb a")), origin)
        if title and url:
            items.append(ListItem(
                title=title,
                last_episode_label=_first_text(li, ".epz"),
                url=url,
                cover_url=_img_src(li.select_one(".thumb img")),
            ))
    return items


def _detpost_items(soup: BeautifulSoup, origin: str) -> List[ListItem]:
    items = []
    for post in soup.select(".detpost"):
        title = _first_text(post, ".jdlflm")
        url = to_abs_url(_href(post.select_one("a")), origin)
        if title and url:
            items.append(ListItem(
                title=title,
                last_episode_label=_first_text(post, ".epz"),
                url=url,
                cover_url=_img_src(post.select_one("img")),
            ))
    return items


def _card_items(soup: BeautifulSoup, origin: str, selector: str, label: Callable[[Tag], str]) -> List[ListItem]:
    items = []
    for li in soup.select(selector):
        anchor = li.select_one("h2 a")
        title = _text(anchor)
        url = to_abs_url(_href(anchor), origin)
        if title and url:
            items.append(ListItem(
                title=title,
                last_episode_label=label(li),
                url=url,
                cover_url=_img_src(li.select_one("img")),
            ))
    return items


def _first_set_text(li: Tag) -> str:
    return _first_text(li, ".set")


def _status_text(li: Tag) -> str:
    status = ""
    for node in li.select(".set"):
        text = _text(node)
        if "Status" in text:
            status = STATUS_PREFIX_RE.sub("", text).strip()
    return status


# ─── list pages ─────────────────────────────────────────────────────────────


@extractor("latest")
def parse_latest(markup: str, origin: str) -> List[ListItem]:
    soup = _soup(markup)
    return _first_non_empty([
        lambda: _venz_items(soup, origin),
        lambda: _detpost_items(soup, origin),
    ])


@extractor("recommended")
def parse_recommended(markup: str, origin: str) -> List[ListItem]:
    soup = _soup(markup)
    return _first_non_empty([
        lambda: _venz_items(soup, origin),
        lambda: _detpost_items(soup, origin),
    ])


@extractor("movies")
def parse_movies(markup: str, origin: str) -> List[ListItem]:
    soup = _soup(markup)
    return _first_non_empty([
        lambda: _card_items(soup, origin, ".chivsrc li, .venser .col li", _first_set_text),
        lambda: _detpost_items(soup, origin),
    ])


@extractor("search")
def parse_search_results(markup: str, origin: str) -> List[ListItem]:
    soup = _soup(markup)
    return _first_non_empty([
        lambda: _card_items(soup, origin, ".chivsrc li", _status_text),
        lambda: _venz_items(soup, origin),
    ])


@extractor("anime-index")
def parse_anime_index(markup: str, origin: str) -> List[CatalogEntry]:
    """Full A-Z listing used to seed the catalog."""
    soup = _soup(markup)

    def collect(selector: str) -> List[CatalogEntry]:
        entries = []
        for anchor in soup.select(selector):
            title = _text(anchor)
            url = to_abs_url(_href(anchor), origin)
            if title and url:
                entries.append(CatalogEntry(title=title, url=url))
        return entries

    return _first_non_empty([
        lambda: collect(".daftarkartun .hodebgst"),
        lambda: collect("#abtext .jdlbar a"),
    ])


# ─── detail page ────────────────────────────────────────────────────────────


def parse_info_block(soup: BeautifulSoup) -> Dict[str, str]:
    """Map lower-cased ``label`` to trimmed ``value`` for ``label: value`` lines."""
    info: Dict[str, str] = {}
    for p in soup.select(".infozingle p"):
        text = _text(p)
        if ":" not in text:
            continue
        label, value = text.split(":", 1)
        info[" ".join(label.lower().split())] = value.strip()
    return info


def lookup_field(info: Mapping[str, str], labels: Sequence[str]) -> str:
    for label in labels:
        value = info.get(label)
        if value:
            return value
    return ""


def _genres(soup: BeautifulSoup, info: Mapping[str, str]) -> List[str]:
    for p in soup.select(".infozingle p"):
        text = _text(p)
        if ":" not in text:
            continue
        label = text.split(":", 1)[0].strip().lower()
        if label not in GENRE_LABELS:
            continue
        anchors = [_text(a) for a in p.select("a")]
        if any(anchors):
            return [name for name in anchors if name]
    raw = lookup_field(info, GENRE_LABELS)
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_episode_refs(soup: BeautifulSoup, origin: str) -> List[EpisodeRef]:
    """Episode links from every ``.episodelist`` block, batch links dropped."""
    episodes: List[EpisodeRef] = []
    seen = set()
    for block in soup.select(".episodelist"):
        for anchor in block.select("ul li a"):
            href = _href(anchor)
            label = _text(anchor)
            if EPISODE_PATH_MARKER not in href or not label:
                continue
            url = to_abs_url(href, origin)
            if url in seen:
                continue
            seen.add(url)
            episodes.append(EpisodeRef(label=label, url=url))
    return episodes


@extractor("detail")
def parse_detail(
    markup: str,
    origin: str,
    synonyms: Mapping[str, Sequence[str]] = DETAIL_FIELD_SYNONYMS,
) -> AnimeDetail:
    soup = _soup(markup)
    info = parse_info_block(soup)
    title = _first_text(soup, ".jdlrx h1") or _first_text(soup, "h1.entry-title") or info.get("judul", "")
    if not title and not info:
        raise ParseError("no detail title or info block")

    cover = ""
    for selector in (".fotoanime img", ".thumbpic img", ".venser img", "img.wp-post-image"):
        cover = _img_src(soup.select_one(selector))
        if cover:
            break

    fields = {field: lookup_field(info, labels) for field, labels in synonyms.items()}
    return AnimeDetail(
        title=title,
        synopsis=SYNOPSIS_PREFIX_RE.sub("", _first_text(soup, ".sinopc")).strip(),
        genres=_genres(soup, info),
        episodes=parse_episode_refs(soup, origin),
        cover_url=cover,
        **fields,
    )


# ─── episode page ───────────────────────────────────────────────────────────


def decode_embed_payload(data: str) -> Dict[str, Any]:
    """Decode a ``data-content`` attribute (base64 of a JSON object).

    Raises:
        DecodeError: If the value is not base64, not UTF-8 JSON, or not an object.
    """
    try:
        data = data.strip()
        raw = base64.b64decode(data + "=" * (-len(data) % 4), validate=True)
        decoded = json.loads(raw.decode("utf-8"))
    except ValueError as exc:
        raise DecodeError(f"invalid mirror payload: {exc}") from exc
    if not isinstance(decoded, dict):
        raise DecodeError("mirror payload is not a JSON object")
    return decoded


def _direct_streams(soup: BeautifulSoup) -> List[StreamEntry]:
    streams = []
    for li in soup.select(".download ul li"):
        match = RESOLUTION_RE.search(_first_text(li, "strong"))
        if not match:
            continue
        resolution = match.group(1).lower()
        for anchor in li.select("a"):
            link = _href(anchor)
            if link.startswith("http"):
                streams.append(StreamEntry(
                    resolution=resolution,
                    direct_link=link,
                    provider_label=_text(anchor),
                ))
    return streams


def _mirror_streams(soup: BeautifulSoup) -> List[StreamEntry]:
    streams = []
    for ul in soup.select(".mirrorstream ul"):
        match = MIRROR_CLASS_RE.search(" ".join(ul.get("class") or []))
        if not match:
            continue
        resolution = match.group(1).lower()
        for anchor in ul.select("li a[data-content]"):
            try:
                payload = decode_embed_payload(anchor.get("data-content") or "")
            except DecodeError as exc:
                logger.debug("Skipping %s mirror %r: %s", resolution, _text(anchor), exc)
                continue
            streams.append(StreamEntry(
                resolution=resolution,
                provider_label=_text(anchor),
                is_embedded_mirror=True,
                embed_payload=payload,
            ))
    return streams


@extractor("video")
def parse_video(markup: str) -> VideoInfo:
    """Stream candidates of an episode page.

    Direct download links win; embedded mirrors are only read when the page
    has no direct links. The two are never mixed.
    """
    soup = _soup(markup)
    streams = _direct_streams(soup) or _mirror_streams(soup)
    return VideoInfo(streams=streams)


# ─── genres ─────────────────────────────────────────────────────────────────


@extractor("genre-list")
def parse_genre_list(markup: str) -> List[GenreRef]:
    soup = _soup(markup)

    def collect(selector: str) -> List[GenreRef]:
        genres: Dict[str, GenreRef] = {}
        for anchor in soup.select(selector):
            name = _text(anchor)
            slug = genre_slug(_href(anchor))
            if name and slug and slug not in genres:
                genres[slug] = GenreRef(name=name, slug=slug)
        return list(genres.values())

    genres = _first_non_empty([
        lambda: collect("ul.genres li a, .genres_wrap li a, .lx li a, .genre-list li a"),
        lambda: collect('a[href*="/genres/"]'),
    ])
    return sorted(genres, key=lambda g: g.name.casefold())


def _genre_cards(soup: BeautifulSoup, origin: str) -> List[GenreAnimeItem]:
    items = []
    for card in soup.select(".col-anime-con"):
        anchor = card.select_one(".col-anime-title a")
        title = _text(anchor)
        url = to_abs_url(_href(anchor), origin)
        if title and url:
            items.append(GenreAnimeItem(
                title=title,
                url=url,
                rating=_first_text(card, ".col-anime-rating") or "-",
                status=_first_text(card, ".col-anime-eps"),
                cover_url=_img_src(card.select_one(".col-anime-cover img")),
            ))
    return items


def _genre_venz(soup: BeautifulSoup, origin: str) -> List[GenreAnimeItem]:
    return [
        GenreAnimeItem(title=i.title, url=i.url, status=i.last_episode_label, cover_url=i.cover_url)
        for i in _venz_items(soup, origin)
    ]


def parse_total_pages(soup: BeautifulSoup) -> int:
    """Highest page number in the pager, 1 when there is no pager."""
    numbers = []
    for node in soup.select(".pagenavix .page-numbers"):
        text = _text(node).replace(".", "").replace(",", "")
        if text.isdigit():
            numbers.append(int(text))
    return max(numbers) if numbers else 1


@extractor("genre-page")
def parse_genre_page(markup: str, origin: str, page: int = 1) -> GenrePage:
    soup = _soup(markup)
    items = _first_non_empty([
        lambda: _genre_cards(soup, origin),
        lambda: _genre_venz(soup, origin),
    ])
    return GenrePage(items=items, current_page=page, total_pages=parse_total_pages(soup))
