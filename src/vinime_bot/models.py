"""
Data models for vinime-bot.

Defines the pydantic records produced by the extractors and stored in the
catalog.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field


class ListItem(BaseModel):
    """One anime as shown on a listing page."""

    title: str
    last_episode_label: str = ""
    url: str
    cover_url: str = ""


class EpisodeRef(BaseModel):
    """Pointer to an episode page; video info is fetched on demand."""

    label: str
    url: str


class AnimeDetail(BaseModel):
    """Parsed anime detail page."""

    title: str = ""
    synopsis: str = ""
    rating: str = ""
    status: str = ""
    release_date: str = ""
    type: str = ""
    genres: List[str] = Field(default_factory=list)
    episodes: List[EpisodeRef] = Field(default_factory=list)
    cover_url: str = ""
    studio: str = ""
    duration_label: str = ""
    total_episode_label: str = ""


class StreamEntry(BaseModel):
    """A candidate video source for an episode.

    Direct entries carry ``direct_link``; embedded mirrors carry the decoded
    ``embed_payload`` instead.
    """

    resolution: str
    direct_link: Optional[str] = None
    provider_label: str = ""
    is_embedded_mirror: bool = False
    embed_payload: Optional[Dict[str, Any]] = None


class VideoInfo(BaseModel):
    """All stream candidates found on an episode page."""

    streams: List[StreamEntry] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def available_resolutions(self) -> List[str]:
        return sorted({s.resolution for s in self.streams if s.resolution})


class CatalogEntry(BaseModel):
    """Durable catalog record keyed by ``url``."""

    title: str
    url: str
    cover_url: str = ""

    def to_list_item(self) -> ListItem:
        return ListItem(title=self.title, url=self.url, cover_url=self.cover_url)


class GenreRef(BaseModel):
    name: str
    slug: str


class GenreAnimeItem(BaseModel):
    """Row of a genre-filtered listing."""

    title: str
    url: str
    rating: str = "-"
    status: str = ""
    cover_url: str = ""


class GenrePage(BaseModel):
    items: List[GenreAnimeItem] = Field(default_factory=list)
    current_page: int = 1
    total_pages: int = 1
