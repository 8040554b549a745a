"""
Genre routes.
"""
from typing import List

from fastapi import APIRouter, Depends, Query

from vinime_bot.anime_api import OtakudesuClient
from vinime_bot.models import GenrePage, GenreRef

from ..deps import get_client

router = APIRouter(prefix="/genres", tags=["Genres"])


@router.get("", response_model=List[GenreRef])
async def list_genres(api: OtakudesuClient = Depends(get_client)) -> List[GenreRef]:
    """All genres, sorted by name."""
    return await api.get_genre_list()


@router.get("/{slug}", response_model=GenrePage)
async def genre_page(
    slug: str,
    page: int = Query(1, ge=1, description="Page number"),
    api: OtakudesuClient = Depends(get_client),
) -> GenrePage:
    """One page of anime for the genre ``slug``."""
    return await api.get_anime_by_genre(slug, page)
