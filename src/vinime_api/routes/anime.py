"""
Anime routes.

Expose the scraper listings, search, detail, video links and the A-Z
catalog.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from vinime_bot.anime_api import OtakudesuClient
from vinime_bot.models import AnimeDetail, ListItem, VideoInfo

from ..deps import get_client
from ..schemas import CatalogPageResponse


router = APIRouter(prefix="/anime", tags=["Anime"])


@router.get("/latest", response_model=List[ListItem])
async def latest(api: OtakudesuClient = Depends(get_client)) -> List[ListItem]:
    """Latest ongoing episodes."""
    return await api.get_latest()


@router.get("/recommended", response_model=List[ListItem])
async def recommended(api: OtakudesuClient = Depends(get_client)) -> List[ListItem]:
    return await api.get_recommended()


@router.get("/movies", response_model=List[ListItem])
async def movies(api: OtakudesuClient = Depends(get_client)) -> List[ListItem]:
    return await api.get_movies()


@router.get("/search", response_model=List[ListItem])
async def search(
    q: str = Query(..., min_length=1, description="Anime title query"),
    api: OtakudesuClient = Depends(get_client),
) -> List[ListItem]:
    """
    Search anime by title.

    Every result is also added to the A-Z catalog.
    """
    return await api.search_anime(q)


@router.get("/detail", response_model=AnimeDetail)
async def detail(
    url: str = Query(..., min_length=1, description="Anime page URL or path"),
    api: OtakudesuClient = Depends(get_client),
) -> AnimeDetail:
    result = await api.get_detail(url)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Anime detail not available")
    return result


@router.get("/video", response_model=VideoInfo)
async def video(
    url: str = Query(..., min_length=1, description="Episode page URL or path"),
    api: OtakudesuClient = Depends(get_client),
) -> VideoInfo:
    """
    Stream candidates for an episode.

    Returns:
        VideoInfo; ``streams`` is empty when the page has no video yet.
    """
    result = await api.get_video(url)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Episode not available")
    return result


@router.get("/az", response_model=CatalogPageResponse)
async def catalog_az(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=500, description="Items per page"),
    api: OtakudesuClient = Depends(get_client),
) -> CatalogPageResponse:
    """
    Known anime in title order, paginated.

    Args:
        page: Page number (1-indexed).
        page_size: Number of items per page.
    """
    entries = api.get_all_anime_az()
    offset = (page - 1) * page_size
    items = entries[offset:offset + page_size]
    return CatalogPageResponse(
        items=items,
        total=len(entries),
        page=page,
        page_size=page_size,
        has_next=offset + page_size < len(entries),
    )
