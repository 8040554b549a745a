"""
Pydantic schemas for API responses.

Scraper records are returned as the vinime_bot models themselves; only
envelopes live here.
"""
from datetime import datetime
from typing import List

from pydantic import BaseModel

from vinime_bot.models import CatalogEntry


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    timestamp: datetime
    version: str


class CatalogPageResponse(BaseModel):
    """One page of the A-Z catalog."""

    items: List[CatalogEntry]
    total: int
    page: int
    page_size: int
    has_next: bool
