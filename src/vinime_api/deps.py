"""
FastAPI dependencies.
"""
from fastapi import Depends, Request

from vinime_bot.anime_api import OtakudesuClient
from vinime_bot.services import Services


def get_services(request: Request) -> Services:
    """
    Dependency that provides the services built by the app lifespan.

    Usage:
        @router.get("/items")
        async def get_items(services: Services = Depends(get_services)):
            ...
    """
    return request.app.state.services


def get_client(services: Services = Depends(get_services)) -> OtakudesuClient:
    return services.api
