"""
FastAPI application entry point.

Creates and configures the FastAPI application with all routes,
middleware, and exception handlers.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vinime_bot import __version__
from vinime_bot.logging_config import configure_logging
from vinime_bot.services import build_services, close_services

from .config import api_settings
from .routes import anime, genres, health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the services on startup, flush and close them on shutdown."""
    logger.info("Starting API server...")
    services = build_services(api_settings)
    services.catalog.load()
    app.state.services = services
    seed_task = None
    if api_settings.seed_on_startup:
        seed_task = asyncio.ensure_future(
            services.catalog.seed_later(services.api, api_settings.seed_start_delay_seconds)
        )
    yield
    logger.info("Shutting down API server...")
    if seed_task is not None:
        seed_task.cancel()
    await close_services(services)


# Create FastAPI application
app = FastAPI(
    title="Vinime API",
    description="REST API for browsing otakudesu anime through the vinime-bot scraper",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=api_settings.cors_origin_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "status_code": 500},
    )


# Include routers
app.include_router(health.router)
app.include_router(anime.router)
app.include_router(genres.router)


def run_server() -> None:
    """Run the API server using uvicorn."""
    import uvicorn

    configure_logging(api_settings)
    uvicorn.run(
        "vinime_api.main:app",
        host=api_settings.api_host,
        port=api_settings.api_port,
        reload=False,
        log_level=api_settings.log_level.lower(),
    )


if __name__ == "__main__":
    run_server()
