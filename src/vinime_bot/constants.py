"""
Constants used throughout the vinime-bot application.

This module centralizes all magic numbers and configuration constants
to improve maintainability and make the code more self-documenting.
"""

# HTTP profile
USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
ACCEPT: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
ACCEPT_LANGUAGE: str = "id-ID,id;q=0.9,en-US;q=0.8,en;q=0.7"
MAX_REDIRECTS: int = 10

# Site paths
HOME_PATH: str = "/"
RECOMMENDED_PATH: str = "/rekomendasi/"
MOVIE_PATH: str = "/category/movie/"
ANIME_LIST_PATH: str = "/anime-list/"
GENRE_LIST_PATH: str = "/genre-list/"
ADMIN_AJAX_PATH: str = "/wp-admin/admin-ajax.php"
EPISODE_PATH_MARKER: str = "/episode/"

# admin-ajax actions used to turn a mirror payload into an embed iframe
NONCE_ACTION: str = "aa1208d27f29ca340c92c66d1926f13f"
EMBED_ACTION: str = "2a3505c93b0035d3f455df82bf976b84"

# Catalog
SEED_KEYWORDS: tuple = ("naruto", "one piece", "bleach", "dragon ball", "fairy tail")
RECOMMENDED_FALLBACK_SIZE: int = 20
LINK_REGISTRY_SIZE: int = 5000

# UI Constants
PER_PAGE: int = 5
AZ_PER_PAGE: int = 10
MAX_TITLE_LENGTH: int = 40
MAX_EPISODE_BUTTONS: int = 20
EPISODES_PER_ROW: int = 4
GENRES_PER_ROW: int = 3
SYNOPSIS_MAX_LENGTH: int = 500
MAX_CAPTION_LENGTH: int = 1024
MAX_LINK_LINES: int = 10

# Download/Upload Constants
PREFERRED_QUALITIES: tuple = ("720p", "480p", "360p", "1080p")
DOWNLOAD_CHUNK_SIZE: int = 1024 * 1024
CLEANUP_INTERVAL_SECONDS: int = 3600
