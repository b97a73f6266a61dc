"""
Runtime configuration read from environment variables (and a local .env file).
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TOKEN_SECRET = "fallback-secret-key"


class Settings(NamedTuple):
    postgres_uri: Optional[str]
    tmdb_api_key: str
    token_secret: str
    frontend_url: str
    catalog_ttl_seconds: int
    port: int


def load_settings() -> Settings:
    return Settings(
        postgres_uri=os.environ.get("POSTGRES_URI"),
        tmdb_api_key=os.environ.get("TMDB_API_KEY", ""),
        token_secret=(
            os.environ.get("TOKEN_SECRET") or os.environ.get("JWT_SECRET") or DEFAULT_TOKEN_SECRET
        ),
        frontend_url=os.environ.get("FRONTEND_URL", "http://localhost:5173"),
        catalog_ttl_seconds=int(os.environ.get("CATALOG_TTL_SECONDS", 30 * 60)),
        port=int(os.environ.get("PORT", 3001)),
    )
