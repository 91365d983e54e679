"""
Database URL resolution for CollabHub

The running API talks to Supabase through supabase-py only. A direct
PostgreSQL connection is needed for schema migrations, and this module
derives its URL from settings.
"""

import re
from typing import Optional
from urllib.parse import quote_plus

from collabhub.config.settings import Settings, get_settings
from collabhub.infrastructure.exceptions import ConfigurationError


SUPABASE_HOST_PATTERN = re.compile(r"https?://([^.]+)\.supabase\.co")


def _as_asyncpg(url: str) -> str:
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


def get_database_url(settings: Optional[Settings] = None) -> str:
    """
    Get the PostgreSQL connection URL for migrations.

    Uses DATABASE_URL if provided, otherwise derives the direct
    connection from SUPABASE_URL + SUPABASE_PASSWORD.

    Raises:
        ConfigurationError: If neither source is configured
    """
    settings = settings or get_settings()

    if settings.database_url:
        return _as_asyncpg(settings.database_url)

    if not settings.supabase_url or not settings.supabase_password:
        raise ConfigurationError(
            "Either DATABASE_URL or (SUPABASE_URL + SUPABASE_PASSWORD) is required",
            missing_keys=["DATABASE_URL", "SUPABASE_PASSWORD"],
        )

    match = SUPABASE_HOST_PATTERN.match(settings.supabase_url)
    if not match:
        raise ConfigurationError(f"Invalid SUPABASE_URL format: {settings.supabase_url}")

    project_ref = match.group(1)
    password = quote_plus(settings.supabase_password)

    # Direct database connection, not the pooler
    return (
        f"postgresql+asyncpg://postgres:{password}"
        f"@db.{project_ref}.supabase.co:5432/postgres"
    )
