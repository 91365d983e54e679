"""
Supabase client factory.

Two kinds of clients:
- the shared service-role client for table and storage access
- one anon-key auth client per signed-in principal, so that a session held
  by one principal never leaks into requests made for another
"""

import logging
from functools import lru_cache

from supabase import create_client, Client
from supabase.lib.client_options import ClientOptions

from collabhub.config.settings import get_settings
from collabhub.infrastructure.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


def _client_options() -> ClientOptions:
    settings = get_settings()
    return ClientOptions(
        postgrest_client_timeout=settings.postgrest_client_timeout,
        storage_client_timeout=settings.storage_client_timeout,
    )


@lru_cache
def get_supabase_client() -> Client:
    """Get the shared service-role Supabase client."""
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise ConfigurationError(
            "Missing Supabase configuration",
            missing_keys=["SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"],
        )
    logger.info("Initializing Supabase service client")
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
        _client_options(),
    )


def create_auth_client() -> Client:
    """Create a fresh client for one principal's credential operations."""
    settings = get_settings()
    key = settings.supabase_anon_key or settings.supabase_service_role_key
    if not settings.supabase_url or not key:
        raise ConfigurationError(
            "Missing Supabase configuration",
            missing_keys=["SUPABASE_URL", "SUPABASE_ANON_KEY"],
        )
    return create_client(settings.supabase_url, key, _client_options())
