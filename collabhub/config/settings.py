"""
Application Settings for CollabHub

Centralized configuration using Pydantic Settings with .env support.
All environment variables are validated at startup.
"""

from functools import lru_cache
from typing import Optional
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    VERIFICATION_CODES_SINGLE_USE controls whether a college verification
    code is consumed by its first successful redemption:
    - false: shared classroom code, valid for everyone until it expires
    - true: the code row is deleted after one successful verification
    """

    # Supabase Configuration
    supabase_url: str
    supabase_anon_key: Optional[str] = None
    supabase_service_role_key: str
    supabase_jwt_secret: Optional[str] = None
    supabase_jwks_enabled: bool = True

    # Client timeouts (seconds), passed straight to supabase ClientOptions
    postgrest_client_timeout: int = 10
    storage_client_timeout: int = 30

    # Application Settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # CORS Configuration
    frontend_url: str = "http://localhost:5173"
    allowed_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    # OAuth redirect target after provider login
    oauth_redirect_url: Optional[str] = None

    # College verification
    verification_code_ttl_hours: int = 24
    verification_code_length: int = 6
    verification_codes_single_use: bool = False

    # User-facing notices kept per signed-in principal
    max_notices: int = 50

    # Live client contexts: idle ones are evicted, the least recently used go
    # first once the cap is reached
    context_idle_timeout_seconds: int = 1800
    max_contexts: int = 1000

    # Storage buckets
    resume_bucket: str = "resumes"
    portfolio_bucket: str = "portfolios"
    project_files_bucket: str = "projects"

    # Database Configuration (Alembic migrations only)
    supabase_password: Optional[str] = None
    database_url: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_verification_settings(self) -> "Settings":
        """Reject verification and context settings that cannot work."""
        if self.verification_code_length < 4:
            raise ValueError("VERIFICATION_CODE_LENGTH must be at least 4")
        if self.verification_code_ttl_hours <= 0:
            raise ValueError("VERIFICATION_CODE_TTL_HOURS must be positive")
        if self.context_idle_timeout_seconds <= 0 or self.max_contexts <= 0:
            raise ValueError("CONTEXT_IDLE_TIMEOUT_SECONDS and MAX_CONTEXTS must be positive")
        if self.oauth_redirect_url is None:
            self.oauth_redirect_url = f"{self.frontend_url}/dashboard"
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience export for direct import
settings = get_settings()
