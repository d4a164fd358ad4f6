"""
StageVault configuration — all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os


class Settings:
    """Application settings from environment variables."""

    # Document store: "postgres" in deployments, "memory" for local runs
    STORE_BACKEND: str = os.environ.get("STORE_BACKEND", "postgres")
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")
    DB_POOL_MIN_SIZE: int = int(os.environ.get("DB_POOL_MIN_SIZE", "2"))
    DB_POOL_MAX_SIZE: int = int(os.environ.get("DB_POOL_MAX_SIZE", "20"))

    # R2 / S3 image storage
    R2_ENDPOINT: str = os.environ.get("R2_ENDPOINT", "")
    R2_ACCESS_KEY: str = os.environ.get("R2_ACCESS_KEY", "")
    R2_SECRET_KEY: str = os.environ.get("R2_SECRET_KEY", "")
    R2_IMAGES_BUCKET: str = os.environ.get("R2_IMAGES_BUCKET", "stagevault-images")
    R2_PUBLIC_URL: str = os.environ.get("R2_PUBLIC_URL", "https://images.stagevault.app")

    # Image upload limits
    IMAGE_MAX_SIZE_MB: int = int(os.environ.get("IMAGE_MAX_SIZE_MB", "5"))
    IMAGE_MAX_FILES: int = int(os.environ.get("IMAGE_MAX_FILES", "20"))

    # Identity provider tokens. JWKS (RS256) when a URL is set, shared secret otherwise.
    IDP_JWKS_URL: str = os.environ.get("IDP_JWKS_URL", "")
    IDP_JWT_SECRET: str = os.environ.get("IDP_JWT_SECRET", "")
    IDP_AUDIENCE: str = os.environ.get("IDP_AUDIENCE", "")
    IDP_ISSUER: str = os.environ.get("IDP_ISSUER", "")

    # Listing defaults
    ADMIN_PAGE_SIZE: int = 25
    FEED_PAGE_SIZE: int = 10

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")

    @property
    def MIGRATION_DATABASE_URL(self) -> str:
        """DATABASE_URL rewritten for the sync driver alembic runs on."""
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url.replace("postgresql+asyncpg://", "postgresql://", 1)

    @property
    def IDP_ALGORITHMS(self) -> list[str]:
        return ["RS256"] if self.IDP_JWKS_URL else ["HS256"]


# Singleton instance
settings = Settings()

# Validate required settings (skip in test mode)
_testing = os.environ.get("TESTING", "").lower() == "true"

if not _testing:
    if settings.STORE_BACKEND == "postgres" and not settings.DATABASE_URL:
        raise RuntimeError("DATABASE_URL environment variable is required")
    if not settings.IDP_JWKS_URL and not settings.IDP_JWT_SECRET:
        raise RuntimeError("IDP_JWKS_URL or IDP_JWT_SECRET environment variable is required")
    if not settings.R2_ENDPOINT:
        raise RuntimeError("R2_ENDPOINT environment variable is required")
    if not settings.R2_ACCESS_KEY:
        raise RuntimeError("R2_ACCESS_KEY environment variable is required")
    if not settings.R2_SECRET_KEY:
        raise RuntimeError("R2_SECRET_KEY environment variable is required")
