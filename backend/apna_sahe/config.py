"""
Apna SAHE Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
       Missing platform credentials are reported before the first request.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.

Environment variable names match the ones the deployed Node server used
(PORT, ADMIN_EMAIL, FIREBASE_SERVICE_ACCOUNT_JSON, CLOUDINARY_*), so an
existing deployment can switch without touching its environment.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern for readability.
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5050, ge=1, le=65535)

    # What: Controls verbosity of application logging
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── CORS ──────────────────────────────────────────────────────────────
    # What: Allowed origins for cross-origin requests
    # Format: Comma-separated URLs, or "*" for any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Authorization ─────────────────────────────────────────────────────
    # What: Email address that is always treated as an administrator
    # Empty means administrators are recognised by their user document role only
    admin_email: str = Field(default="")

    @field_validator("admin_email")
    @classmethod
    def normalize_admin_email(cls, v: str) -> str:
        return v.strip().lower()

    # What: Only addresses in this domain may register or sign in
    allowed_email_domain: str = Field(default="@vrsec.ac.in")

    # ── Firebase ──────────────────────────────────────────────────────────
    # Credential precedence: JSON blob → file path → application default credentials
    firebase_service_account_json: Optional[str] = Field(default=None)
    firebase_service_account_path: Optional[str] = Field(default=None)

    # What: Cloud Storage bucket holding notes uploaded before the media host
    # migration (documents that carry `filePath` instead of `cloudinaryPublicId`)
    firebase_storage_bucket: Optional[str] = Field(default=None)

    # What: Web API key for the Identity Toolkit REST API (password sign-in)
    # Why needed: The Admin SDK cannot verify passwords
    firebase_web_api_key: str = Field(default="")
    identity_toolkit_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
    )
    auth_request_timeout: float = Field(default=10.0, gt=0, le=60)

    # ── Cloudinary ────────────────────────────────────────────────────────
    cloudinary_cloud_name: str = Field(default="")
    cloudinary_api_key: str = Field(default="")
    cloudinary_api_secret: str = Field(default="")

    # ── Uploads ───────────────────────────────────────────────────────────
    # Default: 10MB = 10 * 1024 * 1024 = 10485760
    max_file_size: int = Field(default=10_485_760, ge=1_048_576, le=52_428_800)

    # What: Largest JSON request body accepted (express.json limit of the old server)
    max_json_body_size: int = Field(default=1_048_576, ge=1024)

    # ── Points ────────────────────────────────────────────────────────────
    points_per_note: int = Field(default=10, ge=0, le=1000)
    leaderboard_default_limit: int = Field(default=10, ge=1, le=100)

    # ── Retry Configuration ───────────────────────────────────────────────
    # What: Tenacity retry settings for media host and auth provider calls
    retry_max_attempts: int = Field(default=3, ge=1, le=10)
    retry_min_wait: int = Field(default=1, ge=0, le=30)
    retry_max_wait: int = Field(default=8, ge=1, le=120)

    # ── Rate Limiting ─────────────────────────────────────────────────────
    rate_limit_requests: int = Field(default=300, ge=10, le=10000)
    rate_limit_window: int = Field(default=900, ge=60, le=86400)  # seconds

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that the media host credentials are configured.
        When:  Called during app startup (lifespan).
        Why:   Without them note uploads and file deletion cannot work at all.
        """
        missing = [
            name.upper()
            for name in ("cloudinary_cloud_name", "cloudinary_api_key", "cloudinary_api_secret")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                "Configuration validation failed:\n"
                f"  - {', '.join(missing)} must be set "
                "(CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, and CLOUDINARY_API_SECRET are required)"
            )


# Singleton instance, imported throughout the application
settings = Settings()
