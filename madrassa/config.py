"""
Application Configuration
=============================================================================
CONCEPT: pydantic-settings (BaseSettings)
Instead of reading os.environ manually, we define a typed class that:
  1. Reads from .env file automatically
  2. Validates types (str, int, bool) at startup
  3. Fails fast if a value has the wrong type

The permission matrix is NOT configuration. It is fixed in code
(madrassa/auth/rbac.py) and reviewed like any other code change. These
settings only cover the HTTP service around it.
=============================================================================
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    All application settings loaded from environment variables / .env file.

    HOW IT WORKS:
    - Each field maps to an environment variable (case-insensitive)
    - Field `jwt_secret_key` reads env var `JWT_SECRET_KEY`
    - Default values are used if the env var is not set
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- JWT ---
    # Tokens are issued by the session provider; this service only verifies
    # them and reads the "role" claim.
    jwt_secret_key: str = "change-me-to-a-random-secret-key"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60

    # --- HTTP ---
    cors_allow_origins: list[str] = ["*"]

    # --- App ---
    app_name: str = "MyMadrassa Access Control"
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"


# Singleton instance, import this everywhere
settings = Settings()
