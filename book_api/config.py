"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env
file as a fallback. Values are read once, when the application factory builds
its Settings object, and stay constant for the lifetime of the process.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Usage:
    from book_api.config import Settings
    settings = Settings()
    app = create_app(settings)

The settings object is attached to ``app.state.settings`` by create_app();
request handlers reach it through dependencies, never through a module-level
global.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the Book API.

    Required fields (no defaults) MUST be set in .env or environment:
      - SECRET_KEY: Used to sign JWT tokens. Rotating it invalidates every
        token issued so far.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Book Management API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # --- HTTP ---
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    # Every API route is mounted below this prefix ("" mounts at the root)
    API_PREFIX: str = "/api"

    # --- Database ---
    # SQLite for local use; point at another async driver URL for production
    DATABASE_URL: str = "sqlite+aiosqlite:///./books.db"

    # --- Authentication ---
    # REQUIRED: No default, forces the operator to set a real secret
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    # Tokens are stateless: a deleted or downgraded user keeps a working
    # token (with the old role) until it expires. Keep this window in mind
    # when choosing the value. Default is 7 days.
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Argon2 time cost (iterations). Raise it to make brute force slower.
    PASSWORD_HASH_TIME_COST: int = 3

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    # "json" for production log shipping, "console" for local development
    LOG_FORMAT: str = "console"
