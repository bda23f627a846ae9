"""Configuration and environment settings for the import review client."""

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PAGE_SIZE = 50
MAX_UPLOAD_BYTES = 50 * 1024 * 1024


class Settings(BaseSettings):
    """Application settings for the import review client."""

    api_base_url: str = "http://localhost:5000"
    api_token: str | None = None
    request_timeout: float = 30.0
    page_size: int = DEFAULT_PAGE_SIZE
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    allowed_extensions: list[str] = [".ofx", ".qfx"]
    workspace_key: str | None = None
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
