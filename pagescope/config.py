"""Pydantic Settings: loads configuration from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    # Request identity sent with every fetch
    user_agent: str = "Mozilla/5.0 (compatible; WebScraper/1.0; +http://example.com)"
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"
    accept_language: str = "en-US,en;q=0.5"

    fetch_timeout: float = 10.0  # seconds
    max_content_size: int = 10 * 1024 * 1024  # 10 MB
    max_redirects: int = 10
    block_private_addresses: bool = True

    # Number of media items returned to the caller (statistics keep the full count)
    media_limit: int = 20

    persist_results: bool = False
    data_dir: str = "data"

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
