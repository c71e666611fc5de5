"""Configuration settings for the Newsster feed."""

import os
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Headlines API
    news_api_key: str = os.getenv("NEWS_API_KEY", "")
    news_api_url: str = "https://gnews.io/api/v4"
    request_timeout: float = 15.0  # seconds, per request

    # Paging
    page_size: int = 20

    # Initial filter (first category is the fallback)
    default_category: str = "general"
    default_language: str = "en"
    available_categories: list[str] = [
        "general",
        "world",
        "nation",
        "business",
        "technology",
        "entertainment",
        "sports",
        "science",
        "health",
    ]

    # Which data source backs the feed: "api" or "rss"
    feed_source: str = "api"

    # Logging
    log_level: str = "INFO"

    # Paths
    project_root: Path = Path(__file__).parent.parent.parent
    data_dir: Path = project_root / "data"
    feeds_file: Path = data_dir / "feeds.json"

    class Config:
        env_file = ".env"
        extra = "ignore"


# Global settings instance
settings = Settings()
