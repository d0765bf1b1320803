"""All settings, loaded from the .env file."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_url: str = "http://localhost:8000"
    database_url: str = "sqlite:///./outreach.db"

    # Timing engine
    business_timezone: str = "UTC"  # IANA zone used for day-of-week / hour math
    timing_tables_path: str = ""  # optional JSON override for keywords + call windows

    # Sessions
    default_session_limit: int = 200

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
