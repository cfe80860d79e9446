from functools import lru_cache

from pydantic import BaseModel

from app.shared.config import config


class AppEnvironConfig(BaseModel):
    DEBUG: bool = (config.get("DEBUG") or "false").strip().lower() == "true"

    # Database configuration
    DB_LABEL: str = (config.get("DB_LABEL") or "").strip() or "default"
    # Echo every SQL statement through the debug query logger
    DB_ECHO: bool = (config.get("DB_ECHO") or "false").strip().lower() == "true"
    DB_POOL_SIZE: int = int((config.get("DB_POOL_SIZE") or "").strip() or 5)

    # Listing defaults used when a caller omits the direction token
    DEFAULT_STREAM_ORDER: str = (config.get("DEFAULT_STREAM_ORDER") or "").strip() or "desc"
    DEFAULT_USER_ORDER: str = (config.get("DEFAULT_USER_ORDER") or "").strip() or "asc"


@lru_cache
def get_app_environ_config() -> AppEnvironConfig:
    return AppEnvironConfig()
