"""
CredenSuite settings, read from the environment and an optional ``.env`` file.

List-valued settings are kept as plain strings (``*_STR``) and exposed parsed
through properties, so they can be set as one environment variable.
"""
import json
from typing import Any, List

from pydantic_settings import BaseSettings


def parse_cors_origins(v: Any) -> List[str]:
    """Origins from a JSON array or a comma separated string"""
    if isinstance(v, (list, tuple)):
        return [str(origin) for origin in v]
    if not isinstance(v, str):
        return []
    text = v.strip()
    if text.startswith("["):
        try:
            return [str(origin) for origin in json.loads(text)]
        except json.JSONDecodeError:
            text = text.strip("[]")
    return [part.strip().strip("\"'") for part in text.split(",") if part.strip()]


def parse_browser_args(v: str) -> List[str]:
    """Chromium launch flags separated by whitespace"""
    return v.split() if v else []


class Settings(BaseSettings):
    APP_NAME: str = "CredenSuite"
    ENVIRONMENT: str = "development"  # development | testing | production
    DEBUG: bool = True
    API_VERSION: str = "v1"
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 5000

    # --- storage ---
    DATABASE_URL: str = "sqlite+aiosqlite:///./credensuite.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    UPLOADS_DIR: str = "uploads"

    # --- http ---
    CORS_ORIGINS_STR: str = "http://localhost:5173,http://127.0.0.1:5173"
    MAX_REQUEST_SIZE: int = 10 * 1024 * 1024
    RATE_LIMIT_ENABLED: bool = True
    PDF_RATE_LIMIT: str = "30/minute"

    # --- logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"  # empty disables the file handler
    LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_FILE_BACKUP_COUNT: int = 5

    # --- members and badges ---
    MEMBER_ID_PREFIX: str = "ORG"
    PDF_RENDER_TIMEOUT_SECONDS: float = 15.0
    PDF_CARD_WIDTH: str = "2.125in"
    PDF_CARD_HEIGHT: str = "3.375in"
    PDF_BROWSER_ARGS_STR: str = "--no-sandbox --disable-setuid-sandbox"

    # --- activity feed ---
    ACTIVITY_FEED_DEFAULT_LIMIT: int = 10
    ACTIVITY_FEED_MAX_LIMIT: int = 25

    # --- organization defaults, used once to seed the settings row ---
    DEFAULT_ORGANIZATION_NAME: str = "Hope Foundation NGO"
    DEFAULT_ORGANIZATION_PHONE: str = "(555) 123-4567"
    DEFAULT_ORGANIZATION_EMAIL: str = "info@hopefoundation.org"
    DEFAULT_ORGANIZATION_ADDRESS: str = "123 Main Street, City, State 12345"
    DEFAULT_ORGANIZATION_WEBSITE: str = "https://hopefoundation.org"
    DEFAULT_QR_CODE_PATTERN: str = "https://verify.hopefoundation.org/{id}"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    @property
    def PDF_BROWSER_ARGS(self) -> List[str]:
        return parse_browser_args(self.PDF_BROWSER_ARGS_STR)

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
