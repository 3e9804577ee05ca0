from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./inventory.db"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    API_PREFIX: str = "/api"

    # CORS
    FRONTEND_URL: Optional[str] = None

    # File upload
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB

    # Inventory rules
    LOW_STOCK_THRESHOLD: int = 10
    RECENT_ACTIVITY_DAYS: int = 30
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # "text" or "json"
    LOG_REQUEST_ID: bool = True  # Enable request ID tracking

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
