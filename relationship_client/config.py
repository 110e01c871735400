"""
Configuration settings for the Relationship Client
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Relationship Client"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Remote relationship API
    API_BASE_URL: str = "http://localhost:8080/api"
    REQUEST_TIMEOUT: float = 30.0
    CONNECT_TIMEOUT: float = 5.0
    HTTP_RETRIES: int = 0  # Connection-level retries, handled by the transport

    # Redis (for caching relationship lists)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 2
    REDIS_PASSWORD: str = ""
    REDIS_ENABLED: bool = False

    # Cache keys and TTL (seconds)
    CACHE_KEY_PREFIX: str = "relationships"
    CACHE_TTL_CONNECTIONS: int = 300  # 5 minutes
    CACHE_TTL_FOLLOWS: int = 300  # 5 minutes
    CACHE_TTL_BLOCKS: int = 60  # 1 minute

    # Pagination
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
