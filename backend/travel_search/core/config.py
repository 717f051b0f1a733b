"""
Core configuration module for the Travel Product Search service.
Settings are read from environment variables (or .env) with sane defaults.
"""

from pydantic_settings import BaseSettings
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Defaults run against a local SQLite file; point database_url at
    PostgreSQL for production.
    """

    # Application
    app_name: str = "Travel Product Search"
    app_version: str = "1.0.0"
    environment: str = "production"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./travel_search.db"
    database_pool_size: int = 20
    database_max_overflow: int = 40
    database_pool_recycle: int = 1800  # Recycle connections after 30 min
    database_pool_pre_ping: bool = True
    database_pool_timeout: int = 10  # Seconds to wait for a pooled connection
    database_connect_timeout: int = 5  # Seconds
    database_statement_timeout_ms: int = 5000

    # Search
    default_product_type: str = "esim"
    search_term_max_length: int = 255

    # API Configuration
    api_prefix: str = "/api/v1"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 4

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # text | json

    # CORS
    cors_origins: list = ["http://localhost:3000", "http://127.0.0.1:3000"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list = ["GET", "POST", "OPTIONS"]
    cors_allow_headers: list = ["Content-Type", "Accept", "X-API-Key"]

    # Admin API key for the analytics endpoint (MUST be set via .env in production)
    admin_api_key: str = "CHANGE-ME-IN-DOTENV"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
