"""Configuration settings for the application."""
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from dotenv import load_dotenv

# Ensure .env values are loaded into os.environ before settings are built.
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Content store (read-only)
    sanity_project_id: str = Field(..., alias="SANITY_PROJECT_ID")
    sanity_dataset: str = Field(default="production", alias="SANITY_DATASET")
    sanity_api_version: str = Field(default="2024-01-01", alias="SANITY_API_VERSION")
    sanity_use_cdn: bool = Field(default=True, alias="SANITY_USE_CDN")
    # Content store request timeout in seconds
    request_timeout: float = Field(default=10.0, alias="REQUEST_TIMEOUT")
    # Window in seconds during which identical requests share one network call
    dedupe_interval: float = Field(default=2.0, alias="DEDUPE_INTERVAL")
    search_dedupe_interval: float = Field(default=1.0, alias="SEARCH_DEDUPE_INTERVAL")
    # Search behaviour
    search_min_length: int = Field(default=2, alias="SEARCH_MIN_LENGTH")
    search_debounce_ms: int = Field(default=300, alias="SEARCH_DEBOUNCE_MS")
    # Client-scoped storage
    favorites_storage_key: str = Field(default="product-favorites", alias="FAVORITES_STORAGE_KEY")
    database_url: str = Field(default="sqlite:///./storefront.db", alias="DATABASE_URL")
    cors_origins: List[str] = Field(default=["*"], alias="CORS_ORIGINS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    project_name: str = "Storefront Catalog"
    api_version: str = "v1"
    
    @field_validator("sanity_project_id")
    @classmethod
    def validate_project_id(cls, v):
        if not v or not v.strip():
            raise ValueError("Missing required environment variable: SANITY_PROJECT_ID")
        return v.strip()
    
    class Config:
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True


settings = Settings()
