"""
Configuration management for the web server.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..providers.enums import Provider


DATA_DIR = Path(__file__).resolve().parents[2] / "data"


class Settings(BaseSettings):
    """
    Application settings with environment variable support.
    Uses pydantic-settings for automatic env var loading and validation.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="WRITECOACH_",
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "WriteCoach"
    environment: str = "production"
    version: str = "1.0.0"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Store settings
    store_backend: str = "redis"  # redis | memory (memory = single instance only)
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="WRITECOACH_REDIS_URL")
    redis_max_connections: int = 200
    redis_socket_timeout: float = 2.0
    redis_health_check_interval: int = 30

    # Provider credentials (comma-separated, tried in order)
    gemini_api_keys: str = Field(default="", validation_alias="GEMINI_API_KEYS")
    openrouter_api_keys: str = Field(default="", validation_alias="OPENROUTER_API_KEYS")
    github_models_api_keys: str = Field(default="", validation_alias="GITHUB_MODELS_API_KEYS")

    # Provider request settings
    provider_timeout: float = 30.0
    provider_temperature: float = 0.7
    provider_max_tokens: int = 4096
    app_url: str = "http://localhost:8000"
    app_title: str = "WriteCoach"

    # Catalogue files
    provider_config_file: str = str(DATA_DIR / "providers.yaml")
    certificates_file: str = str(DATA_DIR / "certificates.yaml")

    # Circuit breaker
    failure_threshold: int = 3
    failure_window_seconds: int = 60

    # Response cache
    cache_ttl_seconds: int = 86400

    # User blocks
    user_block_ttl_seconds: int = 60

    # Visitor counter
    visitor_fingerprint_ttl_seconds: int = 60 * 60 * 24 * 30

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_main: str = "10/minute"
    rate_limit_burst: str = "3/10 seconds"
    rate_limit_storage_uri: Optional[str] = None  # defaults to the store backend

    # Submissions
    max_submission_length: int = 10000

    # Logging settings
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = "text"  # json or text

    # CORS settings
    cors_origins: str = "*"  # Comma-separated list

    def get_api_keys(self, provider: Provider) -> List[str]:
        """Configured credentials for a provider, in order."""
        raw = {
            Provider.PRIMARY: self.gemini_api_keys,
            Provider.SECONDARY: self.openrouter_api_keys,
            Provider.TERTIARY: self.github_models_api_keys,
        }[provider]
        return [key.strip() for key in raw.split(",") if key.strip()]

    def uses_memory_store(self) -> bool:
        return self.store_backend.lower() == "memory"

    def get_rate_limit_storage_uri(self) -> str:
        """`limits` storage for rate-limit counters; follows store_backend unless set."""
        if self.rate_limit_storage_uri:
            return self.rate_limit_storage_uri
        if self.uses_memory_store():
            return "async+memory://"
        return f"async+{self.redis_url}"

    def get_cors_origins(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

