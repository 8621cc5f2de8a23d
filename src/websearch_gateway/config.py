"""Configuration module using pydantic-settings for type-safe env variable loading."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Uses pydantic-settings for type-safe configuration with validation.
    Automatically loads from .env file if present.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Upstream Search Configuration
    search_endpoint: str = Field(
        default="https://html.duckduckgo.com/html/?q={query}",
        description="HTML-only search endpoint; '{query}' is replaced by the encoded terms",
    )
    search_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        description="Browser User-Agent sent to the upstream endpoint",
    )
    search_timeout: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Hard limit in seconds for one upstream fetch, redirects included",
    )
    search_max_redirects: int = Field(
        default=1,
        ge=0,
        le=10,
        description="Maximum number of redirect hops followed per upstream fetch",
    )
    default_max_results: int = Field(
        default=5,
        ge=1,
        description="Number of results returned when the request does not say",
    )

    # Cache Configuration
    cache_max_size: int = Field(
        default=100,
        ge=1,
        description="Maximum number of cached result sets",
    )
    cache_ttl_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Time-to-live for cached result sets in seconds",
    )

    # Rate Limit Configuration
    rate_limit_window_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Length of the sliding rate-limit window in seconds",
    )
    rate_limit_max_requests: int = Field(
        default=10,
        ge=1,
        description="Requests admitted per client inside one window",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # API Server Configuration
    api_host: str = Field(default="127.0.0.1", description="Host the HTTP server binds to")
    api_port: int = Field(default=8000, ge=1, le=65535, description="Port the HTTP server binds to")
    enable_cors: bool = Field(
        default=False,
        description="Allow cross-origin requests from localhost frontends",
    )


# Global settings instance
settings = Settings()
