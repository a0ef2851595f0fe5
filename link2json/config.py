from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.3"
)


class Settings(BaseSettings):
    """Application settings loaded from LINK2JSON_* environment variables or .env file."""

    app_name: str = Field(default="link2json", description="Application name")
    user_agent: Optional[str] = Field(
        default=None,
        description="User-Agent header sent on every outbound fetch; DEFAULT_USER_AGENT when unset",
    )
    cache_ttl_seconds: float = Field(
        default=30 * 60,
        gt=0,
        description="Lifetime of a cached metadata record",
    )
    cache_sweep_interval_seconds: float = Field(
        default=60 * 60,
        gt=0,
        description="How often expired cache entries are purged",
    )
    rate_limit_per_second: float = Field(
        default=1.0,
        gt=0,
        description="Token refill rate of the request limiter",
    )
    rate_limit_burst: int = Field(
        default=3,
        ge=1,
        description="Token bucket capacity",
    )
    fetch_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Timeout for outbound fetches; unset means no timeout",
    )
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="LINK2JSON_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def user_agent_is_default(self) -> bool:
        return not self.user_agent

    @property
    def effective_user_agent(self) -> str:
        return self.user_agent or DEFAULT_USER_AGENT


@lru_cache()
def get_settings() -> Settings:
    return Settings()
