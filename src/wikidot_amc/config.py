"""Centralized configuration for the AMC client using Pydantic Settings."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AMCConfig(BaseSettings):
    """Strictly typed AMC pipeline configuration.

    Values are read from ``WIKIDOT_AMC_*`` environment variables (and an optional
    ``.env`` file); keyword arguments passed to the constructor take precedence.
    All durations are in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="WIKIDOT_AMC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # HTTP/Request settings
    timeout: float = Field(default=20.0, gt=0, description="Timeout for a single HTTP exchange in seconds")
    retry_limit: int = Field(default=3, ge=1, description="Maximum delivery attempts per logical request")
    retry_interval: float = Field(default=1.0, ge=0, description="Base backoff interval in seconds")
    backoff_factor: float = Field(default=2.0, ge=1.0, description="Multiplicative backoff factor")
    max_backoff: float = Field(default=60.0, ge=0, description="Upper bound for a single backoff delay in seconds")
    semaphore_limit: int = Field(default=10, ge=1, description="Maximum concurrent HTTP exchanges per client")
    fallback_status_code: int = Field(
        default=999,
        description="Status code reported by AMCHttpError when the transport failure carried no HTTP status",
    )

    # Remote platform
    domain: str = Field(default="wikidot.com", min_length=1, description="Base domain shared by all subsites")
    user_agent: str = Field(default="wikidot-amc", min_length=1, description="User-Agent sent with every request")
    referer: str = Field(default="https://www.wikidot.com/", min_length=1, description="Referer sent with every request")

    @model_validator(mode="after")
    def _check_backoff_bounds(self) -> "AMCConfig":
        if self.max_backoff < self.retry_interval:
            raise ValueError(
                f"max_backoff ({self.max_backoff}) must not be smaller than retry_interval ({self.retry_interval})"
            )
        return self

    def base_url(self, site_name: str, ssl_supported: bool) -> str:
        """Build the origin URL of a subsite."""
        protocol = "https" if ssl_supported else "http"
        return f"{protocol}://{site_name}.{self.domain}"

    def amc_url(self, site_name: str, ssl_supported: bool) -> str:
        """Build the ajax-module-connector endpoint URL of a subsite."""
        return f"{self.base_url(site_name, ssl_supported)}/ajax-module-connector.php"
