"""
Client settings and explicit proxy configuration.

Connection values are read once from ``SIMPLIFYQA_*`` environment variables or
a ``.env`` file and validated by pydantic. Proxy routing is an explicit
:class:`ProxyConfig` value handed to the client rather than a lookup of global
host state at request time.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at the first request
    - **Environment-driven:** Reads from env vars and .env files
    - **No hidden globals:** Proxy settings are passed in, never looked up

Examples:
    >>> from simplifyqa.core.settings import ClientSettings
    >>> settings = ClientSettings(api_url="https://qa.example.com", api_key="k",
    ...                           proxy_host="proxy.local", proxy_port=3128)
    >>> settings.proxy_config().url
    'http://proxy.local:3128'

Tags:
    settings, configuration, pydantic, environment, proxy, simplifyqa

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from simplifyqa.core.errors import MissingConfigError

if TYPE_CHECKING:
    from simplifyqa.execution.client import ExecutionClient

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ProxyConfig:
    """Outbound HTTP proxy at ``host:port``."""

    host: str
    port: int

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class ClientSettings(BaseSettings):
    """SimplifyQA client configuration.

    All fields can be set via ``SIMPLIFYQA_*`` environment variables (e.g.
    ``SIMPLIFYQA_API_URL``) or a ``.env`` file.

    Fields
    ──────
    api_url                : Base URL of the pipeline-execution API
    api_key                : Bearer token sent with every request
    proxy_host / proxy_port: Outbound HTTP proxy, used only when both are set
    poll_budget_seconds    : Wall-clock ceiling for status polling retries
    retry_delay_seconds    : Sleep between retries on HTTP 500
    request_timeout        : Per-request timeout in seconds
    watch_interval_seconds : Delay between polls while watching a run
    log_level / log_format : structlog level and renderer (console or json)
    """

    model_config = SettingsConfigDict(
        env_prefix="SIMPLIFYQA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── API ──────────────────────────────────────────────────────
    api_url: str | None = None
    api_key: SecretStr | None = None

    # ── Proxy ────────────────────────────────────────────────────
    proxy_host: str | None = None
    proxy_port: int | None = Field(default=None, ge=1, le=65535)

    # ── Polling ──────────────────────────────────────────────────
    poll_budget_seconds: float = Field(default=60.0, gt=0)
    retry_delay_seconds: float = Field(default=5.0, ge=0)
    request_timeout: float = Field(default=30.0, gt=0)
    watch_interval_seconds: float = Field(default=10.0, ge=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "console"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize to an upper-case stdlib level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {v!r}")
        return level

    def proxy_config(self) -> ProxyConfig | None:
        """Return the proxy when both host and port are configured."""
        if self.proxy_host and self.proxy_port:
            return ProxyConfig(host=self.proxy_host, port=self.proxy_port)
        return None

    def build_client(self) -> ExecutionClient:
        """Create an :class:`ExecutionClient` from these settings.

        Raises:
            MissingConfigError: if ``api_url`` or ``api_key`` is unset
        """
        from simplifyqa.execution.client import ExecutionClient
        from simplifyqa.execution.retry import DeadlineRetry

        if not self.api_url:
            raise MissingConfigError("api_url", "Missing required config: SIMPLIFYQA_API_URL")
        if self.api_key is None or not self.api_key.get_secret_value():
            raise MissingConfigError("api_key", "Missing required config: SIMPLIFYQA_API_KEY")

        return ExecutionClient(
            self.api_url,
            self.api_key.get_secret_value(),
            proxy=self.proxy_config(),
            retry_policy=DeadlineRetry(
                max_duration=self.poll_budget_seconds,
                delay=self.retry_delay_seconds,
            ),
            timeout=self.request_timeout,
        )


__all__ = [
    "ProxyConfig",
    "ClientSettings",
]
