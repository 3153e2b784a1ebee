"""Configuration objects for infrastructure layer following DDD principles."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SERVER = "nats://localhost:4222"


class NATSConnectionConfig(BaseModel):
    """Strongly-typed configuration for NATS connections.

    This configuration object encapsulates all connection-related settings,
    providing type safety and validation for transport initialization.
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        strict=True,
        validate_assignment=True,
    )

    # Connection settings
    servers: list[str] = Field(
        default_factory=lambda: [DEFAULT_SERVER],
        min_length=1,
        description="List of NATS server URLs",
    )
    name: str | None = Field(
        default=None,
        description="Client name reported to the server",
    )
    max_reconnect_attempts: int = Field(
        default=10,
        ge=-1,
        description="Maximum reconnection attempts (-1 for unlimited)",
    )
    reconnect_time_wait: float = Field(
        default=2.0,
        gt=0,
        description="Time to wait between reconnection attempts in seconds",
    )
    connect_timeout: float = Field(
        default=2.0,
        gt=0,
        description="Timeout for establishing the connection in seconds",
    )
    request_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Default timeout for request/reply in seconds",
    )

    # JetStream settings
    js_domain: str | None = Field(
        default=None,
        description="JetStream domain for multi-tenancy",
    )

    @field_validator("servers")
    @classmethod
    def validate_servers(cls, v: list[str]) -> list[str]:
        """Validate server URLs format."""
        for server in v:
            if not server.startswith(("nats://", "tls://", "ws://", "wss://")):
                raise ValueError(
                    f"Invalid server URL: {server}. "
                    "Must start with nats://, tls://, ws://, or wss://"
                )
        return v

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> NATSConnectionConfig:
        """Build a config from ``NATS_URL`` and ``NATS_JS_DOMAIN``.

        ``NATS_URL`` may hold several comma-separated servers. Explicit
        keyword overrides win over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        url = env.get("NATS_URL", "").strip()
        if url:
            values["servers"] = [s.strip() for s in url.split(",") if s.strip()]
        domain = env.get("NATS_JS_DOMAIN", "").strip()
        if domain:
            values["js_domain"] = domain
        values.update(overrides)
        return cls(**values)

    def to_connection_params(self) -> dict[str, Any]:
        """Convert to parameters for NATS connection."""
        params: dict[str, Any] = {
            "servers": self.servers,
            "max_reconnect_attempts": self.max_reconnect_attempts,
            "reconnect_time_wait": self.reconnect_time_wait,
            "connect_timeout": self.connect_timeout,
        }
        if self.name:
            params["name"] = self.name
        return params


class LogContext(BaseModel):
    """Strongly-typed context for structured logging.

    Provides a consistent way to pass context information to loggers,
    ensuring all relevant metadata is captured for debugging.
    """

    model_config = ConfigDict(
        extra="allow",
        str_strip_whitespace=True,
        strict=False,
        validate_assignment=True,
    )

    component: str | None = Field(default=None, description="Component generating the log")
    operation: str | None = Field(default=None, description="Current operation")
    subject: str | None = Field(default=None, description="Subject involved")
    stream: str | None = Field(default=None, description="Stream involved")
    consumer: str | None = Field(default=None, description="Consumer involved")
    error_code: str | None = Field(default=None, description="Structured error code")
    error_type: str | None = Field(default=None, description="Type of error encountered")
    duration_ms: float | None = Field(default=None, ge=0, description="Duration in milliseconds")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging frameworks."""
        return {k: v for k, v in self.model_dump().items() if v is not None}

    def with_error(self, error: Exception) -> LogContext:
        """Create a new context with error information."""
        return LogContext(
            **{
                **self.model_dump(),
                "error_code": error.__class__.__name__,
                "error_type": type(error).__module__ + "." + type(error).__name__,
            }
        )

    def with_operation(self, operation: str, component: str | None = None) -> LogContext:
        """Create a new context with operation information."""
        return LogContext(
            **{
                **self.model_dump(),
                "operation": operation,
                "component": component or self.component,
            }
        )
