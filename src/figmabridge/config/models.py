"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (FIGMABRIDGE__SECTION__KEY)
3. Legacy environment variables (FIGMA_MCP_SERVER_URL, FIGMA_MCP_TIMEOUT, FIGMA_CACHE_TTL)
4. Project YAML (.figmabridge/config.yaml)
5. Global YAML (~/.config/figmabridge/config.yaml)
6. Built-in defaults (this file)

Environment Variable Format:
    FIGMABRIDGE__<SECTION>__<KEY>=<VALUE>

Examples:
    FIGMABRIDGE__LOGGING__LEVEL=DEBUG
    FIGMABRIDGE__SERVER__BASE_URL=http://127.0.0.1:3845
    FIGMABRIDGE__CACHE__TTL_SEC=600
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
Framework = Literal["react", "vue", "angular", "html"]
Styling = Literal["tailwind", "css-modules", "styled-components", "emotion"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        FIGMABRIDGE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every SSE frame and retry.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ServerConfig(BaseModel):
    """Remote Figma MCP server connection.

    Env vars:
        FIGMABRIDGE__SERVER__BASE_URL: Server origin (default: http://127.0.0.1:3845)
        FIGMABRIDGE__SERVER__TIMEOUT_SEC: Per-call response timeout
        FIGMABRIDGE__SERVER__RETRY_ATTEMPTS: Total attempts per call
    """

    base_url: str = Field(
        default="http://127.0.0.1:3845",
        description="Origin of the Figma desktop MCP server. Session paths are appended to it.",
    )
    sse_path: str = Field(
        default="/sse",
        description="Path of the event stream that issues session endpoints.",
    )
    timeout_sec: float = Field(
        default=30.0,
        ge=1.0,
        le=60.0,
        description="Per-call timeout covering negotiation, dispatch and the response wait.",
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total attempts per call, including the first. "
        "Backoff between attempts is min(1s * 2^(n-1), 5s).",
    )
    strict_ids: bool = Field(
        default=False,
        description="Only accept stream responses whose id echoes the request id. "
        "Off by default: the desktop server does not echo ids reliably.",
    )
    client_name: str = Field(
        default="figma-bridge-mcp",
        description="Reported to the remote tools as clientName.",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {v}")
        return v.rstrip("/")

    @field_validator("sse_path")
    @classmethod
    def validate_sse_path(cls, v: str) -> str:
        return v if v.startswith("/") else f"/{v}"


class CacheConfig(BaseModel):
    """Result cache configuration.

    Env vars:
        FIGMABRIDGE__CACHE__ENABLED: Enable/disable the result cache
        FIGMABRIDGE__CACHE__TTL_SEC: Entry lifetime
        FIGMABRIDGE__CACHE__MAX_ENTRIES: Oldest entries are evicted beyond this
    """

    enabled: bool = Field(default=True, description="Memoize remote tool results.")
    ttl_sec: float = Field(
        default=300.0,
        ge=60.0,
        le=3600.0,
        description="Entry lifetime (5 min default). Expiry is checked on read only.",
    )
    max_entries: int = Field(
        default=100,
        ge=10,
        le=1000,
        description="Upper bound on stored entries, including expired ones not yet read.",
    )


class ExtractionConfig(BaseModel):
    """Extraction pipeline defaults.

    Env vars:
        FIGMABRIDGE__EXTRACTION__MAX_WAIT_MS: Default maxWaitTime when a request omits it
    """

    max_wait_ms: int = Field(
        default=15000,
        ge=5000,
        le=60000,
        description="Default overall wait budget used to plan Level 1 stage timeouts.",
    )
    framework: Framework = Field(default="react")
    styling: Styling = Field(default="styled-components")
    typescript: bool = Field(default=True)


class FigmaBridgeConfig(BaseModel):
    """Root configuration for figma-bridge."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
