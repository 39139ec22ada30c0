"""figma-bridge error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Transport (retried by the transport client unless marked otherwise)
- 4xxx: Remote tool (valid JSON-RPC error responses)
- 5xxx: Domain (bad input, never retried)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Transport (3xxx)
    SERVER_UNAVAILABLE = 3001
    AUTHENTICATION_FAILED = 3002
    TIMEOUT = 3003
    INVALID_RESPONSE = 3004
    HTTP_ERROR = 3005
    STREAM_ENDED = 3006
    NO_SESSION_ENDPOINT = 3007
    REQUEST_FAILED = 3008

    # Remote tool (4xxx)
    REMOTE_TOOL_ERROR = 4001

    # Domain (5xxx)
    INVALID_URL = 5001
    MISSING_INPUT = 5002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class FigmaBridgeError(Exception):
    """Base error with structured context for tool responses."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'SERVER_UNAVAILABLE')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON/MCP responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(FigmaBridgeError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class TransportError(FigmaBridgeError):
    """Failures talking to the remote MCP server over SSE + HTTP.

    Everything except authentication failures is retryable; the transport
    client's backoff loop decides based on ``retryable``.
    """

    @property
    def is_timeout(self) -> bool:
        return self.code == ErrorCode.TIMEOUT

    @classmethod
    def server_unavailable(cls, reason: str | None = None, *, status: int | None = None) -> "TransportError":
        message = "Figma MCP server is not available. Please ensure Figma desktop app is running."
        details: dict[str, Any] = {}
        if status is not None:
            details["status"] = status
        if reason is not None:
            details["reason"] = reason
        return cls(
            code=ErrorCode.SERVER_UNAVAILABLE,
            message=message if reason is None else f"{message} ({reason})",
            retryable=True,
            details=details,
        )

    @classmethod
    def authentication_failed(cls) -> "TransportError":
        return cls(
            code=ErrorCode.AUTHENTICATION_FAILED,
            message="Authentication failed. Please check your Figma permissions.",
            retryable=False,
            details={"status": 401},
        )

    @classmethod
    def timeout(cls, timeout_sec: float) -> "TransportError":
        return cls(
            code=ErrorCode.TIMEOUT,
            message=f"Response timeout after {timeout_sec:g}s",
            retryable=True,
            details={"timeout_sec": timeout_sec},
        )

    @classmethod
    def invalid_response(cls, reason: str) -> "TransportError":
        return cls(
            code=ErrorCode.INVALID_RESPONSE,
            message=f"Invalid response: {reason}",
            retryable=True,
            details={"reason": reason},
        )

    @classmethod
    def http_error(cls, status: int, reason: str = "") -> "TransportError":
        return cls(
            code=ErrorCode.HTTP_ERROR,
            message=f"HTTP {status}: {reason}" if reason else f"HTTP {status}",
            retryable=True,
            details={"status": status},
        )

    @classmethod
    def stream_ended(cls) -> "TransportError":
        return cls(
            code=ErrorCode.STREAM_ENDED,
            message="SSE stream ended without response",
            retryable=True,
        )

    @classmethod
    def no_session_endpoint(cls) -> "TransportError":
        return cls(
            code=ErrorCode.NO_SESSION_ENDPOINT,
            message="No session endpoint found on SSE stream",
            retryable=True,
        )

    @classmethod
    def request_failed(cls, reason: str) -> "TransportError":
        return cls(
            code=ErrorCode.REQUEST_FAILED,
            message=f"Request failed: {reason}",
            retryable=True,
            details={"reason": reason},
        )


class RemoteToolError(FigmaBridgeError):
    """The remote server answered a tool call with a JSON-RPC error."""

    @classmethod
    def from_rpc(cls, tool: str, code: int, message: str) -> "RemoteToolError":
        return cls(
            code=ErrorCode.REMOTE_TOOL_ERROR,
            message=f"{tool} failed: {message}",
            details={"tool": tool, "rpc_code": code},
        )


class DomainError(FigmaBridgeError):
    """Invalid caller input. Raised immediately, never retried."""

    @classmethod
    def invalid_url(cls, url: str) -> "DomainError":
        return cls(
            code=ErrorCode.INVALID_URL,
            message="Invalid Figma URL format",
            details={"url": url},
        )

    @classmethod
    def missing_input(cls) -> "DomainError":
        return cls(
            code=ErrorCode.MISSING_INPUT,
            message="Either figmaData or url must be provided",
        )


class InternalError(FigmaBridgeError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
