"""Core module exports."""

from figmabridge.core.errors import (
    ConfigError,
    DomainError,
    ErrorCode,
    FigmaBridgeError,
    InternalError,
    RemoteToolError,
    TransportError,
)
from figmabridge.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)
from figmabridge.core.progress import spinner, status

__all__ = [
    # Errors
    "ConfigError",
    "DomainError",
    "ErrorCode",
    "FigmaBridgeError",
    "InternalError",
    "RemoteToolError",
    "TransportError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
    # Progress
    "spinner",
    "status",
]
