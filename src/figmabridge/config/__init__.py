"""Config module exports."""

from figmabridge.config.loader import load_config
from figmabridge.config.models import (
    CacheConfig,
    ExtractionConfig,
    FigmaBridgeConfig,
    LoggingConfig,
    LogOutputConfig,
    ServerConfig,
)

__all__ = [
    "load_config",
    "CacheConfig",
    "ExtractionConfig",
    "FigmaBridgeConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ServerConfig",
]
