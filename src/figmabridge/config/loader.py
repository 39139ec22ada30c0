"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (FIGMABRIDGE__SECTION__KEY)
3. Legacy environment variables (FIGMA_MCP_SERVER_URL, FIGMA_MCP_TIMEOUT, FIGMA_CACHE_TTL)
4. Project config (.figmabridge/config.yaml)
5. Global config (~/.config/figmabridge/config.yaml)
6. Built-in defaults (lowest priority)
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from figmabridge.config.models import (
    CacheConfig,
    ExtractionConfig,
    FigmaBridgeConfig,
    LoggingConfig,
    ServerConfig,
)
from figmabridge.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/figmabridge/config.yaml").expanduser()
PROJECT_CONFIG_DIR = ".figmabridge"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _legacy_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Map the legacy FIGMA_* variables onto config sections.

    FIGMA_MCP_SERVER_URL historically pointed at the SSE endpoint itself, so a
    trailing ``/sse`` is split off into ``server.sse_path``. Durations are in ms.
    """
    overrides: dict[str, Any] = {}

    if url := environ.get("FIGMA_MCP_SERVER_URL"):
        server = overrides.setdefault("server", {})
        base, sep, tail = url.rstrip("/").rpartition("/")
        if sep and tail == "sse":
            server["base_url"] = base
            server["sse_path"] = "/sse"
        else:
            server["base_url"] = url

    if timeout := environ.get("FIGMA_MCP_TIMEOUT"):
        try:
            overrides.setdefault("server", {})["timeout_sec"] = int(timeout) / 1000.0
        except ValueError as e:
            raise ConfigError.invalid_value("FIGMA_MCP_TIMEOUT", timeout, "must be ms") from e

    if ttl := environ.get("FIGMA_CACHE_TTL"):
        try:
            overrides.setdefault("cache", {})["ttl_sec"] = int(ttl) / 1000.0
        except ValueError as e:
            raise ConfigError.invalid_value("FIGMA_CACHE_TTL", ttl, "must be ms") from e

    return overrides


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source (thread-safe)."""

    class FigmaBridgeSettings(BaseSettings):
        """Root config. Env vars: FIGMABRIDGE__LOGGING__LEVEL, FIGMABRIDGE__SERVER__BASE_URL, etc."""

        model_config = SettingsConfigDict(
            env_prefix="FIGMABRIDGE__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        server: ServerConfig = ServerConfig()
        cache: CacheConfig = CacheConfig()
        extraction: ExtractionConfig = ExtractionConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return FigmaBridgeSettings


def load_config(project_root: Path | None = None, **kwargs: Any) -> FigmaBridgeConfig:
    """Load config: defaults < global yaml < project yaml < legacy env < env < kwargs.

    Args:
        project_root: Directory holding ``.figmabridge/config.yaml``.
                      Defaults to the current working directory.
        **kwargs: Override values (highest precedence), by section.

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    project_root = project_root or Path.cwd()

    yaml_config = _load_yaml(GLOBAL_CONFIG_PATH)
    yaml_config = _deep_merge(yaml_config, _load_yaml(project_root / PROJECT_CONFIG_DIR / "config.yaml"))
    yaml_config = _deep_merge(yaml_config, _legacy_env_overrides(os.environ))

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e

    return FigmaBridgeConfig.model_validate(settings.model_dump())
