"""Typed wrappers over the remote Figma tools.

Every tool is invoked through ``tools/call`` with ``{"name", "arguments"}``.
Results of the read-only design tools are memoized in the injected cache,
keyed by tool name plus arguments. Entries are deep-copied in and out.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel

from figmabridge.core.errors import RemoteToolError
from figmabridge.figma.payloads import (
    CodeConnectResult,
    CodeResult,
    ImageFormat,
    ImageResult,
    VariablesResult,
    parse_code,
    parse_code_connect,
    parse_image,
    parse_variables,
)
from figmabridge.figma.urls import parse_figma_url
from figmabridge.transport.cache import Cache, CacheStats, make_cache_key
from figmabridge.transport.client import SseRpcClient

log = structlog.get_logger(__name__)

TOOLS_CALL = "tools/call"
CLIENT_LANGUAGES = "typescript,javascript"

T = TypeVar("T", bound=BaseModel)

CacheHitObserver = Callable[[str], None]
"""Called with the tool name whenever a result is served from the cache."""


class FigmaClient:
    """Calls ``get_variable_defs``, ``get_code_connect_map``, ``get_code`` and ``get_image``."""

    def __init__(
        self,
        transport: SseRpcClient,
        cache: Cache | None = None,
        *,
        client_name: str = "figma-bridge-mcp",
        client_frameworks: str = "react",
    ) -> None:
        self.transport = transport
        self.cache = cache
        self.client_name = client_name
        self.client_frameworks = client_frameworks
        self.cache_hit_observer: CacheHitObserver | None = None

    # =========================================================================
    # Tools
    # =========================================================================

    async def get_variable_defs(self, url: str, node_id: str | None = None) -> VariablesResult:
        """Design tokens for the selection. Node id defaults to the URL's."""
        args = self._base_arguments(node_id or parse_figma_url(url).node_id)
        return await self._cached_call("get_variable_defs", args, parse_variables)

    async def get_code_connect_map(self, url: str, node_id: str | None = None) -> CodeConnectResult:
        """Code Connect mappings for the selection. Node id defaults to the URL's."""
        args = self._base_arguments(node_id or parse_figma_url(url).node_id)
        return await self._cached_call("get_code_connect_map", args, parse_code_connect)

    async def get_code(self, url: str, node_id: str | None = None) -> CodeResult:
        """Generated code for a node, with components inferred from it."""
        args = {"url": url, **self._base_arguments(node_id)}
        return await self._cached_call("get_code", args, parse_code)

    async def get_image(
        self,
        url: str,
        node_id: str | None = None,
        *,
        format: ImageFormat | None = None,
        scale: float | None = None,
    ) -> ImageResult:
        """Rendered image reference for a node. Never cached."""
        args: dict[str, Any] = {"url": url}
        if node_id:
            args["nodeId"] = node_id
        if format is not None:
            args["format"] = format
        if scale is not None:
            args["scale"] = scale
        return parse_image(await self._call_tool("get_image", args))

    # =========================================================================
    # Connection and cache
    # =========================================================================

    async def test_connection(self) -> bool:
        return await self.transport.test_connection()

    def clear_cache(self) -> None:
        if self.cache is not None:
            self.cache.clear()

    def cache_stats(self) -> CacheStats:
        if self.cache is None:
            return CacheStats(size=0, hits=0, misses=0)
        return self.cache.stats()

    # =========================================================================
    # Internals
    # =========================================================================

    def _base_arguments(self, node_id: str | None) -> dict[str, Any]:
        args: dict[str, Any] = {
            "clientLanguages": CLIENT_LANGUAGES,
            "clientFrameworks": self.client_frameworks,
            "clientName": self.client_name,
        }
        if node_id:
            args["nodeId"] = node_id
        return args

    async def _call_tool(self, tool: str, arguments: dict[str, Any]) -> Any:
        response = await self.transport.call(TOOLS_CALL, {"name": tool, "arguments": arguments})
        if response.error is not None:
            log.info("remote_tool_error", tool=tool, rpc_code=response.error.code)
            raise RemoteToolError.from_rpc(tool, response.error.code, response.error.message)
        return response.result

    async def _cached_call(
        self,
        tool: str,
        arguments: dict[str, Any],
        parse: Callable[[Any], T],
    ) -> T:
        key = make_cache_key(tool, arguments)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                log.debug("cache_hit", tool=tool)
                if self.cache_hit_observer is not None:
                    self.cache_hit_observer(tool)
                return cached.model_copy(deep=True)

        result = parse(await self._call_tool(tool, arguments))
        if self.cache is not None:
            # Callers own what they get back; the cache keeps its own copy
            self.cache.set(key, result.model_copy(deep=True))
        return result
