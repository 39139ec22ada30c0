"""Application context shared by the MCP tool and the CLI.

Single object holding the configured transport, Figma client and extractor.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from figmabridge.config.models import FigmaBridgeConfig
from figmabridge.extraction.extractor import ProgressiveFallbackExtractor
from figmabridge.figma.client import FigmaClient
from figmabridge.transport.cache import InMemoryCache
from figmabridge.transport.client import SseRpcClient


@dataclass
class AppContext:
    config: FigmaBridgeConfig
    transport: SseRpcClient
    figma: FigmaClient
    extractor: ProgressiveFallbackExtractor

    @classmethod
    def create(
        cls,
        config: FigmaBridgeConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> AppContext:
        """Wire transport, cache, client and extractor from config.

        Args:
            config: Resolved configuration. Defaults are used when omitted.
            http_client: Optional pre-built client (tests inject a MockTransport).
        """
        config = config or FigmaBridgeConfig()
        transport = SseRpcClient(config.server, http_client=http_client)
        cache = (
            InMemoryCache(ttl_sec=config.cache.ttl_sec, max_entries=config.cache.max_entries)
            if config.cache.enabled
            else None
        )
        figma = FigmaClient(
            transport,
            cache,
            client_name=config.server.client_name,
            client_frameworks=config.extraction.framework,
        )
        extractor = ProgressiveFallbackExtractor(figma, config.extraction)
        return cls(config=config, transport=transport, figma=figma, extractor=extractor)

    async def aclose(self) -> None:
        await self.transport.aclose()
