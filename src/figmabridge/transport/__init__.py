"""Transport layer: SSE JSON-RPC client and result cache."""

from figmabridge.transport.cache import Cache, CacheStats, InMemoryCache, make_cache_key
from figmabridge.transport.client import SseRpcClient, backoff_delay_ms
from figmabridge.transport.models import RpcErrorPayload, RpcRequest, RpcResponse

__all__ = [
    "Cache",
    "CacheStats",
    "InMemoryCache",
    "make_cache_key",
    "SseRpcClient",
    "backoff_delay_ms",
    "RpcErrorPayload",
    "RpcRequest",
    "RpcResponse",
]
