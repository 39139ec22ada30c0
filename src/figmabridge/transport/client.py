"""SSE-based JSON-RPC client for the Figma desktop MCP server.

One call is one session:

1. ``GET {base}{sse_path}`` opens an event stream whose first ``endpoint``
   frame names a per-session request path.
2. The JSON-RPC envelope is POSTed to ``{base}{endpoint}``. The server
   acknowledges with ``202 Accepted``.
3. The response arrives later on the same stream as a ``message`` frame.

The desktop server does not echo request ids reliably, so by default the first
frame carrying ``result`` or ``error`` is taken as the answer and its id is
replaced with the request id. ``strict_ids`` turns exact matching back on.
"""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import json
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import httpx
import structlog

from figmabridge.config.constants import (
    ACCEPTED_BODY,
    BACKOFF_BASE_MS,
    BACKOFF_CAP_MS,
    CONNECTION_PROBE_METHOD,
    SSE_ACCEPT_HEADER,
)
from figmabridge.config.models import ServerConfig
from figmabridge.core.errors import TransportError
from figmabridge.transport.models import RpcRequest, RpcResponse, is_response_payload
from figmabridge.transport.sse import SseFrame, SseFrameReader

log = structlog.get_logger(__name__)

RetryObserver = Callable[[int, TransportError], None]
"""Called with (failed attempt number, error) before each backoff sleep."""

_SSE_HEADERS = {"Accept": SSE_ACCEPT_HEADER, "Cache-Control": "no-cache"}
_JSON_HEADERS = {"Content-Type": "application/json"}


def backoff_delay_ms(attempt: int) -> int:
    """Delay after failed attempt ``attempt`` (1-based): 1s, 2s, 4s, then 5s."""
    return min(BACKOFF_BASE_MS * 2 ** (attempt - 1), BACKOFF_CAP_MS)


class SseRpcClient:
    """Performs JSON-RPC calls over the desktop server's SSE transport.

    The ``httpx.AsyncClient`` may be injected (tests pass one backed by
    ``httpx.MockTransport``); an injected client is not closed by ``aclose``.
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.config = config or ServerConfig()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout_sec))
        self._sleep = sleep
        self._ids = itertools.count(1)
        self.retry_observer: RetryObserver | None = None

    async def __aenter__(self) -> SseRpcClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    # =========================================================================
    # Public API
    # =========================================================================

    async def call(self, method: str, params: dict[str, Any] | None = None) -> RpcResponse:
        """Send one request, retrying transport failures with capped backoff.

        A JSON-RPC ``error`` in the response is returned, not raised: it is a
        valid answer from the server.

        Raises:
            TransportError: The last failure once attempts are exhausted, or
                immediately for a non-retryable failure such as a 401.
        """
        request = RpcRequest(id=next(self._ids), method=method, params=params or {})
        attempts = self.config.retry_attempts

        for attempt in range(1, attempts + 1):
            try:
                response = await self._attempt(request)
            except TransportError as e:
                if not e.retryable or attempt >= attempts:
                    log.debug(
                        "rpc_call_failed",
                        method=method,
                        request_id=request.id,
                        attempt=attempt,
                        error=e.error_name,
                    )
                    raise
                delay_ms = backoff_delay_ms(attempt)
                log.warning(
                    "rpc_call_retry",
                    method=method,
                    attempt=attempt,
                    delay_ms=delay_ms,
                    error=e.message,
                )
                if self.retry_observer is not None:
                    self.retry_observer(attempt, e)
                await self._sleep(delay_ms / 1000)
            else:
                log.debug("rpc_call_ok", method=method, request_id=request.id, attempt=attempt)
                return response

        raise AssertionError("unreachable: retry loop always returns or raises")

    async def test_connection(self) -> bool:
        """Negotiate a session and check that a ``tools/list`` request is accepted.

        One attempt, no retries. The answer frame is not awaited: a server that
        hands out an endpoint and accepts the POST is reachable even when it is
        too busy to reply.
        """
        request = RpcRequest(id=next(self._ids), method=CONNECTION_PROBE_METHOD, params={})
        try:
            async with self._session() as (endpoint, _frames):
                await self._dispatch(endpoint, request)
        except TransportError as e:
            log.info("connection_probe_failed", error=e.error_name, reason=e.message)
            return False
        return True

    # =========================================================================
    # One attempt: negotiate, dispatch, correlate
    # =========================================================================

    async def _attempt(self, request: RpcRequest) -> RpcResponse:
        async with self._session() as (endpoint, frames):
            immediate = await self._dispatch(endpoint, request)
            if immediate is not None:
                return immediate
            return await self._correlate(frames, request)

    @contextlib.asynccontextmanager
    async def _session(self) -> AsyncIterator[tuple[str, AsyncIterator[SseFrame]]]:
        """Open the event stream and negotiate the session endpoint.

        The whole block, body included, runs under ``timeout_sec``. Timeouts and
        httpx failures raised inside it surface as ``TransportError``.
        """
        timeout_sec = self.config.timeout_sec
        sse_url = f"{self.config.base_url}{self.config.sse_path}"
        try:
            async with asyncio.timeout(timeout_sec):
                async with self._http.stream("GET", sse_url, headers=_SSE_HEADERS) as stream:
                    if not stream.is_success:
                        raise TransportError.server_unavailable(
                            f"HTTP {stream.status_code}", status=stream.status_code
                        )
                    async with contextlib.aclosing(self._frames(stream)) as frames:
                        endpoint = await self._negotiate(frames)
                        yield endpoint, frames
        except TimeoutError as e:
            raise TransportError.timeout(timeout_sec) from e
        except httpx.TimeoutException as e:
            raise TransportError.timeout(timeout_sec) from e
        except httpx.HTTPError as e:
            raise TransportError.request_failed(str(e) or type(e).__name__) from e

    async def _frames(self, stream: httpx.Response) -> AsyncIterator[SseFrame]:
        reader = SseFrameReader()
        async for chunk in stream.aiter_text():
            for frame in reader.feed(chunk):
                yield frame

    async def _negotiate(self, frames: AsyncIterator[SseFrame]) -> str:
        async for frame in frames:
            if frame.event == "endpoint":
                endpoint = frame.data.strip()
                log.debug("session_negotiated", endpoint=endpoint)
                return endpoint
        raise TransportError.no_session_endpoint()

    async def _dispatch(self, endpoint: str, request: RpcRequest) -> RpcResponse | None:
        """POST the envelope. Returns a response only if the server answered inline."""
        response = await self._http.post(
            f"{self.config.base_url}{endpoint}",
            json=request.to_wire(),
            headers=_JSON_HEADERS,
        )
        status = response.status_code
        if status == 503:
            raise TransportError.server_unavailable(status=503)
        if status == 401:
            raise TransportError.authentication_failed()
        if not response.is_success:
            raise TransportError.http_error(status, response.reason_phrase)

        body = response.text.strip()
        if status == 202 or body == ACCEPTED_BODY:
            return None

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise TransportError.invalid_response(f"unexpected {status} body: {body[:200]!r}") from e
        if not is_response_payload(payload):
            raise TransportError.invalid_response(f"unexpected {status} body without result or error")
        log.debug("rpc_inline_response", status=status, request_id=request.id)
        return RpcResponse.from_frame(payload, request.id)

    async def _correlate(self, frames: AsyncIterator[SseFrame], request: RpcRequest) -> RpcResponse:
        async for frame in frames:
            if frame.event != "message":
                continue
            try:
                payload = json.loads(frame.data)
            except json.JSONDecodeError:
                log.debug("sse_frame_undecodable", data=frame.data[:200])
                continue
            if not is_response_payload(payload):
                continue
            if self.config.strict_ids and payload.get("id") != request.id:
                log.debug("sse_frame_id_mismatch", expected=request.id, got=payload.get("id"))
                continue
            return RpcResponse.from_frame(payload, request.id)
        raise TransportError.stream_ended()
