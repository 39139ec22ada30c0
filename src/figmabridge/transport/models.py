"""JSON-RPC 2.0 wire models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

JSONRPC_VERSION = "2.0"


class RpcRequest(BaseModel):
    """Outbound call. Immutable once built; ``id`` is unique per client."""

    model_config = ConfigDict(frozen=True)

    id: int
    method: str
    params: dict[str, Any] = Field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "method": self.method,
            "params": self.params,
            "id": self.id,
        }


class RpcErrorPayload(BaseModel):
    code: int = 0
    message: str = ""
    data: Any = None


class RpcResponse(BaseModel):
    """Inbound response. Exactly one of ``result`` / ``error`` is meaningful."""

    id: int | str | None = None
    result: Any = None
    error: RpcErrorPayload | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def from_frame(cls, payload: dict[str, Any], request_id: int) -> RpcResponse:
        """Build a response from a decoded stream frame, stamping the request id."""
        error = payload.get("error")
        if error is not None and not isinstance(error, dict):
            error = {"message": str(error)}
        return cls(id=request_id, result=payload.get("result"), error=error)


def is_response_payload(payload: Any) -> bool:
    """True for any decoded frame that carries a ``result`` or ``error`` key."""
    return isinstance(payload, dict) and ("result" in payload or "error" in payload)
