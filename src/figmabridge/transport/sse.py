"""Incremental Server-Sent-Events frame reader.

The desktop server writes frames as::

    event: endpoint
    data: /messages?sessionId=...

    event: message
    data: {"jsonrpc":"2.0","id":1,"result":{...}}

Chunks from the network can split a line anywhere, so complete lines are
released only once their newline has arrived. A frame is emitted as soon as
the ``data:`` line following an ``event:`` line is seen; multi-line data is
not used by the protocol.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SseFrame:
    event: str
    data: str


def _field_value(line: str, name: str) -> str | None:
    prefix = f"{name}:"
    if not line.startswith(prefix):
        return None
    value = line[len(prefix) :]
    # A single leading space after the colon is part of the syntax, not the value
    return value[1:] if value.startswith(" ") else value


class SseFrameReader:
    """Buffers partial lines across chunks and yields complete frames."""

    def __init__(self) -> None:
        self._buffer = ""
        self._pending_event: str | None = None

    @property
    def buffered(self) -> str:
        """Text received after the last newline (an incomplete line)."""
        return self._buffer

    def feed(self, chunk: str) -> Iterator[SseFrame]:
        """Consume a chunk and yield every frame it completes."""
        if not chunk:
            return
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split("\n")
        for raw in lines:
            frame = self._consume_line(raw.rstrip("\r"))
            if frame is not None:
                yield frame

    def _consume_line(self, line: str) -> SseFrame | None:
        if not line or line.startswith(":"):
            # Blank lines separate frames, ":" lines are keep-alive comments.
            return None

        event = _field_value(line, "event")
        if event is not None:
            self._pending_event = event.strip()
            return None

        data = _field_value(line, "data")
        if data is not None and self._pending_event is not None:
            frame = SseFrame(event=self._pending_event, data=data)
            self._pending_event = None
            return frame

        return None
