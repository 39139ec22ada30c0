"""Figma URL parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass

from figmabridge.core.errors import DomainError

_FILE_ID_RE = re.compile(r"figma\.com/(?:file|design)/([a-zA-Z0-9]+)")
_NODE_ID_RE = re.compile(r"[?&]node-id=([^&]+)")


@dataclass(frozen=True, slots=True)
class FigmaLocation:
    """File and (optional) node a Figma URL points at."""

    file_id: str
    node_id: str | None = None


def raw_node_id(url: str) -> str | None:
    """The ``node-id`` query value exactly as it appears in the URL."""
    match = _NODE_ID_RE.search(url)
    return match.group(1) if match else None


def parse_figma_url(url: str) -> FigmaLocation:
    """Extract file and node ids from a ``figma.com/file`` or ``/design`` URL.

    ``node-id`` is decoded only for ``%3A`` (``1%3A2`` becomes ``1:2``);
    the hyphenated form (``1-2``) is passed through unchanged.

    Raises:
        DomainError: The URL has no recognizable file id.
    """
    match = _FILE_ID_RE.search(url)
    if match is None:
        raise DomainError.invalid_url(url)
    node = raw_node_id(url)
    return FigmaLocation(
        file_id=match.group(1),
        node_id=node.replace("%3A", ":") if node else None,
    )
