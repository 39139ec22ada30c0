"""Figma tool client, URL parsing and payload models."""

from figmabridge.figma.client import FigmaClient
from figmabridge.figma.payloads import (
    CodeConnectResult,
    CodeResult,
    FigmaComponent,
    FigmaVariable,
    ImageResult,
    ToolPayload,
    VariablesResult,
)
from figmabridge.figma.urls import FigmaLocation, parse_figma_url, raw_node_id

__all__ = [
    "FigmaClient",
    "CodeConnectResult",
    "CodeResult",
    "FigmaComponent",
    "FigmaVariable",
    "ImageResult",
    "ToolPayload",
    "VariablesResult",
    "FigmaLocation",
    "parse_figma_url",
    "raw_node_id",
]
