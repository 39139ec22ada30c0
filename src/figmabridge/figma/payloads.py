"""Typed results of the remote Figma tools and the parsers that build them.

The desktop server wraps most answers as MCP content items
(``{"content": [{"type": "text", "text": ...}]}``); older builds return the
structured fields directly. Parsers accept both and never raise on shape
surprises: an unrecognized payload becomes an empty result.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal

import structlog
from pydantic import ConfigDict, Field

from figmabridge.core.models import CamelModel

log = structlog.get_logger(__name__)

NOTHING_SELECTED = "Nothing is selected"
_VARIABLES_TEXT_MARKER = "variables are contained"

VariableType = Literal["color", "float", "string", "boolean", "typography"]
ImageFormat = Literal["png", "jpg", "svg"]


# =============================================================================
# Design objects
# =============================================================================


class FigmaVariable(CamelModel):
    """A design token. Extra keys sent by the server are kept."""

    model_config = ConfigDict(extra="allow")

    id: str = ""
    name: str = ""
    type: str = "string"
    value: Any = None
    category: str | None = None
    description: str | None = None


class FigmaComponent(CamelModel):
    """A component, either reported by the server or inferred from code."""

    model_config = ConfigDict(extra="allow")

    id: str = ""
    name: str = ""
    type: str = "element"
    description: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Tool results
# =============================================================================


class VariablesResult(CamelModel):
    kind: Literal["variables"] = "variables"
    variables: list[FigmaVariable] = Field(default_factory=list)
    collections: list[dict[str, Any]] = Field(default_factory=list)


class CodeConnectResult(CamelModel):
    kind: Literal["code_connect"] = "code_connect"
    mappings: list[dict[str, Any]] = Field(default_factory=list)
    coverage: float = 0.0
    unmapped_components: list[FigmaComponent] = Field(default_factory=list)


class CodeResult(CamelModel):
    kind: Literal["code"] = "code"
    code: str = ""
    framework: str = "react"
    styling: str = "tailwind"
    components: list[FigmaComponent] = Field(default_factory=list)
    variables: list[FigmaVariable] = Field(default_factory=list)
    assets: dict[str, Any] | None = None


class ImageResult(CamelModel):
    kind: Literal["image"] = "image"
    url: str = ""
    format: ImageFormat = "png"
    scale: float = 1.0


ToolPayload = Annotated[
    VariablesResult | CodeConnectResult | CodeResult | ImageResult,
    Field(discriminator="kind"),
]


# =============================================================================
# Parsers
# =============================================================================


def _as_dict(result: Any) -> dict[str, Any]:
    return result if isinstance(result, dict) else {}


def _text_items(result: dict[str, Any]) -> list[str]:
    content = result.get("content")
    if not isinstance(content, list):
        return []
    return [
        item["text"]
        for item in content
        if isinstance(item, dict) and item.get("type", "text") == "text" and isinstance(item.get("text"), str)
    ]


def _first_text(result: dict[str, Any]) -> str | None:
    content = result.get("content")
    if isinstance(content, list) and content and isinstance(content[0], dict):
        text = content[0].get("text")
        if isinstance(text, str) and text:
            return text
    return None


def _variable_summary(text: str) -> str:
    """Drop the lead-in sentence so it is not read as the first variable name."""
    _, _, tail = text.partition(_VARIABLES_TEXT_MARKER)
    _, sep, summary = tail.partition(":")
    return summary if sep else tail


def _is_numeric(value: Any) -> bool:
    if isinstance(value, int | float):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def infer_variable_type(value: Any) -> str:
    """Classify a raw token value: ``#`` colors, numbers, booleans, else strings."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str) and value.startswith("#"):
        return "color"
    if _is_numeric(value):
        return "float"
    return "string"


def parse_variables(result: Any) -> VariablesResult:
    """Parse ``get_variable_defs``.

    The text form is a JSON object of ``name -> value``; the category is the
    first ``/`` segment of the name. "Nothing is selected" means no tokens.
    """
    result = _as_dict(result)
    text = _first_text(result)
    if text is not None:
        if NOTHING_SELECTED in text:
            return VariablesResult()
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            log.debug("variables_text_not_json", preview=text[:120])
            return VariablesResult()
        if not isinstance(data, dict):
            return VariablesResult()
        return VariablesResult(
            variables=[
                FigmaVariable(
                    id=name,
                    name=name,
                    type=infer_variable_type(value),
                    value=value,
                    category=name.split("/")[0],
                )
                for name, value in data.items()
            ]
        )

    return VariablesResult.model_validate(
        {
            "variables": result.get("variables") or [],
            "collections": result.get("collections") or [],
        }
    )


def parse_code_connect(result: Any) -> CodeConnectResult:
    """Parse ``get_code_connect_map``. Missing fields default to empty."""
    result = _as_dict(result)
    return CodeConnectResult.model_validate(
        {
            "mappings": result.get("mappings") or [],
            "coverage": result.get("coverage") or 0,
            "unmappedComponents": result.get("unmappedComponents") or [],
        }
    )


def parse_code(result: Any) -> CodeResult:
    """Parse ``get_code``.

    In the content form the code is the first text item mentioning ``export``
    or ``function`` and the token list is the item mentioning
    "variables are contained". Components are inferred from the code.
    """
    from figmabridge.figma.inference import infer_components, parse_variables_text

    result = _as_dict(result)
    texts = _text_items(result)
    if "content" in result:
        code = next((t for t in texts if "export" in t or "function" in t), "")
        variables_text = next((t for t in texts if _VARIABLES_TEXT_MARKER in t), None)
        return CodeResult(
            code=code,
            components=infer_components(code),
            variables=parse_variables_text(_variable_summary(variables_text)) if variables_text else [],
            assets=result.get("assets"),
        )

    code = result.get("code") or ""
    components = result.get("components")
    return CodeResult.model_validate(
        {
            "code": code,
            "framework": result.get("framework") or "react",
            "styling": result.get("styling") or "tailwind",
            "components": components if components else infer_components(code),
            "variables": result.get("variables") or [],
            "assets": result.get("assets"),
        }
    )


def parse_image(result: Any) -> ImageResult:
    """Parse ``get_image``: the URL is a field or the first text item."""
    result = _as_dict(result)
    fmt = result.get("format")
    return ImageResult(
        url=result.get("url") or _first_text(result) or "",
        format=fmt if fmt in ("png", "jpg", "svg") else "png",
        scale=result.get("scale") or 1.0,
    )
