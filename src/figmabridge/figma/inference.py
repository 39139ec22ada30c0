"""Best-effort scraping of generated React/Tailwind code.

Nothing here is guaranteed correct: it turns ``data-name`` attributes and
class names into a rough component and layout summary that downstream
consumers may use as hints.
"""

from __future__ import annotations

import re
from typing import Any

from figmabridge.figma.payloads import FigmaComponent, FigmaVariable

_FRAME_RE = re.compile(r"export\s+default\s+function\s+(\w+)")
_DATA_NAME_RE = re.compile(r'data-name="([^"]+)"')
_SPACING_RE = re.compile(r"\b(?:p|m|gap)-\w+")
_POSITION_RE = re.compile(r"\b(?:top|left|right|bottom)-\w+")
_VARIABLE_PAIR_RE = re.compile(r"([^:,]+):\s*([^,]+)")

UI_KEYWORDS = (
    "Button",
    "Input",
    "Card",
    "Modal",
    "Header",
    "Footer",
    "Navigation",
    "Menu",
    "Form",
    "Table",
    "List",
)

MAX_ELEMENTS = 20
MAX_UI_COMPONENTS = 10
MAX_PATTERNS = 10
MAX_CONTEXT_CLASSES = 5


def _unique(items: list[str], limit: int) -> list[str]:
    return list(dict.fromkeys(items))[:limit]


def infer_component_type(name: str) -> str:
    lowered = name.lower()
    if "button" in lowered:
        return "button"
    if "input" in lowered or "field" in lowered:
        return "input"
    if "card" in lowered:
        return "card"
    if "header" in lowered or "nav" in lowered:
        return "navigation"
    if "form" in lowered:
        return "form"
    if "table" in lowered or "list" in lowered:
        return "data-display"
    return "element"


def element_context(name: str, code: str) -> dict[str, Any]:
    """Leading classes of the element's className, when it sits on the same tag."""
    match = re.search(
        rf'data-name="{re.escape(name)}"[^>]*className="([^"]*)"',
        code,
        re.IGNORECASE,
    )
    return {
        "hasClassName": match is not None,
        "styling": match.group(1).split()[:MAX_CONTEXT_CLASSES] if match else [],
    }


def analyze_layout(code: str) -> dict[str, Any]:
    spacing = _SPACING_RE.findall(code)
    positioning = _POSITION_RE.findall(code)
    return {
        "flexContainers": code.count("flex"),
        "gridContainers": code.count("grid"),
        "absoluteElements": code.count("absolute"),
        "spacing": {
            "patterns": _unique(spacing, MAX_PATTERNS),
            "count": len(spacing),
            "hasPadding": any(c.startswith("p-") for c in spacing),
            "hasMargin": any(c.startswith("m-") for c in spacing),
            "hasGaps": any(c.startswith("gap-") for c in spacing),
        },
        "positioning": {
            "patterns": _unique(positioning, MAX_PATTERNS),
            "count": len(positioning),
            "hasRelative": "relative" in code,
            "hasAbsolute": "absolute" in code,
            "hasFixed": "fixed" in code,
        },
    }


def identify_ui_components(elements: list[str], code: str) -> list[dict[str, Any]]:
    keywords = [k.lower() for k in UI_KEYWORDS]
    found = [e for e in elements if any(k in e.lower() for k in keywords)]
    return [
        {"name": e, "type": infer_component_type(e), "context": element_context(e, code)}
        for e in found[:MAX_UI_COMPONENTS]
    ]


def infer_components(code: str, framework: str = "react", styling: str = "tailwind") -> list[FigmaComponent]:
    """Summarize generated code as a single layout component.

    Returns an empty list when the code has no ``export default function``.
    """
    if not code:
        return []
    frame = _FRAME_RE.search(code)
    if frame is None:
        return []

    name = frame.group(1)
    elements = [n for n in _DATA_NAME_RE.findall(code) if not n.startswith((".", "\N{DIAMOND SHAPE WITH A DOT INSIDE}"))]
    ui_components = identify_ui_components(elements, code)

    return [
        FigmaComponent(
            id=name.lower(),
            name=name,
            type="layout",
            description=f"Layout frame containing {len(ui_components)} UI elements",
            properties={
                "framework": framework,
                "styling": styling,
                "elementCount": len(elements),
                "hasFlexLayout": "flex" in code,
                "hasGridLayout": "grid" in code,
                "hasAbsolutePositioning": "absolute" in code,
            },
            elements=elements[:MAX_ELEMENTS],
            uiComponents=ui_components,
            layout=analyze_layout(code),
        )
    ]


def parse_variables_text(text: str) -> list[FigmaVariable]:
    """Parse the ``name: value, name: value`` summary that accompanies code."""
    variables = []
    for match in _VARIABLE_PAIR_RE.finditer(text):
        name, value = match.group(1).strip(), match.group(2).strip()
        if not name or not value:
            continue
        if "#" in value:
            kind = "color"
        elif "Font(" in value:
            kind = "typography"
        else:
            kind = "string"
        variables.append(FigmaVariable(id=name, name=name, value=value, type=kind))
    return variables
