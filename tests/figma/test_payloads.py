"""Tests for tool result parsers."""

import json

import pytest
from pydantic import TypeAdapter

from figmabridge.figma.payloads import (
    CodeResult,
    ImageResult,
    ToolPayload,
    VariablesResult,
    infer_variable_type,
    parse_code,
    parse_code_connect,
    parse_image,
    parse_variables,
)


def _content(*texts: str) -> dict[str, object]:
    return {"content": [{"type": "text", "text": t} for t in texts]}


class TestInferVariableType:
    """infer_variable_type tests."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("#FF0000", "color"),
            (16, "float"),
            ("1.5", "float"),
            (True, "boolean"),
            ("Inter", "string"),
            (None, "string"),
        ],
    )
    def test_given_value_when_inferred_then_type(self, value: object, expected: str) -> None:
        """Raw token values are classified by shape."""
        assert infer_variable_type(value) == expected


class TestParseVariables:
    """parse_variables tests."""

    def test_given_json_text_when_parsed_then_variables_with_categories(self) -> None:
        """The text item is a name to value object; category is the first path segment."""
        # Given
        result = _content(json.dumps({"color/primary": "#0066FF", "spacing/md": 16}))

        # When
        parsed = parse_variables(result)

        # Then
        assert [(v.name, v.type, v.category) for v in parsed.variables] == [
            ("color/primary", "color", "color"),
            ("spacing/md", "float", "spacing"),
        ]
        assert parsed.variables[0].value == "#0066FF"

    def test_given_nothing_selected_when_parsed_then_empty(self) -> None:
        """An empty selection is a valid, empty answer."""
        assert parse_variables(_content("Nothing is selected")).variables == []

    def test_given_non_json_text_when_parsed_then_empty(self) -> None:
        """Prose that is not JSON yields no variables."""
        assert parse_variables(_content("Here are your variables!")).variables == []

    def test_given_structured_result_when_parsed_then_fields_used(self) -> None:
        """Older builds return variables directly."""
        # Given
        result = {
            "variables": [{"id": "v1", "name": "primary", "type": "color", "value": "#000", "extra": 1}],
            "collections": [{"id": "c1"}],
        }

        # When
        parsed = parse_variables(result)

        # Then
        assert parsed.variables[0].id == "v1"
        assert parsed.variables[0].model_extra == {"extra": 1}
        assert parsed.collections == [{"id": "c1"}]

    def test_given_garbage_when_parsed_then_empty(self) -> None:
        """Unexpected shapes never raise."""
        assert parse_variables(None) == VariablesResult()


class TestParseCodeConnect:
    """parse_code_connect tests."""

    def test_given_mappings_when_parsed_then_kept(self) -> None:
        """Mappings, coverage and unmapped components are read."""
        # Given
        result = {
            "mappings": [{"nodeId": "1:2", "componentName": "Button"}],
            "coverage": 0.5,
            "unmappedComponents": [{"id": "3:4", "name": "Card"}],
        }

        # When
        parsed = parse_code_connect(result)

        # Then
        assert parsed.mappings == [{"nodeId": "1:2", "componentName": "Button"}]
        assert parsed.coverage == 0.5
        assert parsed.unmapped_components[0].name == "Card"

    def test_given_content_only_when_parsed_then_empty(self) -> None:
        """A text-only answer has no mappings."""
        assert parse_code_connect(_content("No mappings")).mappings == []


class TestParseCode:
    """parse_code tests."""

    def test_given_content_form_when_parsed_then_code_and_variables_found(self) -> None:
        """Code and the variable summary are picked out of the text items."""
        # Given
        code = 'export default function Hero() { return <div data-name="Button" className="flex p-4" /> }'
        result = _content(
            "Generated code for the selection:",
            code,
            "These variables are contained in the design: primary: #0066FF, body: Font(Inter)",
        )

        # When
        parsed = parse_code(result)

        # Then
        assert parsed.code == code
        assert parsed.components[0].name == "Hero"
        assert [(v.name, v.type) for v in parsed.variables] == [
            ("primary", "color"),
            ("body", "typography"),
        ]

    def test_given_structured_result_when_parsed_then_fields_used(self) -> None:
        """Structured answers keep reported components and styling."""
        # Given
        result = {
            "code": "const x = 1",
            "framework": "vue",
            "styling": "css-modules",
            "components": [{"id": "c1", "name": "Card", "type": "card"}],
        }

        # When
        parsed = parse_code(result)

        # Then
        assert parsed.framework == "vue"
        assert parsed.styling == "css-modules"
        assert parsed.components[0].name == "Card"

    def test_given_empty_result_when_parsed_then_defaults(self) -> None:
        """Missing fields default sensibly."""
        assert parse_code({}) == CodeResult()


class TestParseImage:
    """parse_image tests."""

    def test_given_text_url_when_parsed_then_url_from_first_item(self) -> None:
        """The image URL may come back as plain text."""
        assert parse_image(_content("https://cdn/img.png")).url == "https://cdn/img.png"

    def test_given_unknown_format_when_parsed_then_png(self) -> None:
        """Unknown formats fall back to png."""
        assert parse_image({"url": "u", "format": "tiff", "scale": 2}) == ImageResult(url="u", scale=2)


def test_tool_payload_discriminates_on_kind() -> None:
    """The union resolves each payload to its result type."""
    adapter = TypeAdapter(ToolPayload)

    assert isinstance(adapter.validate_python({"kind": "image", "url": "u"}), ImageResult)
    assert isinstance(adapter.validate_python({"kind": "variables"}), VariablesResult)
