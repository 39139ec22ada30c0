"""Tests for layout complexity detection and stage timeout planning."""

import pytest

from figmabridge.extraction.timeouts import (
    StageTimeouts,
    detect_complex_layout,
    is_complex_node_id,
    plan_balanced_timeouts,
    plan_minimal_timeouts,
    plan_optimal_timeouts,
)


class TestComplexity:
    """Node id heuristics."""

    @pytest.mark.parametrize(
        ("node_id", "expected"),
        [
            ("1311-9692", True),
            ("12-34", False),
            ("1-2-3", True),
            ("1350-1", True),
            ("2000-1", True),
            ("1299-1", True),
            ("999-1", False),
            ("12%3A34", False),
        ],
    )
    def test_given_node_id_when_classified_then_expected(self, node_id: str, expected: bool) -> None:
        """Long digit runs, many parts or high leading numbers mean complex."""
        assert is_complex_node_id(node_id) is expected

    def test_given_url_without_node_when_detected_then_simple(self) -> None:
        """No node id is never complex."""
        assert detect_complex_layout("https://www.figma.com/design/A/B") is False
        assert detect_complex_layout(None) is False

    def test_given_url_with_complex_node_when_detected_then_complex(self) -> None:
        """The raw node-id query value is classified."""
        assert detect_complex_layout("https://www.figma.com/design/A/B?node-id=1311-9692") is True


class TestPlanning:
    """Stage timeout budgets."""

    def test_given_default_wait_when_simple_then_ceilings(self) -> None:
        """A 15s budget plans 4.5s, 9s and 15s for a simple layout."""
        assert plan_optimal_timeouts(15000, False) == StageTimeouts(variables=4500, components=9000, code=15000)

    def test_given_long_wait_when_simple_then_capped(self) -> None:
        """Budgets never exceed the per-stage ceilings."""
        assert plan_optimal_timeouts(60000, False) == StageTimeouts(variables=5000, components=10000, code=15000)

    def test_given_default_wait_when_complex_then_tighter(self) -> None:
        """Complex layouts use smaller shares and lower ceilings."""
        assert plan_optimal_timeouts(15000, True) == StageTimeouts(variables=3000, components=4500, code=7500)

    def test_given_complex_and_simple_urls_when_planned_then_complex_strictly_shorter(self) -> None:
        """Every level 1 stage is shorter for a complex node id."""
        # Given
        complex_plan = plan_optimal_timeouts(15000, is_complex_node_id("1311-9692"))
        simple_plan = plan_optimal_timeouts(15000, is_complex_node_id("12-34"))

        # Then
        assert complex_plan.variables < simple_plan.variables
        assert complex_plan.components < simple_plan.components
        assert complex_plan.code < simple_plan.code

    def test_given_fallback_levels_when_complex_then_scaled(self) -> None:
        """Levels 2 and 3 shrink to 60% for complex layouts."""
        assert plan_balanced_timeouts(False) == StageTimeouts(variables=3000, components=5000)
        assert plan_balanced_timeouts(True) == StageTimeouts(variables=1800, components=3000)
        assert plan_minimal_timeouts(False) == StageTimeouts(variables=2000)
        assert plan_minimal_timeouts(True) == StageTimeouts(variables=1200)
