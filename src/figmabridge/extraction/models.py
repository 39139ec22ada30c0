"""Extraction request, result and progress models."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal

from pydantic import Field, field_validator

from figmabridge.core.models import CamelModel
from figmabridge.figma.payloads import FigmaComponent, FigmaVariable

Stage = Literal["variables", "components", "code", "complete"]
TimeoutStrategy = Literal["graceful", "partial", "fail"]

STAGES: tuple[Stage, ...] = ("variables", "components", "code", "complete")


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """One progress notification. ``duration_ms`` counts from pipeline start."""

    stage: Stage
    percentage: float
    message: str
    duration_ms: int

    @property
    def is_milestone(self) -> bool:
        return self.percentage >= 100 or self.stage == "complete" or "timeout" in self.message.lower()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class PerformanceMetrics(CamelModel):
    total_duration: int = 0
    variables_duration: int = 0
    components_duration: int = 0
    code_duration: int = 0
    timeout_occurred: bool = False
    timeout_stage: str | None = None
    cache_hits: int = 0
    retry_attempts: int = 0


class FigmaData(CamelModel):
    """Extracted design context. Always present on an outcome, possibly empty."""

    file_id: str
    node_id: str | None = None
    url: str = ""
    code: str | None = None
    components: list[FigmaComponent] = Field(default_factory=list)
    variables: list[FigmaVariable] = Field(default_factory=list)
    code_connect_map: list[dict[str, Any]] = Field(default_factory=list)
    assets: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("code", mode="before")
    @classmethod
    def _empty_code_is_none(cls, v: Any) -> Any:
        return v or None


class ExtractionOptions(CamelModel):
    include_code: bool = True
    include_variants: bool | None = None
    include_components: bool | None = None
    include_tokens: bool | None = None
    timeout_strategy: TimeoutStrategy = "graceful"
    max_wait_time: int | None = Field(
        default=None,
        ge=5000,
        le=60000,
        description="Overall wait budget in ms used to plan Level 1 stage timeouts. "
        "Falls back to the configured default when omitted.",
    )
    progress_updates: bool = True


class ExtractionRequest(CamelModel):
    """Either a Figma URL to extract, or data a caller already extracted."""

    url: str | None = None
    figma_data: dict[str, Any] | None = None
    options: ExtractionOptions = Field(default_factory=ExtractionOptions)

    @field_validator("figma_data", mode="before")
    @classmethod
    def _empty_figma_data_is_none(cls, v: Any) -> Any:
        # Some MCP clients send {} for an unset object argument
        return v or None

    @property
    def is_pass_through(self) -> bool:
        return self.figma_data is not None and ("fileId" in self.figma_data or "file_id" in self.figma_data)


class ExtractionOutcome(CamelModel):
    success: bool
    figma_data: FigmaData
    performance: PerformanceMetrics
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    fallback_level: int | None = Field(
        default=None,
        description="1 optimal, 2 balanced, 3 minimal, 4 emergency; None for pre-extracted data.",
    )
    progress_history: list[ProgressEvent] = Field(default_factory=list, exclude=True)
