"""
Pydantic models describing the AI analysis context and the model's verdict.

``AnalysisInput`` is what the prompt is rendered from. ``AnalysisOutput`` is
the closed contract the Gemini reply must satisfy. Output fields use strict
scalar types so a reply is rejected rather than coerced into shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, List, Literal, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    model_validator,
)

Number = Union[StrictInt, StrictFloat]

ValidationStatus = Literal["validated", "close_to_validation", "not_validated"]
BottleneckStage = Literal["traffic", "funnel", "checkout", "offer"]
Severity = Literal["high", "medium", "low"]
Difficulty = Literal["easy", "medium", "hard"]

MAX_BOTTLENECKS = 5


class BenchmarkMetric(str, Enum):
    """Metrics a market benchmark can describe."""

    CTR = "ctr"
    CPC = "cpc"
    CPM = "cpm"
    CONVERSION_RATE = "conversion_rate"
    ROAS = "roas"
    AOV = "aov"
    CPA = "cpa"
    CPL = "cpl"


class OfferContext(BaseModel):
    """Campaign facts handed to the model."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    niche: str = Field(..., min_length=1)
    country: str
    traffic_source: str
    funnel_type: str
    budget: Optional[float] = Field(
        None, ge=0, description="Planned spend; None when the user never set one."
    )
    start_date: date
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _check_period(self) -> "OfferContext":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be earlier than start_date")
        return self


class MetricsContext(BaseModel):
    """Measured campaign performance; absent measurements are zero."""

    model_config = ConfigDict(frozen=True)

    impressions: int = Field(0, ge=0)
    clicks: int = Field(0, ge=0)
    leads: int = Field(0, ge=0)
    sales: int = Field(0, ge=0)
    ctr: float = Field(0, ge=0)
    cpc: float = Field(0, ge=0)
    cpm: float = Field(0, ge=0)
    conversion_rate: float = Field(0, ge=0)
    roas: float = Field(0, ge=0)
    aov: float = Field(0, ge=0)
    revenue: float = Field(0, ge=0)
    cost: float = Field(0, ge=0)


class BenchmarkContext(BaseModel):
    """Market reference range for a single metric."""

    model_config = ConfigDict(frozen=True)

    metric_name: BenchmarkMetric
    min_value: float
    ideal_value: float
    max_value: float

    @model_validator(mode="after")
    def _check_range(self) -> "BenchmarkContext":
        if not self.min_value <= self.ideal_value <= self.max_value:
            raise ValueError("expected min_value <= ideal_value <= max_value")
        return self


class AnalysisInput(BaseModel):
    """Immutable bundle of everything the model is allowed to see."""

    model_config = ConfigDict(frozen=True)

    offer: OfferContext
    metrics: MetricsContext
    benchmarks: Tuple[BenchmarkContext, ...] = ()


class Bottleneck(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    stage: BottleneckStage
    metric: StrictStr
    current_value: Number
    benchmark_value: Number
    severity: Severity
    explanation: StrictStr = Field(..., min_length=10)


class ActionItem(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    priority: StrictInt = Field(..., gt=0)
    action: StrictStr = Field(..., min_length=10)
    expected_impact: StrictStr = Field(..., min_length=3)
    difficulty: Difficulty


class AnalysisOutput(BaseModel):
    """Structured verdict returned by the model."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    summary: StrictStr = Field(..., min_length=10)
    validation_status: ValidationStatus
    validation_explanation: StrictStr = Field(..., min_length=10)
    bottlenecks: List[Bottleneck] = Field(..., max_length=MAX_BOTTLENECKS)
    action_plan: List[ActionItem]
    missing_data: List[StrictStr]
    next_test_recommendations: StrictStr = Field(..., min_length=10)


@dataclass(frozen=True, slots=True)
class OutputValidation:
    """Outcome of checking a parsed reply against ``AnalysisOutput``."""

    analysis: Optional[AnalysisOutput]
    violations: Tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return self.analysis is not None


_UNION_TAGS = frozenset(
    {"int", "float", "str", "strict-int", "strict-float", "strict-str"}
)


def _error_path(loc: Tuple[Union[int, str], ...]) -> str:
    # Union members show up as trailing tags (e.g. "int", "float"); the field
    # path is everything before them.
    parts: list[str] = []
    for item in loc:
        if isinstance(item, str) and item in _UNION_TAGS and parts:
            break
        parts.append(str(item))
    return ".".join(parts) or "<root>"


def validate_analysis_output(payload: Any) -> OutputValidation:
    """Validate a decoded JSON payload without raising."""
    try:
        analysis = AnalysisOutput.model_validate(payload)
    except ValidationError as exc:
        violations: list[str] = []
        for error in exc.errors():
            path = _error_path(tuple(error.get("loc", ())))
            if path not in violations:
                violations.append(path)
        return OutputValidation(analysis=None, violations=tuple(violations))
    return OutputValidation(analysis=analysis)


__all__ = [
    "ActionItem",
    "AnalysisInput",
    "AnalysisOutput",
    "BenchmarkContext",
    "BenchmarkMetric",
    "Bottleneck",
    "MAX_BOTTLENECKS",
    "MetricsContext",
    "OfferContext",
    "OutputValidation",
    "validate_analysis_output",
]
