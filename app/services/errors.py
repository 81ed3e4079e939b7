"""Domain errors raised by the offer analysis pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class OfferAnalysisError(Exception):
    """Base class for failures surfaced to the API layer."""


class OfferNotFoundError(OfferAnalysisError):
    def __init__(self, offer_id: str) -> None:
        super().__init__(f"Offer {offer_id} not found")
        self.offer_id = offer_id


class ReportNotFoundError(OfferAnalysisError):
    def __init__(self, report_id: str) -> None:
        super().__init__(f"Report {report_id} not found")
        self.report_id = report_id


class OfferAccessDeniedError(OfferAnalysisError):
    def __init__(self, offer_id: str) -> None:
        super().__init__(f"No permission to access offer {offer_id}")
        self.offer_id = offer_id


class ReportAccessDeniedError(OfferAnalysisError):
    def __init__(self, report_id: str) -> None:
        super().__init__(f"No permission to access report {report_id}")
        self.report_id = report_id


class RateLimitedError(OfferAnalysisError):
    """The user exhausted their analysis quota for the current window."""

    def __init__(self, *, max_requests: int, window_seconds: float) -> None:
        minutes = window_seconds / 60
        super().__init__(
            f"Limit of {max_requests} analyses per {minutes:g} minutes reached"
        )
        self.max_requests = max_requests
        self.window_seconds = window_seconds


class MissingMetricsError(OfferAnalysisError):
    """An offer has no metrics snapshot and therefore cannot be analyzed."""

    def __init__(self, offer_id: str | None = None) -> None:
        super().__init__(
            "Offer has no metrics. Add metrics before requesting an analysis."
        )
        self.offer_id = offer_id


class InvalidOfferDataError(OfferAnalysisError):
    """Stored offer or benchmark data cannot form a valid analysis context."""

    def __init__(self, offer_id: str, *, violations: Iterable[str] = ()) -> None:
        self.offer_id = offer_id
        self.violations = tuple(violations)
        message = f"Offer {offer_id} has invalid stored data"
        if self.violations:
            message = f"{message}: {', '.join(self.violations)}"
        super().__init__(message)


class ModelOutputFailure(str, Enum):
    EMPTY_RESPONSE = "empty_response"
    MALFORMED_JSON = "malformed_json"
    SCHEMA_VIOLATION = "schema_violation"


class ModelOutputInvalidError(OfferAnalysisError):
    """The model replied, but not with a usable analysis document."""

    def __init__(
        self,
        kind: ModelOutputFailure,
        *,
        violations: Iterable[str] = (),
        detail: str | None = None,
    ) -> None:
        self.kind = kind
        self.violations = tuple(violations)
        message = detail or {
            ModelOutputFailure.EMPTY_RESPONSE: "Model returned an empty response",
            ModelOutputFailure.MALFORMED_JSON: "Model returned malformed JSON",
            ModelOutputFailure.SCHEMA_VIOLATION: "Model returned an invalid analysis format",
        }[kind]
        if self.violations:
            message = f"{message}: {', '.join(self.violations)}"
        super().__init__(message)


__all__ = [
    "InvalidOfferDataError",
    "MissingMetricsError",
    "ModelOutputFailure",
    "ModelOutputInvalidError",
    "OfferAccessDeniedError",
    "OfferAnalysisError",
    "OfferNotFoundError",
    "RateLimitedError",
    "ReportAccessDeniedError",
    "ReportNotFoundError",
]
