"""
FastAPI routes for offer analysis and AI report history.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException

from app.clients import GeminiModelError
from app.dependencies import get_current_user_id, get_offer_analysis_service
from app.schemas import AnalyzeOfferResponse, OfferReportsResponse, ReportDetailResponse
from app.services import (
    InvalidOfferDataError,
    MissingMetricsError,
    ModelOutputInvalidError,
    OfferAccessDeniedError,
    OfferAnalysisError,
    OfferAnalysisService,
    OfferNotFoundError,
    RateLimitedError,
    ReportAccessDeniedError,
    ReportNotFoundError,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[OfferAnalysisError], HTTPStatus], ...] = (
    (OfferNotFoundError, HTTPStatus.NOT_FOUND),
    (ReportNotFoundError, HTTPStatus.NOT_FOUND),
    (OfferAccessDeniedError, HTTPStatus.FORBIDDEN),
    (ReportAccessDeniedError, HTTPStatus.FORBIDDEN),
    (RateLimitedError, HTTPStatus.TOO_MANY_REQUESTS),
    (MissingMetricsError, HTTPStatus.BAD_REQUEST),
    (InvalidOfferDataError, HTTPStatus.UNPROCESSABLE_ENTITY),
    (ModelOutputInvalidError, HTTPStatus.BAD_GATEWAY),
)


def _raise_http(exc: OfferAnalysisError) -> NoReturn:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            raise HTTPException(status_code=status, detail=str(exc)) from exc
    raise HTTPException(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR, detail=str(exc)
    ) from exc


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.post(
    "/offers/{offer_id}/analyze",
    status_code=HTTPStatus.OK,
    response_model=AnalyzeOfferResponse,
)
async def analyze_offer(
    offer_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[OfferAnalysisService, Depends(get_offer_analysis_service)],
) -> AnalyzeOfferResponse:
    """Generate an AI report for an offer that already has metrics."""
    try:
        return await service.analyze_offer(user_id=user_id, offer_id=offer_id)
    except ModelOutputInvalidError as exc:
        logger.error(
            "Rejected model output for offer %s (%s)", offer_id, exc.kind.value
        )
        _raise_http(exc)
    except OfferAnalysisError as exc:
        _raise_http(exc)
    except GeminiModelError as exc:
        logger.error("Gemini call failed for offer %s: %s", offer_id, exc)
        raise HTTPException(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc


@router.get(
    "/offers/{offer_id}/reports",
    status_code=HTTPStatus.OK,
    response_model=OfferReportsResponse,
)
async def list_offer_reports(
    offer_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[OfferAnalysisService, Depends(get_offer_analysis_service)],
) -> OfferReportsResponse:
    """List an offer's report history, most recent first."""
    try:
        return service.list_offer_reports(user_id=user_id, offer_id=offer_id)
    except OfferAnalysisError as exc:
        _raise_http(exc)


@router.get(
    "/reports/{report_id}",
    status_code=HTTPStatus.OK,
    response_model=ReportDetailResponse,
)
async def get_report(
    report_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[OfferAnalysisService, Depends(get_offer_analysis_service)],
) -> ReportDetailResponse:
    try:
        return service.get_report(user_id=user_id, report_id=report_id)
    except OfferAnalysisError as exc:
        _raise_http(exc)


__all__ = ["router"]
