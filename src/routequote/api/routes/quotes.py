"""Quote planning endpoints."""

from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import APIRouter, HTTPException, status

from ...schemas.quotes import (
    QuoteFinalizeResponse,
    QuotePlanRequest,
    QuoteRecalculateRequest,
    QuoteRegenerateRequest,
    QuoteResponse,
    SegmentAddRequest,
    SegmentProviderRequest,
    SegmentRemoveRequest,
    SegmentUpdateRequest,
    ValidationReportModel,
)
from ...services.planning import service

router = APIRouter(prefix="/quotes", tags=["quotes"])


def _run(action: str, operation: Callable[..., Any], *args: Any) -> Any:
    try:
        return operation(*args)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error trying to {action}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {action}: {str(exc)}",
        ) from exc


@router.post("/plan", response_model=QuoteResponse, status_code=status.HTTP_200_OK)
def plan(payload: QuotePlanRequest) -> QuoteResponse:
    return _run("plan quote", service.plan_quote, payload)


@router.post("/recalculate", response_model=QuoteResponse, status_code=status.HTTP_200_OK)
def recalculate(payload: QuoteRecalculateRequest) -> QuoteResponse:
    return _run("recalculate quote", service.recalculate_quote, payload)


@router.post("/regenerate", response_model=QuoteResponse, status_code=status.HTTP_200_OK)
def regenerate(payload: QuoteRegenerateRequest) -> QuoteResponse:
    """Rebuild the legs from the topology rules. Manual segment edits are lost."""
    return _run("regenerate segments", service.regenerate_quote, payload)


@router.post("/segments/add", response_model=QuoteResponse, status_code=status.HTTP_200_OK)
def add_segment(payload: SegmentAddRequest) -> QuoteResponse:
    return _run("add segment", service.add_quote_segment, payload)


@router.post("/segments/remove", response_model=QuoteResponse, status_code=status.HTTP_200_OK)
def remove_segment(payload: SegmentRemoveRequest) -> QuoteResponse:
    return _run("remove segment", service.remove_quote_segment, payload)


@router.post("/segments/update", response_model=QuoteResponse, status_code=status.HTTP_200_OK)
def update_segment(payload: SegmentUpdateRequest) -> QuoteResponse:
    return _run("update segment", service.update_quote_segment, payload)


@router.post("/segments/provider", response_model=QuoteResponse, status_code=status.HTTP_200_OK)
def switch_provider(payload: SegmentProviderRequest) -> QuoteResponse:
    return _run("switch segment provider", service.switch_segment_provider, payload)


@router.post("/validate", response_model=ValidationReportModel, status_code=status.HTTP_200_OK)
def validate(payload: QuoteRecalculateRequest) -> ValidationReportModel:
    return _run("validate quote", service.validate_quote_payload, payload)


@router.post("/finalize", response_model=QuoteFinalizeResponse, status_code=status.HTTP_200_OK)
def finalize(payload: QuoteRecalculateRequest) -> QuoteFinalizeResponse:
    return _run("finalize quote", service.finalize_quote, payload)
