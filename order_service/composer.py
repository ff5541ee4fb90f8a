"""Render an Outcome as the external JSON response."""

from __future__ import annotations

from typing import assert_never

from fastapi.responses import JSONResponse

from order_service.outcomes import (
    Cancelled,
    ErrorCode,
    NotFound,
    Outcome,
    Success,
    UpstreamUnavailable,
)

# nginx's "client closed request"; there is no standard code for it.
CLIENT_CLOSED_REQUEST = 499


def outcome_status(outcome: Outcome) -> int:
    if isinstance(outcome, Success):
        return 200
    if isinstance(outcome, NotFound):
        return 404
    if isinstance(outcome, UpstreamUnavailable):
        return 503
    if isinstance(outcome, Cancelled):
        return CLIENT_CLOSED_REQUEST
    assert_never(outcome)


def outcome_body(outcome: Outcome) -> dict:
    if isinstance(outcome, Success):
        return outcome.summary.model_dump(mode="json", by_alias=True)
    if isinstance(outcome, NotFound):
        return {"error": outcome.reason, "code": outcome.code.value}
    if isinstance(outcome, UpstreamUnavailable):
        return {"detail": outcome.reason, "code": outcome.code.value}
    if isinstance(outcome, Cancelled):
        return {"detail": outcome.reason, "code": ErrorCode.REQUEST_CANCELLED.value}
    assert_never(outcome)


def render_outcome(outcome: Outcome) -> JSONResponse:
    return JSONResponse(status_code=outcome_status(outcome), content=outcome_body(outcome))
