"""Map raw transport and service failures onto the operator-facing taxonomy."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx
import pydantic

from caseinquiry.errors import (
    CrossOriginError,
    InquiryError,
    MalformedResponseError,
    ServiceReportedError,
    ServiceUnavailableError,
)
from caseinquiry.models import ErrorPayload

logger = logging.getLogger(__name__)

CROSS_ORIGIN_PATTERN = re.compile(r"access-control|\bcors\b|cross-origin", re.IGNORECASE)


def service_error_message(response: httpx.Response) -> str | None:
    """Return the ``error`` string of a structured error body, if there is one."""
    try:
        return ErrorPayload.model_validate_json(response.content).error
    except pydantic.ValidationError:
        return None


def classify(exc: Exception, *, operation: str, base_url: str = "") -> InquiryError:
    """Classify a failed call into exactly one InquiryError.

    Precedence: an explicit service error payload, then a cross-origin
    rejection, then a missing response, then any other contract violation.
    """
    if isinstance(exc, InquiryError):
        _log_diagnostics(exc, operation, exc.detail)
        return exc

    detail: dict[str, Any] = {"message": str(exc), "error_type": type(exc).__name__}
    response = exc.response if isinstance(exc, httpx.HTTPStatusError) else None
    if response is not None:
        detail["status"] = response.status_code
        detail["body"] = response.text[:500]

    error: InquiryError
    reported = service_error_message(response) if response is not None else None
    if reported:
        error = ServiceReportedError(reported, **detail)
    elif _looks_cross_origin(exc, response):
        detail["cors"] = (
            "Possible CORS issue: check that the client origin matches "
            "the origin allowed by the service."
        )
        error = CrossOriginError(**detail)
    elif isinstance(exc, httpx.TransportError):
        error = (
            ServiceUnavailableError.for_service(base_url, **detail)
            if base_url
            else ServiceUnavailableError(**detail)
        )
    elif isinstance(exc, (httpx.HTTPError, pydantic.ValidationError, json.JSONDecodeError)):
        error = MalformedResponseError(**detail)
    else:
        raise TypeError(f"Cannot classify {type(exc).__name__}") from exc

    _log_diagnostics(error, operation, detail)
    return error


def _looks_cross_origin(exc: Exception, response: httpx.Response | None) -> bool:
    if CROSS_ORIGIN_PATTERN.search(str(exc)):
        return True
    return response is not None and bool(CROSS_ORIGIN_PATTERN.search(response.text))


def _log_diagnostics(error: InquiryError, operation: str, detail: dict[str, Any]) -> None:
    logger.error(
        "%s failed: %s | %s",
        operation,
        type(error).__name__,
        json.dumps(detail, default=str),
    )
