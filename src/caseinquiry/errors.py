"""Failure taxonomy shared by the upload and conversation flows.

Every error carries a fixed ``user_message`` that is safe to show to the
operator, and a ``detail`` mapping that is only ever written to the log.
"""

from __future__ import annotations

from typing import Any


class InquiryError(Exception):
    """Base class for every failure the session recovers from."""

    default_message = "An unexpected error occurred."

    def __init__(self, user_message: str | None = None, **detail: Any) -> None:
        self.user_message = user_message or self.default_message
        self.detail: dict[str, Any] = detail
        super().__init__(self.user_message)


class ValidationError(InquiryError):
    """A client-side precondition was not met; the network was never contacted."""

    default_message = "The request is not valid."


class NoActiveDocumentError(ValidationError):
    """An inquiry was attempted before any document was uploaded."""

    default_message = "Please upload a document before asking a question."


class ServiceUnavailableError(InquiryError):
    """No response was received from the analysis service."""

    default_message = (
        "The analysis service is not reachable. "
        "Please make sure the server is running and try again."
    )

    @classmethod
    def for_service(cls, base_url: str, **detail: Any) -> ServiceUnavailableError:
        return cls(
            f"Backend server is not running. Please start the server on "
            f"{base_url} and try again.",
            **detail,
        )


class ServiceReportedError(InquiryError):
    """The service answered with an ``{"error": ...}`` payload, surfaced verbatim."""


class MalformedResponseError(InquiryError):
    """A response arrived but does not honour the service contract."""

    default_message = "The analysis service returned an unexpected response."


class CrossOriginError(InquiryError):
    """The service does not allow requests from this client's origin."""

    default_message = (
        "CORS error: the client origin does not match the origin allowed by "
        "the analysis service. Check the diagnostic log for details."
    )
