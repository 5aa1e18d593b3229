"""Single-document upload lifecycle."""

from __future__ import annotations

import asyncio
import logging

import httpx
import pydantic

from caseinquiry.classifier import classify
from caseinquiry.errors import InquiryError, ServiceUnavailableError, ValidationError
from caseinquiry.models import (
    Document,
    DocumentIdentity,
    UploadOutcome,
    UploadResponse,
    UploadState,
)
from caseinquiry.prober import LivenessProber
from caseinquiry.transport import Transport

logger = logging.getLogger(__name__)

NO_FILE_MESSAGE = "Please select a file to upload."


class UploadCoordinator:
    """Owns the selected Document and the outcome of uploading it.

    States: Idle -> Probing -> Uploading -> Succeeded | Failed. Only one
    upload runs at a time; selecting a new Document while one is in
    flight supersedes it, and its result is discarded when it resolves.
    """

    def __init__(
        self,
        transport: Transport,
        prober: LivenessProber,
        *,
        path: str = "/upload",
        timeout: float = 30.0,
    ) -> None:
        self._transport = transport
        self._prober = prober
        self._path = path
        self._timeout = timeout

        self.state = UploadState.IDLE
        self.document: Document | None = None
        self.outcome = UploadOutcome()
        self.identity: DocumentIdentity | None = None
        self.last_error: InquiryError | None = None
        self._generation = 0
        # Held for the whole network exchange, including superseded attempts
        self._lock = asyncio.Lock()

    @property
    def is_uploading(self) -> bool:
        return self.state in (UploadState.PROBING, UploadState.UPLOADING)

    def select_document(self, document: Document) -> None:
        """Replace the selected Document and forget any prior outcome."""
        self._generation += 1
        self.document = document
        self.state = UploadState.IDLE
        self.outcome = UploadOutcome()
        self.identity = None
        self.last_error = None
        logger.debug("Selected %s (%d bytes)", document.filename, len(document.content))

    async def upload(self) -> UploadOutcome:
        """Check the service is up, then submit the selected Document.

        Returns the resulting outcome. A call made while another upload is
        in flight changes nothing and returns the in-progress outcome.
        """
        if self.is_uploading:
            logger.debug("Upload already in progress, ignoring")
            return self.outcome

        document = self.document
        if document is None:
            return self._fail(ValidationError(NO_FILE_MESSAGE))

        generation = self._generation
        self.state = UploadState.PROBING
        self.outcome = UploadOutcome.in_progress()
        self.last_error = None

        async with self._lock:
            try:
                return await self._run(document, generation)
            finally:
                if self.is_uploading and generation == self._generation:
                    self._fail(InquiryError(reason="upload attempt aborted"))

    async def _run(self, document: Document, generation: int) -> UploadOutcome:
        if generation != self._generation:
            return self._superseded(document)
        if not await self._prober.probe():
            if generation != self._generation:
                return self._superseded(document)
            return self._fail(
                ServiceUnavailableError.for_service(
                    self._transport.base_url, reason="health check failed"
                )
            )
        if generation != self._generation:
            return self._superseded(document)

        self.state = UploadState.UPLOADING
        try:
            result = await self._submit(document)
        except (httpx.HTTPError, pydantic.ValidationError) as exc:
            if generation != self._generation:
                return self._superseded(document)
            return self._fail(
                classify(exc, operation="upload", base_url=self._transport.base_url)
            )
        if generation != self._generation:
            return self._superseded(document)

        self.identity = DocumentIdentity(
            case_id=result.case_id,
            filename=result.filename or document.filename,
        )
        self.state = UploadState.SUCCEEDED
        self.outcome = UploadOutcome.succeeded(self.identity, result.summary)
        logger.info("Uploaded %s as case %s", self.identity.filename, result.case_id)
        return self.outcome

    async def _submit(self, document: Document) -> UploadResponse:
        response = await self._transport.post(
            self._path,
            files={"file": (document.filename, document.content, document.media_type)},
            timeout=self._timeout,
        )
        logger.debug("Upload response: %s", response.text[:500])
        return UploadResponse.model_validate_json(response.content)

    def _fail(self, error: InquiryError) -> UploadOutcome:
        self.state = UploadState.FAILED
        self.last_error = error
        self.outcome = UploadOutcome.failed(error.user_message)
        logger.info("Upload failed: %s", error.user_message)
        return self.outcome

    def _superseded(self, document: Document) -> UploadOutcome:
        logger.info("Discarding result for %s, a new document was selected", document.filename)
        return self.outcome

