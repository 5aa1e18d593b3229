"""The single owned object a presentation layer binds to."""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ConfigDict

from caseinquiry.config import Settings, get_settings
from caseinquiry.conversation import ConversationManager
from caseinquiry.models import (
    ConversationTurn,
    Document,
    OutcomeKind,
    UploadOutcome,
    UploadState,
)
from caseinquiry.prober import LivenessProber
from caseinquiry.transport import Sleep, Transport
from caseinquiry.upload import UploadCoordinator

logger = logging.getLogger(__name__)


class SessionState(BaseModel):
    """Read-only snapshot of everything a presentation layer displays."""

    model_config = ConfigDict(frozen=True)

    current_document: Document | None = None
    upload_state: UploadState = UploadState.IDLE
    upload_outcome: UploadOutcome = UploadOutcome()
    conversation_log: tuple[ConversationTurn, ...] = ()
    pending_input: str = ""
    last_error_message: str = ""
    is_uploading: bool = False


class InquirySession:
    """Wires the transport, prober, upload coordinator and conversation together.

    Usage::

        async with InquirySession() as session:
            session.select_document(Document.from_path("brief.pdf"))
            outcome = await session.upload()
            await session.ask("What is the verdict?")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        s = self.settings

        kwargs = {"sleep": sleep} if sleep is not None else {}
        self.transport = Transport(
            s.service_base_url,
            timeout=s.request_timeout_seconds,
            retry_attempts=s.retry_attempts,
            retry_backoff=s.retry_backoff_seconds,
            origin=s.client_origin,
            http_transport=http_transport,
            **kwargs,
        )
        self.prober = LivenessProber(
            self.transport, path=s.health_path, timeout=s.health_timeout_seconds
        )
        self.uploads = UploadCoordinator(
            self.transport,
            self.prober,
            path=s.upload_path,
            timeout=s.upload_timeout_seconds,
        )
        self.conversation = ConversationManager(
            self.transport, path=s.chat_path, serialize=s.serialize_inquiries
        )

    # ── Operations ───────────────────────────────────────────

    def select_document(self, document: Document) -> None:
        """Select a new Document; the previous upload and conversation are discarded."""
        self.uploads.select_document(document)
        self.conversation.reset(None)

    async def upload(self) -> UploadOutcome:
        """Upload the selected Document; on success a fresh conversation begins."""
        outcome = await self.uploads.upload()
        if outcome.kind == OutcomeKind.SUCCEEDED and outcome.identity is not None:
            self.conversation.reset(outcome.identity)
            logger.info("Started a new conversation for case %s", outcome.identity.case_id)
        return outcome

    def set_pending_input(self, text: str) -> None:
        self.conversation.set_pending_input(text)

    async def ask(self, text: str | None = None) -> ConversationTurn | None:
        """Ask about the uploaded document; see ConversationManager.ask."""
        return await self.conversation.ask(text)

    # ── Observable state ─────────────────────────────────────

    def state(self) -> SessionState:
        return SessionState(
            current_document=self.uploads.document,
            upload_state=self.uploads.state,
            upload_outcome=self.uploads.outcome,
            conversation_log=tuple(self.conversation.log),
            pending_input=self.conversation.pending_input,
            last_error_message=self.conversation.last_error_message,
            is_uploading=self.uploads.is_uploading,
        )

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> InquirySession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
