"""Inquiry turns scoped to one uploaded document."""

from __future__ import annotations

import asyncio
import contextlib
import logging

import httpx
import pydantic

from caseinquiry.classifier import classify
from caseinquiry.errors import InquiryError, NoActiveDocumentError, ValidationError
from caseinquiry.models import ChatReply, ChatRequest, ConversationTurn, DocumentIdentity, Role
from caseinquiry.transport import Transport

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "Please enter a message to proceed."


class ConversationManager:
    """Append-only log of Operator and Assistant turns for the current document.

    Every accepted ``ask`` adds one Operator turn before the chat call and
    exactly one Assistant turn after it, whether the call succeeded or
    not. With ``serialize=True`` concurrent asks run one at a time, so
    replies can never arrive out of submission order.
    """

    def __init__(self, transport: Transport, *, path: str = "/chat", serialize: bool = True) -> None:
        self._transport = transport
        self._path = path
        self._lock = asyncio.Lock() if serialize else None
        self._generation = 0

        self.identity: DocumentIdentity | None = None
        self.log: list[ConversationTurn] = []
        self.pending_input = ""
        self.last_error: InquiryError | None = None
        self.last_error_message = ""

    def reset(self, identity: DocumentIdentity | None) -> None:
        """Start a fresh conversation bound to ``identity``."""
        self._generation += 1
        self.identity = identity
        self.log = []
        self.last_error = None
        self.last_error_message = ""

    def set_pending_input(self, text: str) -> None:
        self.pending_input = text

    async def ask(self, text: str | None = None) -> ConversationTurn | None:
        """Send an inquiry about the current document.

        Args:
            text: The inquiry; the pending input is used when omitted.

        Returns:
            The Assistant turn appended for this inquiry, or None when the
            inquiry was rejected before anything was sent.
        """
        if text is None:
            text = self.pending_input
        if not text.strip():
            self._record(ValidationError(EMPTY_MESSAGE))
            return None
        if self.identity is None:
            self._record(NoActiveDocumentError())
            return None

        self.pending_input = ""
        self.last_error = None
        self.last_error_message = ""

        identity, generation = self.identity, self._generation
        guard = self._lock if self._lock is not None else contextlib.nullcontext()
        async with guard:
            if generation != self._generation:
                logger.info("Dropping inquiry, conversation was reset while it waited")
                return None
            return await self._exchange(text, identity, generation)

    async def _exchange(
        self, text: str, identity: DocumentIdentity, generation: int
    ) -> ConversationTurn | None:
        self.log.append(ConversationTurn(role=Role.OPERATOR, content=text))

        request = ChatRequest(message=text, case_id=identity.case_id)
        try:
            response = await self._transport.post(self._path, json=request.model_dump())
            content = ChatReply.model_validate_json(response.content).reply
        except (httpx.HTTPError, pydantic.ValidationError) as exc:
            error = classify(exc, operation="chat", base_url=self._transport.base_url)
            content = error.user_message
            if generation == self._generation:
                self._record(error)
        else:
            logger.debug("Reply for case %s: %d chars", identity.case_id, len(content))

        if generation != self._generation:
            logger.info("Discarding reply for case %s, conversation was reset", identity.case_id)
            return None
        turn = ConversationTurn(role=Role.ASSISTANT, content=content)
        self.log.append(turn)
        return turn

    def _record(self, error: InquiryError) -> None:
        self.last_error = error
        self.last_error_message = error.user_message
