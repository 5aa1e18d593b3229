"""Data models for the inquiry session and the remote service contract."""

from __future__ import annotations

import mimetypes
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class UploadState(StrEnum):
    """State of the upload lifecycle."""

    IDLE = "idle"
    PROBING = "probing"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class OutcomeKind(StrEnum):
    """Tag of an UploadOutcome."""

    NOT_ATTEMPTED = "not_attempted"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Role(StrEnum):
    """Author of a conversation turn."""

    OPERATOR = "user"
    ASSISTANT = "assistant"


class Document(BaseModel):
    """A document selected by the operator for analysis."""

    model_config = ConfigDict(frozen=True)

    content: bytes
    filename: str
    media_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path) -> Document:
        """Read a local file, guessing its media type from the extension."""
        path = Path(path)
        media_type, _ = mimetypes.guess_type(path.name)
        return cls(
            content=path.read_bytes(),
            filename=path.name,
            media_type=media_type or "application/octet-stream",
        )


class DocumentIdentity(BaseModel):
    """Server-issued identifier of an uploaded document."""

    model_config = ConfigDict(frozen=True)

    case_id: str
    filename: str


class UploadOutcome(BaseModel):
    """Result of the most recent upload attempt."""

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind = OutcomeKind.NOT_ATTEMPTED
    identity: DocumentIdentity | None = None
    summary: str | None = None
    error_message: str | None = None

    @classmethod
    def in_progress(cls) -> UploadOutcome:
        return cls(kind=OutcomeKind.IN_PROGRESS)

    @classmethod
    def succeeded(cls, identity: DocumentIdentity, summary: str) -> UploadOutcome:
        return cls(kind=OutcomeKind.SUCCEEDED, identity=identity, summary=summary)

    @classmethod
    def failed(cls, error_message: str) -> UploadOutcome:
        return cls(kind=OutcomeKind.FAILED, error_message=error_message)


class ConversationTurn(BaseModel):
    """A message in the inquiry conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


# ── Remote service contract ──────────────────────────────────


class UploadResponse(BaseModel):
    """Body of a successful upload."""

    summary: str
    case_id: str = Field(min_length=1)
    filename: str | None = None


class ChatRequest(BaseModel):
    """Body sent to the chat endpoint."""

    message: str
    case_id: str


class ChatReply(BaseModel):
    """Body of a successful chat call."""

    reply: str


class ErrorPayload(BaseModel):
    """Structured error body returned by the service."""

    error: str
