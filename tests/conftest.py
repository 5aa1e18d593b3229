"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest
from fastapi import FastAPI, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from caseinquiry.config import Settings
from caseinquiry.models import Document
from caseinquiry.session import InquirySession

BASE_URL = "http://testserver"


class FakeAnalysisService:
    """In-process stand-in for the remote analysis service.

    Responses are plain attributes so each test can reshape them. Setting
    ``upload_gate`` or ``chat_gate`` holds the matching endpoint until the
    event is set.
    """

    def __init__(self) -> None:
        self.healthy = True
        self.upload_status = 200
        self.upload_body: Any = {"summary": "S", "case_id": "C123", "filename": "f.pdf"}
        self.chat_status = 200
        self.chat_body: Any = {"reply": "Pending"}
        self.upload_gate: asyncio.Event | None = None
        self.chat_gate: asyncio.Event | None = None
        self.calls: list[str] = []
        self.uploads: list[dict[str, Any]] = []
        self.chats: list[dict[str, Any]] = []

    def create_app(self) -> FastAPI:
        app = FastAPI()

        @app.get("/health")
        async def health() -> Response:
            self.calls.append("health")
            if not self.healthy:
                return JSONResponse({"status": "down"}, status_code=503)
            return JSONResponse({"status": "ok"})

        @app.post("/upload")
        async def upload(file: UploadFile) -> Response:
            self.calls.append("upload")
            self.uploads.append(
                {
                    "filename": file.filename,
                    "content": await file.read(),
                    "content_type": file.content_type,
                }
            )
            if self.upload_gate is not None:
                await self.upload_gate.wait()
            return _respond(self.upload_body, self.upload_status)

        @app.post("/chat")
        async def chat(request: Request) -> Response:
            self.calls.append("chat")
            self.chats.append(await request.json())
            if self.chat_gate is not None:
                await self.chat_gate.wait()
            return _respond(self.chat_body, self.chat_status)

        return app


def _respond(body: Any, status: int) -> Response:
    if isinstance(body, Response):
        return body
    return JSONResponse(body, status_code=status)


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at the in-process service, isolated from any .env."""
    return Settings(_env_file=None, service_base_url=BASE_URL)  # type: ignore[call-arg]


@pytest.fixture
def service() -> FakeAnalysisService:
    return FakeAnalysisService()


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by the retry loop, recorded instead of waited."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep


@pytest.fixture
async def session(settings, service, fake_sleep):
    """An InquirySession talking to the fake service over ASGI."""
    transport = httpx.ASGITransport(app=service.create_app())
    async with InquirySession(settings, http_transport=transport, sleep=fake_sleep) as s:
        yield s


@pytest.fixture
def document() -> Document:
    return Document(content=b"%PDF-1.4 brief", filename="brief.pdf", media_type="application/pdf")


@pytest.fixture
def refused_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def refusing_transport(refused_requests) -> httpx.MockTransport:
    """A transport whose every request fails as connection refused."""

    def handler(request: httpx.Request) -> httpx.Response:
        refused_requests.append(request)
        raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

    return httpx.MockTransport(handler)
