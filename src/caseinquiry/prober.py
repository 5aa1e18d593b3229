"""Liveness probe run before any costly call to the analysis service."""

from __future__ import annotations

import logging

import httpx

from caseinquiry.transport import Transport

logger = logging.getLogger(__name__)


class LivenessProber:
    """Checks that the analysis service answers its health endpoint."""

    def __init__(self, transport: Transport, path: str = "/health", timeout: float = 2.0) -> None:
        self._transport = transport
        self._path = path
        self._timeout = timeout

    async def probe(self) -> bool:
        """Return True only if the health endpoint answers 2xx within the timeout."""
        try:
            await self._transport.get(self._path, timeout=self._timeout)
        except Exception as exc:
            status = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
            logger.warning(
                "Server health check failed: %s (%s, status=%s)",
                exc,
                type(exc).__name__,
                status,
            )
            return False
        return True
