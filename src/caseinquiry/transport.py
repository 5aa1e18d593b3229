"""HTTP transport for the analysis service: timeouts and retry of failures before sending."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

# Raised before any byte of the request left the client, so a resend cannot
# apply the request twice.
PRE_SEND_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout, httpx.PoolTimeout)


class CrossOriginRejected(httpx.HTTPError):
    """The response does not grant the configured client origin."""


class Transport:
    """Thin async wrapper around ``httpx.AsyncClient``.

    Failures raised before the request was sent (connection refused,
    connect or pool timeouts) are retried up to ``retry_attempts`` times,
    waiting ``attempt * backoff`` seconds before each retry. Read and write
    timeouts or dropped connections are never retried, since the service
    may already have received the request. Any response with a non-2xx
    status is raised as ``httpx.HTTPStatusError`` and never retried.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 60.0,
        retry_attempts: int = 3,
        retry_backoff: float = 1.0,
        origin: str = "",
        http_transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._retry_attempts = retry_attempts
        self._retry_backoff = retry_backoff
        self._origin = origin
        self._sleep = sleep

        headers = {"Origin": origin} if origin else None
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=http_transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, retrying failures that happened before it was sent.

        Args:
            method: HTTP method.
            path: Path relative to the service base URL.
            timeout: Per-call timeout in seconds; the client default when None.
            **kwargs: Passed through to ``httpx.AsyncClient.request``.

        Returns:
            The successful (2xx) response.
        """
        if timeout is not None:
            kwargs["timeout"] = timeout

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(PRE_SEND_ERRORS),
            stop=stop_after_attempt(self._retry_attempts + 1),
            wait=wait_incrementing(start=self._retry_backoff, increment=self._retry_backoff),
            sleep=self._sleep,
            before_sleep=lambda state: _log_retry(method, path, state),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self._client.request(method, path, **kwargs)

        self._check_origin(response)
        response.raise_for_status()
        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    def _check_origin(self, response: httpx.Response) -> None:
        if not self._origin:
            return
        allowed = response.headers.get("access-control-allow-origin")
        if allowed not in ("*", self._origin):
            raise CrossOriginRejected(
                f"Access-Control-Allow-Origin is {allowed!r}, "
                f"origin {self._origin!r} is not allowed"
            )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()


def _log_retry(method: str, path: str, retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        "%s %s failed before the request was sent (%s), retry %d in %.1fs",
        method,
        path,
        type(exc).__name__,
        retry_state.attempt_number,
        delay,
    )
