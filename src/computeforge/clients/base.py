from __future__ import annotations

from typing import Any

import httpx
import structlog
from circuitbreaker import CircuitBreaker
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger()


class HTTPClientError(Exception):
    """Base class for HTTP failures raised by BaseHTTPClient."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RetryableHTTPError(HTTPClientError):
    """HTTP errors that may succeed on a later attempt."""


class PermanentHTTPError(HTTPClientError):
    """HTTP errors that should not be retried."""


class NotFoundHTTPError(PermanentHTTPError):
    """The requested resource does not exist (HTTP 404)."""


def is_retryable_status(status_code: int) -> bool:
    """Determine if HTTP status code is retryable."""
    return status_code in (408, 429, 500, 502, 503, 504)


class BaseHTTPClient:
    """Base HTTP client with bounded retries and a per-client circuit breaker.

    ``max_retries`` is the total number of attempts; ``1`` disables retrying.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        circuit_failure_threshold: int = 5,
        circuit_recovery_timeout: int = 60,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._backoff_factor = backoff_factor
        self._transport = transport
        self._breaker = CircuitBreaker(
            failure_threshold=circuit_failure_threshold,
            recovery_timeout=circuit_recovery_timeout,
            expected_exception=RetryableHTTPError,
            name=f"{type(self).__name__}:{self._base_url}",
        )
        self._guarded_send = self._breaker(self._send)

    def _headers(self) -> dict[str, str]:
        """Override to provide custom headers."""
        return {"Content-Type": "application/json"}

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}{path}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Execute HTTP request with retry and circuit breaker."""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(RetryableHTTPError),
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=self._backoff_factor, min=0, max=30),
            reraise=True,
        ):
            with attempt:
                data = await self._guarded_send(
                    method, path, params=params, json=json, headers=headers
                )
        return data

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        url = self._url(path)
        req_headers = self._headers()
        if headers:
            req_headers.update(headers)

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=req_headers,
                )
        except (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError) as exc:
            logger.warning("http_network_error", method=method, url=url, error=str(exc))
            raise RetryableHTTPError(str(exc)) from exc

        if is_retryable_status(response.status_code):
            logger.warning(
                "http_retryable_error",
                status=response.status_code,
                method=method,
                url=url,
            )
            raise RetryableHTTPError(
                f"HTTP {response.status_code}: {response.text}", response.status_code
            )

        if response.status_code == 404:
            raise NotFoundHTTPError(f"HTTP 404: {method} {url}", 404)

        if response.is_error:
            logger.error(
                "http_permanent_error",
                status=response.status_code,
                method=method,
                url=url,
                error=response.text,
            )
            raise PermanentHTTPError(
                f"HTTP {response.status_code}: {response.text}", response.status_code
            )

        return response.json() if response.content else {}

    async def get(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Execute GET request."""
        return await self._request("GET", path, params=params, headers=headers)

    async def post(
        self,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Execute POST request."""
        return await self._request("POST", path, json=json, headers=headers)
