"""
HTTP transport for forge clients.

Handles URL building, authentication headers, JSON decoding and error
response parsing for every HTTP-backed forge client. Requests are never
retried: a failed call is final for the unit of work that issued it.
"""

import time
from typing import Any

import httpx

from forgescan.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ForgeScanError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from forgescan.logging import log_http_request, log_http_response

USER_AGENT = "forgescan/0.1"

# Bytes of an error body kept for diagnostics
_ERROR_BODY_LIMIT = 512


class HTTPTransport:
    """
    HTTP transport shared by the GitHub, GitLab and Forgejo clients.

    Handles:
    - Base URL joining that preserves an API path prefix (e.g. "/api/v4")
    - Authorization header with a forge-specific prefix ("Bearer ", "token ")
    - Forge-specific custom headers
    - Error response parsing into typed exceptions
    """

    def __init__(
        self,
        api_url: str,
        token: str | None = None,
        auth_header_prefix: str = "Bearer ",
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            api_url: API base URL (e.g., "https://gitlab.example.com/api/v4")
            token: API token; no Authorization header is sent when None
            auth_header_prefix: Prefix placed before the token
            headers: Extra headers sent with every request
            timeout: Request timeout in seconds
            client: Pre-built httpx client (tests inject one with a MockTransport)
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

        default_headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if token:
            default_headers["Authorization"] = f"{auth_header_prefix}{token}"
        default_headers.update(headers or {})

        if client is None:
            client = httpx.Client(timeout=timeout)
        client.base_url = self.api_url
        client.headers.update(default_headers)
        self._client = client

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make a request and decode the JSON response.

        Args:
            method: HTTP method
            endpoint: Path relative to the API URL; may carry a query string
            body: JSON request body

        Returns:
            Decoded JSON (None for empty bodies)

        Raises:
            ForgeScanError: On API or network errors
        """
        data, _ = self.request_with_headers(method, endpoint, body)
        return data

    def request_with_headers(
        self,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None = None,
    ) -> tuple[Any, httpx.Headers]:
        """Like ``request`` but also return the response headers (for pagination)."""
        response = self._send(method, endpoint, body)

        if response.status_code >= 400:
            raise self._parse_error_response(response)

        if not response.content:
            return None, response.headers

        try:
            return response.json(), response.headers
        except ValueError as e:
            raise ServerError("DECODE_ERROR", f"failed to decode response from {response.request.url}") from e

    def path_exists(self, endpoint: str) -> bool:
        """
        Probe an endpoint that returns 200 when a path exists and 404 when not.

        Raises:
            ForgeScanError: For any other status
        """
        response = self._send("GET", endpoint, None)

        if response.status_code == 404:
            return False
        if response.status_code >= 400:
            raise self._parse_error_response(response)
        return True

    def _send(
        self,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None,
    ) -> httpx.Response:
        url = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        log_http_request(method, f"{self.api_url}{url}", dict(self._client.headers), body)

        started = time.monotonic()
        try:
            response = self._client.request(method, url, json=body)
        except httpx.RequestError as e:
            raise NetworkError("CONNECTION_ERROR", f"{method} {url}: {e}") from e

        log_http_response(response.status_code, str(response.request.url), (time.monotonic() - started) * 1000)
        return response

    def _parse_error_response(self, response: httpx.Response) -> ForgeScanError:
        """
        Parse an error response into a typed exception.

        Args:
            response: HTTP response with error status

        Returns:
            Appropriate ForgeScanError subclass
        """
        body = response.text[:_ERROR_BODY_LIMIT].replace("\n", " ")
        try:
            data = response.json()
        except ValueError:
            data = {}

        detail = ""
        if isinstance(data, dict):
            detail = str(data.get("message") or data.get("error") or "")

        code = f"HTTP_{response.status_code}"
        message = f"forge API error {response.status_code} for {response.request.url}"
        if detail:
            message += f": {detail}"
        elif body:
            message += f": {body}"
        request_id = response.headers.get("X-GitHub-Request-Id") or response.headers.get("X-Request-Id")

        status_code = response.status_code

        if status_code == 401:
            return AuthenticationError(code, message, request_id)
        elif status_code == 403:
            return AuthorizationError(code, message, request_id)
        elif status_code == 404:
            return NotFoundError(code, message, request_id)
        elif status_code == 429:
            retry_after_str = response.headers.get("Retry-After", "60")
            try:
                retry_after = int(retry_after_str)
            except ValueError:
                retry_after = 60
            return RateLimitedError(code, message, retry_after, request_id)
        elif status_code >= 500:
            return ServerError(code, message, request_id)
        else:
            return ValidationError(code, message, request_id)
