"""API client for the Taskboard server."""

import asyncio
from typing import Any

import httpx

from taskboard_cli.config import get_config_manager
from taskboard_cli.exceptions import (
    NetworkOrServerError,
    SessionExpiredError,
    ValidationError,
)
from taskboard_cli.utils.logger import get_logger


def _error_message(response: httpx.Response) -> str:
    """Extract the server's error message, falling back to the status line."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"HTTP {response.status_code}: {response.reason_phrase or 'An error occurred'}"


def _to_error(error: httpx.HTTPStatusError) -> NetworkOrServerError:
    """Map an HTTP status failure onto the client error kinds."""
    response = error.response
    status = response.status_code
    message = _error_message(response)
    if status == 401:
        return SessionExpiredError(message, status_code=status)
    if status in (400, 422):
        return ValidationError(message, status_code=status)
    return NetworkOrServerError(message, status_code=status)


class APIClient:
    """HTTP client for the Taskboard API."""

    def __init__(self, profile: str = "default"):
        self.config_manager = get_config_manager(profile)
        self.config = self.config_manager.config
        self.base_url = self.config_manager.api_endpoint
        self.timeout = self.config.api.timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "APIClient":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager and ensure the client is closed."""
        await self.close()

    def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers, with the bearer token when one is configured."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        token = self.config_manager.api_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                follow_redirects=True,
                headers=self._get_headers(),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        retry: int | None = None,
    ) -> httpx.Response:
        """Make an HTTP request to the API.

        Raises:
            SessionExpiredError: On 401.
            ValidationError: On 400/422.
            NetworkOrServerError: On any other failure, after retries.
        """
        if retry is None:
            retry = self.config.api.retry

        logger = get_logger("api")
        client = await self._get_client()
        url = f"{path}" if path.startswith("/") else f"/{path}"

        last_error: NetworkOrServerError | None = None
        for attempt in range(retry + 1):
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    json=json,
                    params=params,
                )
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                error = _to_error(e)
                # Don't retry client errors (4xx)
                if 400 <= e.response.status_code < 500:
                    raise error from e
                last_error = error
            except httpx.RequestError as e:
                last_error = NetworkOrServerError(f"Request failed: {e}")
                last_error.__cause__ = e

            logger.warning(
                "%s %s failed (attempt %d/%d): %s",
                method,
                url,
                attempt + 1,
                retry + 1,
                last_error,
            )
            if attempt < retry:
                # Simple exponential backoff
                await asyncio.sleep(2**attempt)

        raise last_error or NetworkOrServerError("Request failed after all retries")

    async def get(
        self, path: str, *, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, params=params)

    async def post(
        self, path: str, *, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a POST request."""
        return await self.request("POST", path, json=json)

    async def put(
        self, path: str, *, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a PUT request."""
        return await self.request("PUT", path, json=json)

    async def patch(
        self, path: str, *, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a PATCH request."""
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> httpx.Response:
        """Make a DELETE request."""
        return await self.request("DELETE", path)


def get_client(profile: str = "default") -> APIClient:
    """Get an API client instance."""
    return APIClient(profile)
