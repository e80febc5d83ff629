"""GitHub GraphQL client - transport and error mapping."""

import asyncio
import json
import logging
from typing import Any

import httpx

from ..models import (
    APIConfiguration,
    AuthenticationError,
    GraphQLError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
)

logger = logging.getLogger(__name__)


class GitHubClientCore:
    """Executes GraphQL documents against the GitHub API.

    Every call is awaited to completion before returning; callers rely on
    that to keep their local view of a column in step with the remote one.
    Failures are never retried here.
    """

    def __init__(self, config: APIConfiguration, http_client: httpx.AsyncClient | None = None):
        self.config = config
        self.base_url = config.base_url
        self._client: httpx.AsyncClient | None = http_client
        self._owns_client = http_client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {
                "Authorization": f"Bearer {self.config.api_key.get_secret_value()}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
            self._client = httpx.AsyncClient(
                headers=headers,
                timeout=httpx.Timeout(self.config.timeout),
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "GitHubClientCore":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        """Map HTTP and GraphQL failures onto the exception taxonomy."""
        if response.status_code == 401:
            raise AuthenticationError("Invalid GitHub token or unauthorized access")

        if response.status_code == 429 or (
            response.status_code == 403
            and (response.headers.get("Retry-After") or response.headers.get("X-RateLimit-Remaining") == "0")
        ):
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None)

        if response.status_code >= 500:
            raise NetworkError(f"Server error: {response.status_code}")

        if response.status_code >= 400:
            try:
                error_data = response.json()
                message = error_data.get("message", "API request failed")
            except (json.JSONDecodeError, AttributeError):
                message = f"API error: {response.status_code}"
            raise NetworkError(message)

        try:
            body = response.json()
        except json.JSONDecodeError as err:
            raise NetworkError("Invalid response format from API") from err

        if not isinstance(body, dict):
            raise NetworkError("Invalid response format from API")
        if body.get("errors"):
            raise GraphQLError(body["errors"])
        return body.get("data") or {}

    async def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run one query or mutation and return its ``data`` record."""
        if self.config.request_delay > 0:
            await asyncio.sleep(self.config.request_delay)

        payload = {"query": query, "variables": variables or {}}
        try:
            response = await self.client.post(self.base_url, json=payload)
        except httpx.TimeoutException as err:
            operation = query.split("(", 1)[0].strip() or "query"
            raise RequestTimeoutError(operation) from err
        except httpx.HTTPError as err:
            raise NetworkError(f"{type(err).__name__}: {err}") from err

        return await self._handle_response(response)
