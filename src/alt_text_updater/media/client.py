"""
Shopify Admin GraphQL client for image files.

Lists image files page by page, checks the app's access scopes and writes
alt text back. Every request goes through `execute`, which owns the retry
policy for rate limiting and timeouts.
"""

import asyncio
from typing import Any

import httpx
from loguru import logger

from ..errors import (
    CostExceededError,
    InvalidResponseError,
    MaxRetriesError,
    MediaAPIError,
    RateLimitedError,
    UserErrorsError,
)
from .base import MediaAsset

SCOPES_QUERY = """
query {
  appInstallation {
    accessScopes {
      handle
    }
  }
}
"""

FILES_QUERY = """
query Files($first: Int, $after: String) {
  files(first: $first, after: $after, query: "media_type:image") {
    edges {
      node {
        ... on MediaImage {
          id
          alt
          image {
            url
          }
          mediaContentType
        }
      }
      cursor
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""

FILE_UPDATE_MUTATION = """
mutation fileUpdate($files: [FileUpdateInput!]!) {
  fileUpdate(files: $files) {
    files {
      id
      alt
    }
    userErrors {
      field
      message
    }
  }
}
"""


def linear_backoff(attempt: int, base_delay: float = 1.0) -> float:
    """Return the wait before retrying after the given 1-based attempt."""
    return base_delay * attempt


def _error_messages(errors: list[dict]) -> str:
    return ", ".join(str(e.get("message", e)) for e in errors)


def _has_error_code(errors: list[dict], code: str) -> bool:
    return any((e.get("extensions") or {}).get("code") == code for e in errors)


class ShopifyMediaClient:
    """Async client for the storefront's image files."""

    def __init__(
        self,
        shop_name: str,
        access_token: str,
        api_version: str = "2025-04",
        page_size: int = 50,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        timeout: int = 30,
    ):
        """
        Initialize the client.

        Args:
            shop_name: Store domain (e.g. "beans-ie.myshopify.com")
            access_token: Admin API access token
            api_version: Admin API version path segment
            page_size: Files requested per listing page
            max_attempts: Attempts per request, including the first
            retry_delay: Base delay in seconds for linear backoff
            timeout: HTTP request timeout in seconds
        """
        self.endpoint = f"https://{shop_name}/admin/api/{api_version}/graphql.json"
        self.page_size = page_size
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "X-Shopify-Access-Token": access_token,
            },
        )
        logger.debug(
            "ShopifyMediaClient initialized: endpoint={}, page_size={}, max_attempts={}",
            self.endpoint,
            page_size,
            max_attempts,
        )

    async def __aenter__(self) -> "ShopifyMediaClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict:
        """
        Run a GraphQL query or mutation with retries.

        Rate limiting (HTTP 429 or a THROTTLED error) and timeouts are retried
        with linear backoff. Every other failure is raised immediately.

        Args:
            query: GraphQL document
            variables: Query variables

        Returns:
            The `data` object of the response

        Raises:
            CostExceededError: If the query cost limit was exceeded
            MediaAPIError: For non-429 HTTP errors and GraphQL errors
            MaxRetriesError: If every attempt hit a transient failure
        """
        last_error: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._post(query, variables or {})
            except RateLimitedError as e:
                last_error = e
            except httpx.TransportError as e:
                if not isinstance(e, httpx.TimeoutException) and "429" not in str(e):
                    raise
                last_error = e

            if attempt == self.max_attempts:
                break
            delay = linear_backoff(attempt, self.retry_delay)
            logger.warning(
                "Transient error, retrying ({}/{}) after {:.1f}s: {}",
                attempt,
                self.max_attempts,
                delay,
                last_error,
            )
            await asyncio.sleep(delay)

        raise MaxRetriesError(
            f"Max retry attempts reached for GraphQL request: {last_error}"
        ) from last_error

    async def _post(self, query: str, variables: dict[str, Any]) -> dict:
        """Send a single request and classify the response."""
        response = await self._client.post(
            self.endpoint,
            json={"query": query, "variables": variables},
        )

        if response.status_code == 429:
            raise RateLimitedError("HTTP 429 Too Many Requests")

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        errors = payload.get("errors") or []
        if isinstance(errors, str):
            errors = [{"message": errors}]

        if _has_error_code(errors, "MAX_COST_EXCEEDED"):
            raise CostExceededError()

        if response.is_error:
            detail = _error_messages(errors) if errors else response.reason_phrase
            raise MediaAPIError(f"HTTP {response.status_code}: {detail}")

        if errors:
            if _has_error_code(errors, "THROTTLED"):
                raise RateLimitedError(f"Throttled: {_error_messages(errors)}")
            raise MediaAPIError(f"GraphQL errors: {_error_messages(errors)}")

        return payload.get("data") or {}

    async def missing_scopes(self, required_scopes: list[str]) -> list[str]:
        """Return the required scopes that the app has not been granted."""
        data = await self.execute(SCOPES_QUERY)
        try:
            granted = {s["handle"] for s in data["appInstallation"]["accessScopes"]}
        except (KeyError, TypeError) as e:
            raise InvalidResponseError("Invalid access scopes response from Shopify") from e

        logger.debug("Granted scopes: {}", sorted(granted))
        return [scope for scope in required_scopes if scope not in granted]

    async def verify_scopes(self, required_scopes: list[str]) -> bool:
        """Return True if every required scope is granted."""
        return not await self.missing_scopes(required_scopes)

    async def list_all_media(self) -> list[MediaAsset]:
        """
        Fetch every image file in the store.

        Returns:
            Images in listing order

        Raises:
            InvalidResponseError: If a page has no `files` object
        """
        images: list[MediaAsset] = []
        after: str | None = None
        has_next_page = True
        page = 0

        while has_next_page:
            data = await self.execute(FILES_QUERY, {"first": self.page_size, "after": after})
            files = data.get("files")
            if not files:
                raise InvalidResponseError("Invalid response from Shopify GraphQL API")

            page += 1
            edges = files.get("edges") or []
            # Non-image files come back as empty nodes
            images.extend(
                MediaAsset.from_node(edge["node"]) for edge in edges if (edge.get("node") or {}).get("id")
            )
            logger.debug("Fetched page {}: {} files", page, len(edges))

            page_info = files.get("pageInfo") or {}
            has_next_page = bool(page_info.get("hasNextPage"))
            after = page_info.get("endCursor")

        return images

    async def set_alt_text(self, image_id: str, alt_text: str) -> None:
        """
        Write alt text for one image.

        Raises:
            UserErrorsError: If the mutation reported user errors
        """
        data = await self.execute(
            FILE_UPDATE_MUTATION,
            {"files": [{"id": image_id, "alt": alt_text}]},
        )
        user_errors = (data.get("fileUpdate") or {}).get("userErrors") or []
        if user_errors:
            raise UserErrorsError(image_id, [e.get("message", "") for e in user_errors])
        logger.debug("Alt text written for {}", image_id)
