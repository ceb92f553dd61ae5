"""UUP dump catalog API client.

This module handles:
- Issuing GET requests against the catalog's JSON endpoints
- Unwrapping the ``response`` object of each reply
- Bounded retry with a fixed delay between attempts
- Cancellation of an in-flight call through a threading.Event

Every call hits the network; there is no caching.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping
from typing import Any

import httpx

from uup_iso.config import DEFAULT_API_BASE_URL, Settings
from uup_iso.errors import CancelledError, CatalogUnavailableError
from uup_iso.types import Endpoint

logger = logging.getLogger(__name__)

# Attempts per call before the catalog is declared unavailable
MAX_ATTEMPTS = 15

# Fixed wait before each retry (seconds)
RETRY_DELAY = 10.0

# Timeout for a single request (seconds)
REQUEST_TIMEOUT = 30.0

# Catalog error values that mean "empty result" rather than a failed request
EMPTY_RESULT_ERRORS = frozenset({"NO_SEARCH_RESULTS"})

ParamValue = str | int | float | bool


class CatalogRequestError(Exception):
    """Raised for a single failed catalog attempt.

    Never escapes CatalogClient.call; it is retried and finally folded
    into CatalogUnavailableError.
    """


def encode_params(params: Mapping[str, ParamValue]) -> dict[str, str]:
    """Render parameter values as text for the query string.

    Args:
        params: Mapping of parameter names to scalar values.

    Returns:
        Mapping of parameter names to string values.
    """
    encoded: dict[str, str] = {}
    for key, value in params.items():
        if isinstance(value, bool):
            encoded[key] = "1" if value else "0"
        else:
            encoded[key] = str(value)
    return encoded


class CatalogClient:
    """Client for the UUP dump JSON API with bounded retry.

    Attributes:
        base_url: API base URL without trailing slash.
        max_attempts: Attempts per call.
        retry_delay: Wait before each retry in seconds.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        http_client: httpx.Client | None = None,
        timeout: float = REQUEST_TIMEOUT,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = RETRY_DELAY,
        user_agent: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.cancel_event = cancel_event
        self._owns_client = http_client is None
        if http_client is None:
            headers = {"User-Agent": user_agent} if user_agent else None
            http_client = httpx.Client(timeout=timeout, headers=headers)
        self._http = http_client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        cancel_event: threading.Event | None = None,
    ) -> CatalogClient:
        """Create a client configured from application settings."""
        return cls(
            base_url=settings.api_base_url,
            timeout=settings.request_timeout,
            max_attempts=settings.max_attempts,
            retry_delay=settings.retry_delay,
            user_agent=settings.user_agent,
            cancel_event=cancel_event,
        )

    def __enter__(self) -> CatalogClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._http.close()

    def endpoint_url(self, endpoint: Endpoint | str) -> str:
        """Return the full URL for a catalog endpoint."""
        return f"{self.base_url}/{Endpoint(endpoint).value}.php"

    def call(
        self,
        endpoint: Endpoint | str,
        params: Mapping[str, ParamValue],
    ) -> dict[str, Any]:
        """Call a catalog endpoint and return its ``response`` object.

        Args:
            endpoint: Catalog operation name.
            params: Query parameters.

        Returns:
            The ``response`` mapping of the JSON body.

        Raises:
            CatalogUnavailableError: If every attempt fails.
            CancelledError: If the cancel event is set before a retry.
        """
        name = Endpoint(endpoint).value
        url = self.endpoint_url(endpoint)
        query = encode_params(params)
        last_error = "no attempt made"

        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                self._wait_before_retry(name, attempt)
            self._raise_if_cancelled(name)

            try:
                return self._request(url, query)
            except CatalogRequestError as e:
                last_error = str(e)
                logger.warning(
                    "Catalog %s request failed (attempt %d/%d): %s",
                    name,
                    attempt,
                    self.max_attempts,
                    e,
                )

        raise CatalogUnavailableError(name, self.max_attempts, last_error)

    def list_builds(self, search: str) -> dict[str, Any]:
        """List builds matching a search term."""
        return self.call(Endpoint.LIST_ID, {"search": search})

    def list_languages(self, build_id: str) -> dict[str, Any]:
        """List languages available for a build."""
        return self.call(Endpoint.LIST_LANGS, {"id": build_id})

    def list_editions(self, build_id: str, lang: str) -> dict[str, Any]:
        """List editions available for a build in one language."""
        return self.call(Endpoint.LIST_EDITIONS, {"id": build_id, "lang": lang})

    def _request(self, url: str, query: dict[str, str]) -> dict[str, Any]:
        logger.debug("GET %s %s", url, query)
        try:
            response = self._http.get(url, params=query)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise CatalogRequestError(
                f"HTTP {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.TimeoutException as e:
            raise CatalogRequestError("request timed out") from e
        except httpx.RequestError as e:
            raise CatalogRequestError(f"network error: {e}") from e
        except ValueError as e:
            raise CatalogRequestError(f"malformed JSON body: {e}") from e

        if not isinstance(body, dict):
            raise CatalogRequestError("malformed body: expected a JSON object")

        result = body.get("response")
        if not isinstance(result, dict):
            raise CatalogRequestError("malformed body: missing response object")

        error = body.get("error") or result.get("error")
        if error and str(error) not in EMPTY_RESULT_ERRORS:
            raise CatalogRequestError(f"catalog error: {error}")

        return result

    def _wait_before_retry(self, name: str, attempt: int) -> None:
        logger.info(
            "Waiting %.0fs before retrying catalog %s request (attempt %d/%d)",
            self.retry_delay,
            name,
            attempt,
            self.max_attempts,
        )
        if self.cancel_event is None:
            time.sleep(self.retry_delay)
        elif self.cancel_event.wait(self.retry_delay):
            raise CancelledError(f"Catalog {name} request cancelled")

    def _raise_if_cancelled(self, name: str) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise CancelledError(f"Catalog {name} request cancelled")


__all__ = [
    "MAX_ATTEMPTS",
    "REQUEST_TIMEOUT",
    "RETRY_DELAY",
    "CatalogClient",
    "CatalogRequestError",
    "encode_params",
]
