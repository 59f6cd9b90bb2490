"""HTTP transport for provider requests (JSON over HTTPS via httpx)."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any

import httpx

from .config import DEFAULT_TRANSPORT_RETRIES, REQUEST_TIMEOUT_SECONDS
from .errors import ProviderDecodeError, ProviderTransportError

logger = logging.getLogger(__name__)

_RETRY_STATUS = (429, 500, 502, 503, 529)
_KEY_PARAM = re.compile(r"([?&]key=)[^&]+")


def redact_url(url: str) -> str:
    """Hide API keys embedded in query strings before logging."""
    return _KEY_PARAM.sub(r"\1***", url)


class HttpTransport:
    """Posts JSON bodies and returns the decoded JSON object.

    Headers are sent exactly as given by the provider handler; httpx adds the
    JSON Content-Type itself.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_TRANSPORT_RETRIES,
        backoff_seconds: float = 1.0,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout, connect=10.0))
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def post_json(self, url: str, headers: dict[str, str], body: dict[str, Any]) -> dict[str, Any]:
        """POST ``body`` and return the response object.

        Raises ProviderTransportError for network failures and non-2xx answers,
        ProviderDecodeError when the body is not a JSON object.
        """
        client = self._get_client()
        safe_url = redact_url(url)
        last_error: ProviderTransportError | None = None
        for attempt in range(self.max_retries + 1):
            retryable = attempt < self.max_retries
            try:
                response = await client.post(url, headers=headers, json=body)
            except httpx.TimeoutException as e:
                last_error = ProviderTransportError(f"Request to {safe_url} timed out: {e}")
                if retryable:
                    logger.warning("Provider timeout, retrying: %s", safe_url)
                    await asyncio.sleep(self.backoff_seconds * (2**attempt))
                    continue
                break
            except httpx.HTTPError as e:
                last_error = ProviderTransportError(f"HTTP error calling {safe_url}: {e}")
                break  # Don't retry connection errors

            if response.is_success:
                try:
                    data = response.json()
                except ValueError as e:
                    raise ProviderDecodeError(f"Response from {safe_url} is not JSON") from e
                if not isinstance(data, dict):
                    raise ProviderDecodeError(f"Response from {safe_url} is not a JSON object")
                return data

            detail = response.text[:500]
            last_error = ProviderTransportError(
                f"Provider returned HTTP {response.status_code}: {detail}",
                status_code=response.status_code,
            )
            if response.status_code in _RETRY_STATUS and retryable:
                delay = self.backoff_seconds * (2**attempt)
                logger.warning("Provider error %d, retrying in %.1fs", response.status_code, delay)
                await asyncio.sleep(delay)
                continue
            break

        assert last_error is not None
        logger.error("Provider request failed: %s", last_error)
        raise last_error
