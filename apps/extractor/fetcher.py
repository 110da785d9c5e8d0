"""
Scores Fetcher - HTTP Client for the Scores API

Fetches one page of scores as the raw response body. The body is handed to the
scanner untouched, so it is never decoded here.

Usage:
    async with ScoresFetcher() as fetcher:
        body = await fetcher.fetch(cursor=123)
"""

import logging
from typing import Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from utils.config import settings

logger = logging.getLogger(__name__)


class BodyTooLarge(Exception):
    """Response body exceeds MAX_BODY_BYTES and is not scanned."""


class RetryableStatus(Exception):
    """Server-side error status worth retrying."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Scores API answered with status {status_code}")
        self.status_code = status_code


class ScoresFetcher:
    """Thin async wrapper around httpx for the scores endpoint."""

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        max_body_bytes: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.url = url or settings.SCORES_API_URL
        self.token = token if token is not None else settings.API_TOKEN
        self.max_body_bytes = max_body_bytes or settings.MAX_BODY_BYTES

        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.API_TIMEOUT),
            follow_redirects=True,
            headers=headers,
        )

    async def __aenter__(self) -> "ScoresFetcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @retry(
        retry=retry_if_exception_type((httpx.TransportError, RetryableStatus)),
        stop=stop_after_attempt(settings.FETCH_MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def fetch(self, cursor: Optional[int] = None) -> bytes:
        """
        Fetch one page of scores.

        Args:
            cursor: Oldest id of the previous page, if any

        Returns:
            Raw response body

        Raises:
            httpx.HTTPStatusError: On a non-retryable error status
            BodyTooLarge: If the body exceeds the configured limit
        """
        params = {"cursor[id]": str(cursor)} if cursor is not None else None

        async with self._client.stream("GET", self.url, params=params) as response:
            if response.status_code >= 500:
                logger.warning(
                    "Scores API server error, retrying",
                    extra={"status_code": response.status_code, "cursor": cursor},
                )
                raise RetryableStatus(response.status_code)

            response.raise_for_status()

            content_length = response.headers.get("content-length")
            if content_length and int(content_length) > self.max_body_bytes:
                raise BodyTooLarge(
                    f"Content-Length {content_length} exceeds limit of {self.max_body_bytes}"
                )

            body = bytearray()
            async for chunk in response.aiter_bytes():
                body += chunk
                if len(body) > self.max_body_bytes:
                    raise BodyTooLarge(
                        f"Response body exceeds limit of {self.max_body_bytes} bytes"
                    )

        logger.debug("Fetched scores page", extra={"cursor": cursor, "body_size": len(body)})
        return bytes(body)

    async def close(self) -> None:
        await self._client.aclose()
