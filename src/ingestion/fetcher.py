"""Corpus document fetcher with bounded retry."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from urllib.parse import quote

import chardet
import httpx
from pydantic import BaseModel

from src.config import CorpusConfig
from src.ingestion.errors import FetchError
from src.models.tree import CorpusDocument

logger = logging.getLogger(__name__)


class FetchStatus(str, Enum):
    """Outcome of fetching one document."""

    OK = "ok"
    ABSENT = "absent"  # fetched, but the body is not a usable document
    FAILED = "failed"  # retries exhausted


class FetchResult(BaseModel):
    """A fetched document, or the reason there is none."""

    url: str
    status: FetchStatus
    document: CorpusDocument | None = None
    error: FetchError | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.OK

    @property
    def failed(self) -> bool:
        return self.status == FetchStatus.FAILED


def build_document_url(config: CorpusConfig, sub_path: str, language: str) -> str:
    """Build the URL of one language variant of a work.

    Every path segment is percent-encoded, so sub-paths like
    ``Tanakh/Prophets/I Samuel`` can be given unencoded.
    """
    segments = [s for s in sub_path.split("/") if s] + [language, config.document_name]
    encoded = "/".join(quote(segment, safe="") for segment in segments)
    return f"{config.base_url.rstrip('/')}/{encoded}"


def create_client(config: CorpusConfig) -> httpx.AsyncClient:
    """Create the HTTP client used for all corpus requests."""
    headers = {"Accept": "application/json", "User-Agent": "corpus-ingest"}
    if config.api_token:
        headers["Authorization"] = f"Bearer {config.api_token}"
    timeout = httpx.Timeout(config.timeout_seconds, connect=min(10.0, config.timeout_seconds))
    return httpx.AsyncClient(headers=headers, timeout=timeout, follow_redirects=True)


class CorpusFetcher:
    """Retrieves corpus JSON documents.

    Transport errors and non-200 responses are retried up to
    ``max_attempts`` times, waiting ``attempt * retry_delay`` seconds
    between attempts. A response that arrives but cannot be decoded is
    reported as absent rather than failed: the work may simply not exist
    in that language.

    Args:
        client: The HTTP client to issue requests with.
        max_attempts: Total attempts per document.
        retry_delay: Base delay in seconds; grows linearly per attempt.
        sleep: Awaitable sleep, replaceable in tests.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._max_attempts = max(1, max_attempts)
        self._retry_delay = retry_delay
        self._sleep = sleep

    @classmethod
    def from_config(cls, client: httpx.AsyncClient, config: CorpusConfig) -> "CorpusFetcher":
        return cls(
            client,
            max_attempts=config.max_attempts,
            retry_delay=config.retry_delay_seconds,
        )

    async def fetch(self, url: str) -> FetchResult:
        """Fetch and decode one document.

        Args:
            url: Fully formed document URL.

        Returns:
            A FetchResult with status OK, ABSENT or FAILED.
        """
        reason = ""
        status_code: int | None = None

        for attempt in range(1, self._max_attempts + 1):
            try:
                response = await self._client.get(url)
            except httpx.HTTPError as e:
                reason = f"{type(e).__name__}: {e}"
                status_code = None
            else:
                if response.status_code == 200:
                    return self._decode(url, response.content, attempt)
                reason = f"HTTP {response.status_code}"
                status_code = response.status_code

            if attempt < self._max_attempts:
                delay = attempt * self._retry_delay
                logger.warning(
                    "Fetch attempt %d/%d failed (%s), retrying in %.1fs: %s",
                    attempt,
                    self._max_attempts,
                    reason,
                    delay,
                    url,
                )
                await self._sleep(delay)

        error = FetchError(
            url=url, reason=reason, status_code=status_code, attempts=self._max_attempts
        )
        logger.error("Fetch failed: %s", error)
        return FetchResult(
            url=url, status=FetchStatus.FAILED, error=error, attempts=self._max_attempts
        )

    def _decode(self, url: str, body: bytes, attempts: int) -> FetchResult:
        text = _decode_bytes(body)
        if text is None:
            logger.warning("Undecodable document treated as absent: %s", url)
            return FetchResult(url=url, status=FetchStatus.ABSENT, attempts=attempts)

        try:
            data = json.loads(text)
        except ValueError:
            logger.warning("Malformed JSON treated as absent: %s", url)
            return FetchResult(url=url, status=FetchStatus.ABSENT, attempts=attempts)

        return FetchResult(
            url=url,
            status=FetchStatus.OK,
            document=CorpusDocument.from_json(data),
            attempts=attempts,
        )


def _decode_bytes(body: bytes) -> str | None:
    """Decode a response body, trying UTF-8 before detected encodings."""
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        pass

    detected = chardet.detect(body)
    encoding = detected.get("encoding")
    if not encoding:
        return None
    try:
        return body.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        return None
