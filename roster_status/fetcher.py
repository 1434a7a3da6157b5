"""
Roster page retrieval.

HttpRetriever performs the network call (httpx, retry with backoff) and
raises FetchError when it cannot produce a non-empty body.
PageFetcher puts PageCache in front of it and turns every failure into
None, so callers only ever see "content" or "could not fetch".
"""

import random
import threading
import time
from typing import Callable, Optional

import httpx

from .cache import PageCache
from .exceptions import FetchError
from .logger import get_module_logger

logger = get_module_logger("fetcher")

ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml"

RETRY_BASE_DELAY = 0.5
RETRY_MAX_DELAY = 8.0
RETRY_JITTER = 0.3

# Statuses worth another attempt; anything else non-2xx fails immediately
RETRYABLE_STATUSES = {429, 500, 502, 503, 504}


class HttpRetriever:
    """
    Thin httpx wrapper that returns page text or raises FetchError.

    The client is created lazily and shared across threads.
    """

    def __init__(
        self,
        user_agent: str,
        timeout: float = 10.0,
        retry_count: int = 2,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self._headers = {"User-Agent": user_agent, "Accept": ACCEPT_HTML}
        self._timeout = timeout
        self._retry_count = retry_count
        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.Client] = None
        self._lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = httpx.Client(
                        headers=self._headers,
                        timeout=self._timeout,
                        follow_redirects=True,
                        transport=self._transport,
                    )
        return self._client

    def _calculate_delay(self, attempt: int) -> float:
        """Exponential backoff (0.5, 1, 2, ... capped) with +/-30% jitter."""
        capped = min(RETRY_BASE_DELAY * (2 ** attempt), RETRY_MAX_DELAY)
        jitter = capped * RETRY_JITTER * (2 * random.random() - 1)
        return max(0.1, capped + jitter)

    def retrieve(self, url: str) -> str:
        """
        GET url and return its body as text.

        Raises:
            FetchError: on transport errors or retryable statuses that persist
                past the retry budget, on a malformed URL, on any other non-2xx
                status, and on an empty body
        """
        last_error: Optional[FetchError] = None

        for attempt in range(self._retry_count + 1):
            if attempt:
                delay = self._calculate_delay(attempt - 1)
                logger.warning(
                    f"Retrying {url} in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{self._retry_count + 1}): {last_error.message}"
                )
                self._sleep(delay)

            try:
                response = self._get_client().get(url)
            except httpx.InvalidURL as e:
                # InvalidURL is not an HTTPError; fail without retrying
                raise FetchError(f"Invalid URL: {e}", url=url) from e
            except httpx.HTTPError as e:
                last_error = FetchError(f"Request failed: {e}", url=url)
                continue

            if response.status_code in RETRYABLE_STATUSES:
                last_error = FetchError(
                    f"HTTP error! Status: {response.status_code}",
                    url=url,
                    status_code=response.status_code
                )
                continue

            if not response.is_success:
                raise FetchError(
                    f"HTTP error! Status: {response.status_code}",
                    url=url,
                    status_code=response.status_code
                )

            if not response.text:
                raise FetchError("Empty response received", url=url, status_code=response.status_code)

            return response.text

        raise last_error

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None


class PageFetcher:
    """Fetches roster pages through PageCache."""

    def __init__(self, page_cache: PageCache, retriever: HttpRetriever):
        self.page_cache = page_cache
        self.retriever = retriever

    def fetch(self, url: str) -> Optional[str]:
        """
        Return page content for url, from cache when fresh.

        Returns:
            The page content, or None if it could not be retrieved
        """
        cached = self.page_cache.get(url)
        if cached:
            return cached

        logger.info(f"Fetching fresh page from {url}")
        started = time.perf_counter()
        try:
            content = self.retriever.retrieve(url)
        except FetchError as e:
            logger.error(f"Error fetching {url}: {e.message}")
            return None

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"Network fetch took {elapsed_ms:.2f}ms for {url} (length: {len(content)})")

        self.page_cache.put(url, content)
        return content
