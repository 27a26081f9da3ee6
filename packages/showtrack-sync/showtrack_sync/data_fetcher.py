"""Provider client for fetching pages of game show results."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from urllib.parse import parse_qsl, quote, urlencode, urljoin, urlsplit, urlunsplit

import aiohttp
import structlog
from showtrack_core.config import ProviderConfig, get_settings
from showtrack_core.exceptions import FetchError

logger = structlog.get_logger()

PAGING_PARAMS = ("page", "size", "sort")


def build_results_url(fetch_url: str, page_size: int, sort_spec: str) -> str:
    """
    Point a game's results URL at the newest page.

    Existing filters on the URL (duration, wheelResults, ...) are kept as-is while
    ``page``, ``size`` and ``sort`` are replaced.

    Example:
        >>> build_results_url("https://x/api/monopoly?size=5&duration=6", 25, "data.settledAt,desc")
        'https://x/api/monopoly?duration=6&page=0&size=25&sort=data.settledAt,desc'
    """
    parts = urlsplit(fetch_url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in PAGING_PARAMS
    ]
    query += [("page", "0"), ("size", str(page_size)), ("sort", sort_spec)]
    return urlunsplit(parts._replace(query=urlencode(query, safe=",", quote_via=quote)))


class ResultFetcher(ABC):
    """Contract for anything that returns the latest raw results of a game."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False

    @abstractmethod
    async def fetch_latest_results(
        self, fetch_url: str, page_size: int, sort_spec: str
    ) -> list[dict]:
        """
        Fetch the newest page of raw result records for one game.

        Raises:
            FetchError: On network failure, non-2xx status or a malformed page
        """


class CasinoScoresClient(ResultFetcher):
    """HTTP client for the casinoscores game events API."""

    def __init__(self, config: ProviderConfig | None = None):
        """
        Initialize provider client.

        Args:
            config: Provider configuration (defaults to settings)
        """
        self.config = config or get_settings().provider
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> CasinoScoresClient:
        """Async context manager entry."""
        self.session = aiohttp.ClientSession(headers=self._headers())
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session:
            await self.session.close()
            self.session = None
        return False

    def resolve_url(self, fetch_url: str) -> str:
        """Absolute URL for ``fetch_url``; absolute URLs pass through unchanged."""
        return urljoin(self.config.base_url.rstrip("/") + "/", fetch_url)

    def _headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.config.user_agent,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def _make_request(self, url: str) -> tuple[object, int]:
        """
        Issue a single GET request.

        Returns:
            Tuple of (decoded JSON body, response time in ms)

        Raises:
            FetchError: On any transport, status or decoding failure
        """
        if not self.session:
            self.session = aiohttp.ClientSession(headers=self._headers())

        start_time = time.time()
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)

        try:
            async with self.session.get(url, timeout=timeout) as response:
                response.raise_for_status()
                data = await response.json(content_type=None)
                elapsed_ms = int((time.time() - start_time) * 1000)

                logger.debug(
                    "provider_request_success",
                    url=url,
                    status=response.status,
                    elapsed_ms=elapsed_ms,
                )
                return data, elapsed_ms

        except aiohttp.ClientResponseError as e:
            logger.error("provider_request_failed", url=url, status=e.status, message=e.message)
            raise FetchError(f"HTTP {e.status} from {url}", url=url, status=e.status) from e
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error("provider_request_error", url=url, error=str(e) or type(e).__name__)
            raise FetchError(f"Request to {url} failed: {e!r}", url=url) from e
        except ValueError as e:
            logger.error("provider_response_invalid_json", url=url, error=str(e))
            raise FetchError(f"Invalid JSON from {url}", url=url) from e

    async def fetch_latest_results(
        self, fetch_url: str, page_size: int, sort_spec: str
    ) -> list[dict]:
        """
        Fetch the newest page of raw result records for one game.

        Args:
            fetch_url: Game's results endpoint (may carry provider filters); a relative
                path is resolved against the configured provider base URL
            page_size: Number of records to request
            sort_spec: Provider sort expression (e.g. 'data.settledAt,desc')

        Returns:
            List of raw result records

        Example:
            async with CasinoScoresClient() as client:
                records = await client.fetch_latest_results(game.fetch_results_url, 25,
                                                            "data.settledAt,desc")
        """
        url = build_results_url(self.resolve_url(fetch_url), page_size, sort_spec)
        data, response_time = await self._make_request(url)

        if not isinstance(data, list):
            raise FetchError(
                f"Expected a list of results from {url}, got {type(data).__name__}", url=url
            )

        logger.info(
            "results_page_fetched",
            url=url,
            results_count=len(data),
            response_time_ms=response_time,
        )
        return data
