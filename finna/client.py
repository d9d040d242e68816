"""HTTP client for the Finna API with resilience patterns."""
import dataclasses
import time
import random
import requests
from typing import Optional, Dict, Any, List
import logging

from finna.config import SearchOptions
from finna.models import CatalogDetail, SearchResult
from finna.parse import parse_record_response, parse_search_response

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.finna.fi/v1"
MIN_QUERY_LENGTH = 2


def validate_query(query: str) -> str:
    """
    Check a search query before it is sent.

    Returns:
        The stripped query

    Raises:
        ValueError: if the query is shorter than MIN_QUERY_LENGTH
    """
    stripped = (query or "").strip()
    if len(stripped) < MIN_QUERY_LENGTH:
        raise ValueError(f"Search query must be at least {MIN_QUERY_LENGTH} characters")
    return stripped


def search_params(query: str, options: SearchOptions) -> Dict[str, Any]:
    """Query parameters for the /search endpoint."""
    params = {"lookfor": validate_query(query), "type": "AllFields"}
    params.update(options.to_params())
    return params


def record_params(record_id: str, language: str) -> Dict[str, Any]:
    """Query parameters for the /record endpoint."""
    if not record_id:
        raise ValueError("Record ID is required")
    return {"id": record_id, "lng": language}


class FinnaClient:
    """Client for the Finna API with timeouts, retries, and backoff."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 10,
        max_retries: int = 3,
        base_backoff: float = 1.0
    ):
        """
        Initialize Finna API client.

        Args:
            base_url: API root, e.g. https://api.finna.fi/v1
            timeout: Request timeout in seconds
            max_retries: Maximum number of retry attempts
            base_backoff: Base delay for exponential backoff
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_backoff = base_backoff

        # Create session for connection pooling
        self.session = requests.Session()

    def search(
        self,
        query: str,
        options: Optional[SearchOptions] = None
    ) -> Optional[SearchResult]:
        """
        Search the catalog.

        Args:
            query: Search query string (at least 2 characters)
            options: Paging, language and sort options

        Returns:
            Parsed SearchResult or None if all retries failed
        """
        params = search_params(query, options or SearchOptions())
        response = self._make_request_with_retry(f"{self.base_url}/search", params)
        if response is None:
            return None
        return parse_search_response(response)

    def search_pages(
        self,
        query: str,
        pages: int = 1,
        options: Optional[SearchOptions] = None
    ) -> List[SearchResult]:
        """
        Fetch consecutive result pages one after another.

        Args:
            query: Search query
            pages: Number of pages to fetch, starting at options.page
            options: Base options (page size, language, sort)

        Returns:
            Successful pages in page order
        """
        base = options or SearchOptions()
        results = []
        for offset in range(pages):
            result = self.search(query, dataclasses.replace(base, page=base.page + offset))
            if result is not None:
                results.append(result)
        return results

    def get_record(self, record_id: str, language: str = "en") -> Optional[CatalogDetail]:
        """
        Fetch a single record with availability details.

        Args:
            record_id: Finna record ID
            language: Language for translated fields

        Returns:
            CatalogDetail or None if all retries failed

        Raises:
            InvalidResponseShape: if the response holds no identifiable record
        """
        params = record_params(record_id, language)
        response = self._make_request_with_retry(f"{self.base_url}/record", params)
        if response is None:
            return None
        return parse_record_response(response)

    def _make_request_with_retry(
        self,
        url: str,
        params: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """
        Make HTTP request with retry logic.

        Args:
            url: Request URL
            params: Query parameters

        Returns:
            Response JSON or None if all retries exhausted
        """
        for attempt in range(self.max_retries):
            try:
                logger.info(f"Request attempt {attempt + 1}/{self.max_retries}: {url}")

                response = self.session.get(
                    url,
                    params=params,
                    timeout=self.timeout
                )

                if response.status_code == 200:
                    logger.info(f"Success: {response.status_code}")
                    return response.json()

                elif response.status_code == 429:
                    logger.warning(f"Rate limited (429) on attempt {attempt + 1}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue

                elif response.status_code >= 500:
                    logger.warning(f"Server error ({response.status_code}) on attempt {attempt + 1}")
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt)
                        continue

                elif response.status_code >= 400:
                    # Client error - don't retry
                    logger.error(f"Client error ({response.status_code}): {response.text}")
                    return None

            except requests.exceptions.Timeout:
                logger.warning(f"Timeout on attempt {attempt + 1}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue

            except requests.exceptions.ConnectionError as e:
                logger.warning(f"Connection error on attempt {attempt + 1}: {e}")
                if attempt < self.max_retries - 1:
                    self._backoff(attempt)
                    continue

            except requests.exceptions.JSONDecodeError as e:
                logger.error(f"Response was not valid JSON: {e}")
                return None

        logger.error(f"All {self.max_retries} attempts failed")
        return None

    def _backoff(self, attempt: int):
        """
        Sleep with exponential backoff and jitter.

        Args:
            attempt: Current attempt number (0-indexed)
        """
        delay = self.base_backoff * (2 ** attempt)
        jitter = random.uniform(0, delay)
        total_delay = delay + jitter

        logger.info(f"Backing off for {total_delay:.2f} seconds")
        time.sleep(total_delay)

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
