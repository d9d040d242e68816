"""Async HTTP client for parallel requests."""
import asyncio
import dataclasses
import httpx
from typing import List, Optional, Dict, Any
import logging

from finna.client import DEFAULT_BASE_URL, record_params, search_params
from finna.config import SearchOptions
from finna.models import CatalogDetail, SearchResult
from finna.parse import parse_record_response, parse_search_response

logger = logging.getLogger(__name__)


class AsyncFinnaClient:
    """Async client for parallel catalog searches."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 10,
        max_concurrent: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            base_url: API root
            timeout: Request timeout
            max_concurrent: Maximum concurrent requests
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.semaphore = asyncio.Semaphore(max_concurrent)

        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def _get(self, endpoint: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """GET an endpoint, returning parsed JSON or None on failure."""
        url = f"{self.base_url}/{endpoint}"
        async with self.semaphore:
            try:
                logger.info(f"Async request: {endpoint} {params}")
                response = await self.client.get(url, params=params)

                if response.status_code == 200:
                    return response.json()
                else:
                    logger.warning(f"Status {response.status_code} for {endpoint}")
                    return None

            except httpx.HTTPError as e:
                logger.error(f"Async request failed: {e}")
                return None
            except ValueError as e:
                logger.error(f"Response was not valid JSON: {e}")
                return None

    async def search(
        self,
        query: str,
        options: Optional[SearchOptions] = None
    ) -> Optional[SearchResult]:
        """
        Search the catalog asynchronously.

        Args:
            query: Search query
            options: Paging, language and sort options

        Returns:
            SearchResult or None
        """
        response = await self._get("search", search_params(query, options or SearchOptions()))
        if response is None:
            return None
        return parse_search_response(response)

    async def search_pages(
        self,
        query: str,
        pages: int = 2,
        options: Optional[SearchOptions] = None
    ) -> List[SearchResult]:
        """
        Fetch several result pages in parallel.

        Args:
            query: Search query
            pages: Number of pages to fetch, starting at options.page
            options: Base options (page size, language, sort)

        Returns:
            Successful pages in page order
        """
        base = options or SearchOptions()
        tasks = [
            self.search(query, dataclasses.replace(base, page=base.page + offset))
            for offset in range(pages)
        ]

        results = await asyncio.gather(*tasks)
        return [r for r in results if r is not None]

    async def get_record(self, record_id: str, language: str = "en") -> Optional[CatalogDetail]:
        """
        Fetch a single record asynchronously.

        Raises:
            InvalidResponseShape: if the response holds no identifiable record
        """
        response = await self._get("record", record_params(record_id, language))
        if response is None:
            return None
        return parse_record_response(response)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
