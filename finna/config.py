"""Configuration management."""
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

MAX_LIMIT = 100


@dataclass(frozen=True)
class SearchOptions:
    """Options for a search request."""
    limit: int = 20
    page: int = 1
    language: str = "en"
    sort_order: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        """Build Finna query parameters (limit clamped to the API maximum)."""
        params = {
            "limit": max(0, min(self.limit, MAX_LIMIT)),
            "page": max(1, self.page),
            "lng": self.language,
        }
        if self.sort_order:
            params["sort"] = self.sort_order
        return params


class Config:
    """Application configuration."""

    # API
    FINNA_API_BASE = os.getenv("FINNA_API_BASE", "https://api.finna.fi/v1")
    FINNA_LANGUAGE = os.getenv("FINNA_LANGUAGE", "en")

    # Defaults
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))
    DEFAULT_MAX_RETRIES = int(os.getenv("DEFAULT_MAX_RETRIES", "3"))
    DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    def search_options(
        self,
        limit: Optional[int] = None,
        page: int = 1,
        language: Optional[str] = None,
        sort_order: Optional[str] = None
    ) -> SearchOptions:
        """Build SearchOptions, filling gaps from configured defaults."""
        return SearchOptions(
            limit=self.DEFAULT_PAGE_SIZE if limit is None else limit,
            page=page,
            language=language or self.FINNA_LANGUAGE,
            sort_order=sort_order,
        )
