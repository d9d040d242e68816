"""Exceptions raised by the catalog layer."""
from typing import Any


class FinnaError(Exception):
    """Base class for catalog errors."""


class InvalidResponseShape(FinnaError):
    """A record response is neither a results envelope nor an identifiable record."""

    def __init__(self, payload: Any):
        if isinstance(payload, dict):
            detail = f"keys: {sorted(str(key) for key in payload)}"
        else:
            detail = f"type: {type(payload).__name__}"
        super().__init__(f"Response contains no identifiable record ({detail})")
        self.payload = payload
