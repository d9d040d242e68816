"""Data models for catalog records."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Location:
    """Availability at a single branch or site."""
    location: str
    available: int
    status: str
    call_number: Optional[str] = None
    due_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.location,
            "available": self.available,
            "callNumber": self.call_number,
            "dueDate": self.due_date,
            "status": self.status,
        }


@dataclass(frozen=True)
class Availability:
    """Aggregate availability across all locations."""
    available: int
    total: int
    locations: List[Location] = field(default_factory=list)

    @property
    def any_available(self) -> bool:
        return self.available > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "available": self.available,
            "total": self.total,
            "locations": [location.to_dict() for location in self.locations],
        }


@dataclass(frozen=True)
class Holding:
    """A holdings line as shown on the detail view."""
    location: str
    call_number: Optional[str] = None
    status: str = "unknown"
    due_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.location,
            "callNumber": self.call_number,
            "status": self.status,
            "dueDate": self.due_date,
        }


@dataclass(frozen=True)
class CatalogRecord:
    """Normalized search result representation."""
    id: str
    title: str
    authors: List[str] = field(default_factory=list)
    year: Optional[str] = None
    images: List[str] = field(default_factory=list)
    formats: List[str] = field(default_factory=list)
    publishers: List[str] = field(default_factory=list)
    descriptions: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    url: str = ""

    @property
    def author(self) -> Optional[str]:
        """First author, kept for consumers expecting a single name."""
        return self.authors[0] if self.authors else None

    @property
    def image(self) -> Optional[str]:
        """First image path, if any."""
        return self.images[0] if self.images else None

    @property
    def authors_str(self) -> str:
        """Format authors as comma-separated string."""
        return ", ".join(self.authors) if self.authors else "Unknown"

    @property
    def formats_str(self) -> str:
        """Format formats as comma-separated string."""
        return ", ".join(self.formats) if self.formats else "None"

    def to_dict(self) -> Dict[str, Any]:
        """Canonical JSON-ready representation."""
        return {
            "id": self.id,
            "title": self.title,
            "authors": list(self.authors),
            "year": self.year,
            "images": list(self.images),
            "formats": list(self.formats),
            "publishers": list(self.publishers),
            "descriptions": list(self.descriptions),
            "languages": list(self.languages),
            "url": self.url,
        }


@dataclass(frozen=True)
class CatalogDetail(CatalogRecord):
    """Record with the fields only present in single-record responses."""
    availability: Optional[Availability] = None
    holdings: List[Holding] = field(default_factory=list)
    summary: List[str] = field(default_factory=list)
    subjects: List[str] = field(default_factory=list)
    table_of_contents: List[str] = field(default_factory=list)
    isbn: List[str] = field(default_factory=list)
    issn: List[str] = field(default_factory=list)
    physical_descriptions: List[str] = field(default_factory=list)
    series: List[str] = field(default_factory=list)
    genres: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "availability": self.availability.to_dict() if self.availability else None,
            "holdings": [holding.to_dict() for holding in self.holdings],
            "summary": list(self.summary),
            "subjects": list(self.subjects),
            "tableOfContents": list(self.table_of_contents),
            "isbn": list(self.isbn),
            "issn": list(self.issn),
            "physicalDescriptions": list(self.physical_descriptions),
            "series": list(self.series),
            "genres": list(self.genres),
        })
        return data


@dataclass(frozen=True)
class SearchResult:
    """One page of parsed search results."""
    result_count: int
    records: List[CatalogRecord] = field(default_factory=list)
