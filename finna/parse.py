"""Parse and normalize Finna API responses."""
import logging
import re
from typing import Any, Dict, List, Optional

from finna.availability import extract_availability, extract_holdings
from finna.coerce import dig, first_present, first_string, string_list, stringify_variant, to_list
from finna.exceptions import InvalidResponseShape
from finna.models import CatalogDetail, CatalogRecord, SearchResult

logger = logging.getLogger(__name__)

ID_KEYS = ("id", "recordId", "@id")
TITLE_KEYS = ("title", "titleFull", "titleMain")
DETAIL_TITLE_KEYS = TITLE_KEYS + ("shortTitle", "titleStatement")
UNTITLED_PLACEHOLDER = "Untitled"

_YEAR_PATTERN = re.compile(r"\d{4}")


def _first_key(raw: Dict[str, Any], keys) -> Optional[Any]:
    return first_present(*(raw.get(key) for key in keys))


def _authors(raw: Dict[str, Any]) -> List[str]:
    primary = raw.get("primaryAuthors")
    if isinstance(primary, list) and primary:
        return string_list(primary, ("name", "fullname"))

    authors = first_present(raw.get("authors"), raw.get("author"))
    if isinstance(authors, dict) and not any(key in authors for key in ("name", "fullname")):
        # Role-keyed form: {"primary": {"Name": {...}}, "secondary": [...]}
        names = []
        for role in ("primary", "secondary", "corporate"):
            role_authors = authors.get(role)
            if isinstance(role_authors, dict):
                names.extend(name for name in role_authors if name)
            else:
                names.extend(string_list(role_authors, ("name", "fullname")))
        return names
    return string_list(authors, ("name", "fullname"))


def _year(raw: Dict[str, Any]) -> Optional[str]:
    candidates = to_list(first_present(
        raw.get("year"),
        raw.get("publicationDates"),
        raw.get("publicationDate"),
    ))
    for candidate in candidates:
        match = _YEAR_PATTERN.search(stringify_variant(candidate, ("value",)))
        if match:
            return match.group()
    return None


def normalize_record(raw: Any) -> CatalogRecord:
    """
    Map one raw catalog entry into a CatalogRecord.

    Every plural field comes back as a list regardless of whether the
    source sent a scalar, an object, a list or nothing at all.

    Args:
        raw: Single record from a Finna API response

    Returns:
        CatalogRecord (never raises on missing or odd fields)
    """
    if not isinstance(raw, dict):
        logger.debug(f"Normalizing non-object record of type {type(raw).__name__}")
        raw = {}

    record_id = _first_key(raw, ID_KEYS)
    title = _first_key(raw, TITLE_KEYS)
    url = first_present(raw.get("url"), raw.get("recordPage"), dig(raw, "links", "recordPage"))

    return CatalogRecord(
        id=first_string(record_id),
        title=first_string(title, ("value",)),
        authors=_authors(raw),
        year=_year(raw),
        images=string_list(
            first_present(raw.get("images"), raw.get("image")),
            ("url", "medium", "small"),
        ),
        formats=string_list(
            first_present(raw.get("formats"), raw.get("format")),
            ("translated", "value"),
        ),
        publishers=string_list(first_present(raw.get("publishers"), raw.get("publisher"))),
        descriptions=string_list(first_present(
            raw.get("summaries"),
            raw.get("descriptions"),
            raw.get("description"),
        )),
        languages=string_list(first_present(raw.get("languages"), raw.get("language"))),
        url=first_string(url, ("url",)),
    )


def _subjects(value: Any) -> List[str]:
    """Subjects may be nested heading lists, e.g. [["History", "Finland"]]."""
    subjects = []
    for subject in to_list(value):
        if isinstance(subject, (list, tuple)):
            text = " -- ".join(string_list(subject, ("heading", "value")))
        else:
            text = stringify_variant(subject, ("heading", "value")).strip()
        if text:
            subjects.append(text)
    return subjects


def _detail_title(raw: Dict[str, Any], record: CatalogRecord) -> str:
    if record.title:
        return record.title
    title = first_string(_first_key(raw, DETAIL_TITLE_KEYS), ("value",))
    if not title:
        logger.debug(f"Record {record.id!r} has no title, using placeholder")
        return UNTITLED_PLACEHOLDER
    return title


def extend_detail(raw: Any, record: CatalogRecord) -> CatalogDetail:
    """
    Extend a normalized record with fields only found in record responses.

    Args:
        raw: The raw record dict the record was normalized from
        record: Result of normalize_record(raw)

    Returns:
        CatalogDetail with a non-empty title
    """
    if not isinstance(raw, dict):
        raw = {}

    return CatalogDetail(
        id=record.id,
        title=_detail_title(raw, record),
        authors=record.authors,
        year=record.year,
        images=record.images,
        formats=record.formats,
        publishers=record.publishers,
        descriptions=record.descriptions,
        languages=record.languages,
        url=record.url,
        availability=extract_availability(raw),
        holdings=extract_holdings(raw),
        summary=string_list(first_present(raw.get("summary"), raw.get("summaries"))),
        subjects=_subjects(first_present(raw.get("subjects"), raw.get("subject"))),
        table_of_contents=string_list(first_present(raw.get("tableOfContents"), raw.get("contents"))),
        isbn=string_list(first_present(raw.get("isbn"), raw.get("isbns"))),
        issn=string_list(first_present(raw.get("issn"), raw.get("issns"))),
        physical_descriptions=string_list(first_present(
            raw.get("physicalDescriptions"),
            raw.get("physicalDescription"),
        )),
        series=string_list(first_present(raw.get("series"), raw.get("seriesNames")), ("name",)),
        genres=string_list(first_present(raw.get("genres"), raw.get("genre"))),
    )


def normalize_detail(raw: Any) -> CatalogDetail:
    """Normalize a raw record and extend it with detail fields."""
    return extend_detail(raw, normalize_record(raw))


def resolve_record(payload: Any) -> Dict[str, Any]:
    """
    Find the record inside a single-record response.

    Args:
        payload: Top-level JSON from the record endpoint

    Returns:
        The raw record dict

    Raises:
        InvalidResponseShape: if no identifiable record is found
    """
    if not isinstance(payload, dict):
        raise InvalidResponseShape(payload)

    records = payload.get("records")
    if isinstance(records, list) and records:
        first = records[0]
        if isinstance(first, dict):
            return first
        raise InvalidResponseShape(payload)

    if _first_key(payload, ID_KEYS) is not None:
        return payload

    raise InvalidResponseShape(payload)


def parse_record_response(payload: Any) -> CatalogDetail:
    """Resolve and normalize a single-record response."""
    return normalize_detail(resolve_record(payload))


def parse_search_response(payload: Any) -> SearchResult:
    """
    Parse a full search response.

    Args:
        payload: Complete API response JSON

    Returns:
        SearchResult (empty if no records found)
    """
    if not isinstance(payload, dict):
        return SearchResult(result_count=0)

    records = [
        normalize_record(item)
        for item in to_list(payload.get("records"))
        if isinstance(item, dict)
    ]

    result_count = payload.get("resultCount")
    if not isinstance(result_count, int) or isinstance(result_count, bool):
        result_count = len(records)

    return SearchResult(result_count=result_count, records=records)


def deduplicate_records(records: List[CatalogRecord]) -> List[CatalogRecord]:
    """
    Remove records without an ID and duplicates by ID.

    Args:
        records: List of CatalogRecord objects

    Returns:
        Deduplicated list of records, first occurrence kept
    """
    seen_ids = set()
    unique_records = []

    for record in records:
        if not record.id or record.id in seen_ids:
            continue
        seen_ids.add(record.id)
        unique_records.append(record)

    return unique_records
