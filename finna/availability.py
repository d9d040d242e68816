"""Extract availability and holdings from record detail responses."""
from typing import Any, Dict, List, Optional, Tuple
import logging

from finna.coerce import first_present, is_present, stringify_variant, to_list
from finna.models import Availability, Holding, Location

logger = logging.getLogger(__name__)

# Holdings may arrive under any of these keys; the first one present wins
HOLDINGS_KEYS = ("holdings", "availability", "buildings")
LOCATION_KEYS = ("location", "branch", "building", "name")
TEXT_KEYS = ("translated", "value", "name")
UNKNOWN_LOCATION = "Unknown"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _text(value: Any) -> Optional[str]:
    """Resolve a possibly object-wrapped text field, None when empty."""
    if not is_present(value):
        return None
    text = stringify_variant(value, TEXT_KEYS).strip()
    return text or None


def _location_name(item: Dict[str, Any]) -> str:
    for key in LOCATION_KEYS:
        name = _text(item.get(key))
        if name:
            return name
    return UNKNOWN_LOCATION


def _status_text(item: Dict[str, Any]) -> Optional[str]:
    return _text(first_present(item.get("status"), item.get("availability")))


def _parse_location(item: Any) -> Tuple[Location, int]:
    """
    Convert one raw holding into a Location and its copy total.

    Args:
        item: Raw holding element (usually a dict, sometimes a bare name)

    Returns:
        (Location, total) tuple
    """
    if not isinstance(item, dict):
        name = _text(item) or UNKNOWN_LOCATION
        return Location(location=name, available=0, status="unavailable"), 1

    status = _status_text(item)
    raw_available = item.get("available")
    if _is_number(raw_available):
        available = int(raw_available)
    elif status and status.lower() == "available":
        available = 1
    else:
        available = 0

    raw_total = first_present(item.get("total"), item.get("count"))
    total = int(raw_total) if _is_number(raw_total) else 1

    if not status:
        status = "available" if available > 0 else "unavailable"

    location = Location(
        location=_location_name(item),
        available=available,
        status=status,
        call_number=_text(first_present(item.get("callNumber"), item.get("callnumber"))),
        due_date=_text(first_present(item.get("dueDate"), item.get("duedate"))),
    )
    return location, total


def _from_holdings(items: List[Any]) -> Availability:
    locations = []
    available = 0
    total = 0
    for item in items:
        location, location_total = _parse_location(item)
        locations.append(location)
        available += location.available
        total += location_total
    return Availability(available=available, total=total, locations=locations)


def _from_aggregate(summary: Dict[str, Any]) -> Availability:
    """Read an availability object that already carries aggregate counts."""
    locations = [_parse_location(item)[0] for item in to_list(summary.get("locations"))]
    return Availability(
        available=int(summary["available"]),
        total=int(summary["total"]),
        locations=locations,
    )


def extract_availability(raw: Any) -> Optional[Availability]:
    """
    Derive aggregate and per-location availability from a detail response.

    Holdings sources are not merged: the first key present is used alone.
    Counts are summed as given, so available may exceed total when the
    upstream data does.

    Args:
        raw: Raw record dict

    Returns:
        Availability, or None when the record has no availability data
    """
    if not isinstance(raw, dict):
        return None

    for key in HOLDINGS_KEYS:
        value = raw.get(key)
        if not is_present(value):
            continue
        if (
            key == "availability"
            and isinstance(value, dict)
            and _is_number(value.get("available"))
            and _is_number(value.get("total"))
        ):
            return _from_aggregate(value)
        logger.debug(f"Reading holdings from '{key}'")
        return _from_holdings(to_list(value))

    available_count = raw.get("availableCount")
    total_count = raw.get("totalCount")
    if _is_number(available_count) or _is_number(total_count):
        return Availability(
            available=int(available_count) if _is_number(available_count) else 0,
            total=int(total_count) if _is_number(total_count) else 0,
        )

    return None


def extract_holdings(raw: Any) -> List[Holding]:
    """
    Build the detail-view holdings list from the 'holdings' key only.

    Args:
        raw: Raw record dict

    Returns:
        List of Holding objects (empty if the record has no holdings)
    """
    if not isinstance(raw, dict):
        return []

    holdings = []
    for item in to_list(raw.get("holdings")):
        if not isinstance(item, dict):
            holdings.append(Holding(location=_text(item) or UNKNOWN_LOCATION))
            continue
        holdings.append(
            Holding(
                location=_location_name(item),
                call_number=_text(first_present(item.get("callNumber"), item.get("callnumber"))),
                status=_status_text(item) or "unknown",
                due_date=_text(first_present(item.get("dueDate"), item.get("duedate"))),
            )
        )
    return holdings
