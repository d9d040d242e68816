"""Helpers for coercing variant-shaped API fields."""
from typing import Any, List, Optional, Sequence


def to_list(value: Any) -> List[Any]:
    """
    Coerce a field that may be absent, a scalar or a sequence into a list.

    Args:
        value: Raw field value

    Returns:
        Empty list for None, the same elements for a list/tuple,
        otherwise a single-element list
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def is_present(value: Any) -> bool:
    """True unless value is None, an empty string or an empty container."""
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def first_present(*candidates: Any) -> Optional[Any]:
    """
    Return the first non-empty candidate.

    Candidates are given most specific first, most generic last.
    """
    for candidate in candidates:
        if is_present(candidate):
            return candidate
    return None


def dig(obj: Any, *path: str) -> Optional[Any]:
    """Look up a nested key path, returning None on any missing level."""
    current = obj
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def stringify_variant(value: Any, keys: Sequence[str] = ()) -> str:
    """
    Resolve a value that may be a string or an object carrying a string.

    Args:
        value: String, dict or any other value
        keys: Dict keys to try, in order of preference

    Returns:
        The first matching key's value as a string, else str(value)
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for key in keys:
            found = value.get(key)
            if is_present(found):
                return stringify_variant(found, keys)
    return str(value)


def string_list(value: Any, keys: Sequence[str] = ()) -> List[str]:
    """
    Normalize a plural field into a list of non-empty strings.

    Args:
        value: Raw field value (absent, scalar, object or sequence)
        keys: Keys used to resolve object elements

    Returns:
        List of strings (possibly empty)
    """
    strings = []
    for element in to_list(value):
        text = stringify_variant(element, keys).strip()
        if text:
            strings.append(text)
    return strings


def first_string(value: Any, keys: Sequence[str] = ()) -> str:
    """
    Normalize a singular field into one string.

    A sequence is reduced to its first present element before
    resolution, so ["A", "B"] gives "A" rather than the list repr.
    """
    if isinstance(value, (list, tuple)):
        value = first_present(*value)
    return stringify_variant(value, keys).strip()
