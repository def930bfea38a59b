"""
Helpers for turning flat, aliased query rows into resolver-shaped dicts.
"""

from datetime import datetime, timezone
from itertools import islice
from typing import Any, Iterable, Iterator, Mapping, TypeVar

T = TypeVar("T")


def map_query_fields_to_resolver_fields(
    row: Mapping[str, Any],
    fields_map: Mapping[str, str],
) -> dict[str, Any]:
    """
    Copy `row`, re-keying every column named in `fields_map`
    (`{"cc_id": "id", "cc_first_name": "first_name"}`) to its resolver name.

    Columns absent from `fields_map` keep their original key. A resulting
    `updated_at` is coerced to a datetime (from a datetime, an ISO string or
    epoch seconds), or None when falsy.

    Example:
        >>> map_query_fields_to_resolver_fields({"u_id": 3, "u_role": "ADMIN"}, {"u_id": "id"})
        {'id': 3, 'u_role': 'ADMIN'}
    """
    mapped = {fields_map.get(key, key): value for key, value in row.items()}
    if "updated_at" in mapped:
        mapped["updated_at"] = _coerce_datetime(mapped["updated_at"])
    return mapped


def _coerce_datetime(value: Any) -> datetime | None:
    if not value or isinstance(value, datetime):
        return value or None
    # epoch seconds
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return datetime.fromisoformat(str(value))


def chunked(items: Iterable[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive lists of at most `size` items, preserving order."""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    iterator = iter(items)
    while chunk := list(islice(iterator, size)):
        yield chunk


__all__ = ["map_query_fields_to_resolver_fields", "chunked"]
