"""Filter utility functions for task search and filtering.

All predicates are pure and synchronous: they run over records already held
in the cache and never raise on malformed input. A missing or unparseable
value resolves to "does not match" whenever a filter is active.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime, tzinfo
from typing import Any

from taskboard_cli.models import FilterCriteria
from taskboard_cli.utils.jalali import normalize_to_day_start

_CRITERIA_KEYS = (
    "text",
    "start_date_from",
    "start_date_to",
    "due_date_from",
    "due_date_to",
)


def _field(record: Any, name: str) -> Any:
    """Read a field from a model instance or a plain mapping."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _criteria(criteria: FilterCriteria | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(criteria, Mapping):
        return {key: criteria.get(key) for key in _CRITERIA_KEYS}
    return {key: getattr(criteria, key, None) for key in _CRITERIA_KEYS}


def parse_instant(value: Any) -> datetime | date | None:
    """Coerce a record date value (datetime, date or ISO-8601 string).

    Returns None for anything that cannot be interpreted as a date.
    """
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def _is_unset(bound: Any) -> bool:
    """An empty string counts as no bound, like None."""
    return bound is None or (isinstance(bound, str) and not bound.strip())


def _bound(value: Any, tz: tzinfo | None) -> datetime | None:
    """Normalize a filter bound to the start of its day."""
    return normalize_to_day_start(parse_instant(value), tz)


def is_date_in_range(
    value: Any, date_from: Any, date_to: Any, tz: tzinfo | None = None
) -> bool:
    """Check if a date falls within a range (inclusive on both ends).

    Args:
        value: Date to check
        date_from: Range start, None means no lower bound
        date_to: Range end, None means no upper bound
        tz: Zone aware values are viewed in, None means the system zone
    """
    day = normalize_to_day_start(parse_instant(value), tz)
    if day is None:
        return False

    if not _is_unset(date_from):
        lower = _bound(date_from, tz)
        if lower is None or day < lower:
            return False
    if not _is_unset(date_to):
        upper = _bound(date_to, tz)
        if upper is None or day > upper:
            return False
    return True


def evaluate_text_filter(record: Any, term: str | None) -> bool:
    """Evaluate if a task matches the text search filter.

    Args:
        record: Task with title and description
        term: Search term, matched case-insensitively as a plain substring

    Returns:
        True if the task matches, or if no search term is provided
    """
    if not term or not isinstance(term, str):
        return True

    needle = term.strip().casefold()
    if not needle:
        return True

    for name in ("title", "description"):
        value = _field(record, name)
        if isinstance(value, str) and needle in value.casefold():
            return True
    return False


def evaluate_date_filter(
    record: Any,
    field: str,
    date_from: Any = None,
    date_to: Any = None,
    tz: tzinfo | None = None,
) -> bool:
    """Evaluate if a task's date falls within a specified range.

    Args:
        record: Task with a date field
        field: Name of the date field ("start_date" or "due_date")
        date_from: Range start (inclusive), None or "" means no lower bound
        date_to: Range end (inclusive), None or "" means no upper bound
        tz: Display zone for aware values, None means the system zone

    Returns:
        True if the date is in range or no bound is set. A task without a
        value for *field* never matches an active range.
    """
    if _is_unset(date_from) and _is_unset(date_to):
        return True

    value = _field(record, field)
    if value is None:
        return False
    return is_date_in_range(value, date_from, date_to, tz)


def evaluate_all_filters(
    record: Any,
    criteria: FilterCriteria | Mapping[str, Any] | None,
    tz: tzinfo | None = None,
) -> bool:
    """Evaluate if a task matches all active filters (AND logic)."""
    if record is None or criteria is None:
        return False

    values = _criteria(criteria)
    if not evaluate_text_filter(record, values["text"]):
        return False
    if not evaluate_date_filter(
        record, "start_date", values["start_date_from"], values["start_date_to"], tz
    ):
        return False
    return evaluate_date_filter(
        record, "due_date", values["due_date_from"], values["due_date_to"], tz
    )


def filter_tasks(
    records: Iterable[Any],
    criteria: FilterCriteria | Mapping[str, Any] | None,
    tz: tzinfo | None = None,
) -> list[Any]:
    """Return the records matching *criteria*, preserving order."""
    return [record for record in records if evaluate_all_filters(record, criteria, tz)]


def _active_slots(criteria: FilterCriteria | Mapping[str, Any] | None) -> list[bool]:
    if criteria is None:
        return [False, False, False]
    values = _criteria(criteria)
    text = values["text"]
    return [
        isinstance(text, str) and bool(text.strip()),
        not (_is_unset(values["start_date_from"]) and _is_unset(values["start_date_to"])),
        not (_is_unset(values["due_date_from"]) and _is_unset(values["due_date_to"])),
    ]


def has_active_filters(criteria: FilterCriteria | Mapping[str, Any] | None) -> bool:
    """Check if any filter is currently active."""
    return any(_active_slots(criteria))


def get_active_filter_count(
    criteria: FilterCriteria | Mapping[str, Any] | None,
) -> int:
    """Count active filters; each date range counts once however many bounds are set."""
    return sum(_active_slots(criteria))
