"""Value rules for active filters.

Two concerns live here: the shape a filter value may take for each field kind
(checked whenever a value enters an active filter set), and the coercions the
evaluator applies when it compares record values with filter values. Coercion
never raises; a value that cannot be coerced becomes ``NaN`` so that every
comparison against it is false.
"""

import logging
import math
from collections.abc import Callable
from datetime import date, datetime, timezone
from typing import Any

from dateutil import parser as date_parser

from ..config.configuration import config
from ..types.filter import VALUELESS_OPERATORS, FieldKind, FilterValue, Operator
from .definition import FilterDefinition

logger = logging.getLogger(__name__)

NAN = float("nan")


def _today_iso() -> str:
    return date.today().isoformat()


def default_value(kind: FieldKind, today: Callable[[], str] | None = None) -> FilterValue:
    """Value assigned to a freshly composed filter of the given kind."""
    if kind == FieldKind.NUMBER:
        return 0
    if kind == FieldKind.BOOLEAN:
        return True
    if kind == FieldKind.DATE:
        return (today or _today_iso)()
    if kind == FieldKind.ARRAY:
        return []
    return ""


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_number(value: Any) -> float:
    """Coerce ``value`` to a float the way a loosely typed comparison would, ``NaN`` on failure."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return 0.0
        try:
            return float(stripped)
        except ValueError:
            return NAN
    if isinstance(value, (datetime, date)):
        return to_epoch_ms(value)
    return NAN


def parse_calendar_date(value: str) -> datetime | None:
    """Parse an ISO calendar date or date-time string. Naive results are taken as UTC."""
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        try:
            parsed = date_parser.parse(value)
        except (date_parser.ParserError, ValueError, OverflowError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str) and value.strip():
        return parse_calendar_date(value.strip())
    if is_number(value) and math.isfinite(value):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def to_epoch_ms(value: Any) -> float:
    """Instant of ``value`` in milliseconds since the epoch, ``NaN`` when it is not a date."""
    parsed = to_datetime(value)
    if parsed is None:
        return NAN
    return parsed.timestamp() * 1000


def to_text(value: Any) -> str:
    """String form of a record or filter value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(v) for v in value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _is_date_string(value: Any) -> bool:
    return isinstance(value, str) and to_datetime(value) is not None


def _scalar_fits(kind: FieldKind, value: Any) -> bool:
    if kind in (FieldKind.TEXT, FieldKind.SELECT, FieldKind.ARRAY):
        return isinstance(value, str)
    if kind == FieldKind.NUMBER:
        return is_number(value) and not (isinstance(value, float) and math.isnan(value))
    if kind == FieldKind.DATE:
        return _is_date_string(value)
    if kind == FieldKind.BOOLEAN:
        return isinstance(value, bool)
    return False


def validate_value(definition: FilterDefinition, value: Any) -> bool:
    """Whether ``value`` has a shape legal for the definition's field kind.

    ``None`` (value absent) is always legal. Lists are legal for every kind
    except boolean, as long as each item fits the kind. Oversized strings and
    lists are rejected.
    """
    if value is None:
        return True

    if isinstance(value, (list, tuple)):
        if definition.kind == FieldKind.BOOLEAN:
            return False
        if len(value) > config.max_array_length:
            return False
        return all(_scalar_fits(definition.kind, v) and _length_ok(v) for v in value)

    return _scalar_fits(definition.kind, value) and _length_ok(value)


def _length_ok(value: Any) -> bool:
    return not isinstance(value, str) or len(value) <= config.max_string_value_length


def normalize_value(value: Any) -> FilterValue:
    """Copy list values so the set never shares them with the caller."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return value


def is_value_complete(operator: Operator | str, value: Any, definition: FilterDefinition) -> bool:
    """Whether a filter carries enough of a value to be worth applying."""
    if operator in VALUELESS_OPERATORS:
        return True

    if value is None or value == "" or (isinstance(value, list) and not value):
        return False

    kind = definition.kind
    if kind == FieldKind.NUMBER:
        if isinstance(value, list):
            return all(not math.isnan(to_number(v)) for v in value)
        return not math.isnan(to_number(value))
    if kind == FieldKind.DATE:
        if isinstance(value, list):
            return all(to_datetime(v) is not None for v in value)
        return to_datetime(value) is not None
    if kind == FieldKind.BOOLEAN:
        return isinstance(value, bool)
    if kind == FieldKind.ARRAY:
        return isinstance(value, (list, str))
    return isinstance(value, (str, list))
