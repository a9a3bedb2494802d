"""In-memory evaluation of active filters against a record collection.

A record passes when every active filter matches it. Filters whose definition
no longer resolves take no part. A filter that fails while being evaluated
matches nothing; the failure never aborts the evaluation of other filters.
"""

import locale
import logging
import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date, datetime, timezone
from functools import cmp_to_key
from typing import Any

from ..types.filter import FieldKind, Operator, SortDirection
from .active import ActiveFilter
from .active_set import ActiveFilterSet
from .definition import FilterDefinition
from .registry import FilterRegistry
from .values import is_number, to_datetime, to_epoch_ms, to_number, to_text

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]

_MISSING = object()


def resolve_field(record: Record, path: str) -> Any:
    """Read ``path`` from ``record``; dotted paths walk nested mappings.

    A key containing dots is matched literally before the path is split.
    Absent values come back as None.
    """
    if path in record:
        return record[path]

    current: Any = record
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return None
        if current is _MISSING:
            return None
    return current


def _loose_equals(field_value: Any, filter_value: Any) -> bool:
    """Equality after coercing both sides to a common type."""
    if isinstance(field_value, list) or isinstance(filter_value, list):
        if isinstance(field_value, list) and isinstance(filter_value, list):
            return field_value == filter_value
        return to_text(field_value) == to_text(filter_value)
    if isinstance(field_value, str) and isinstance(filter_value, str):
        return field_value == filter_value
    if isinstance(field_value, bool) and isinstance(filter_value, bool):
        return field_value is filter_value
    if isinstance(field_value, (datetime, date)) or isinstance(filter_value, (datetime, date)):
        return to_epoch_ms(field_value) == to_epoch_ms(filter_value)
    if filter_value is None:
        return False
    return to_number(field_value) == to_number(filter_value)


def _equals(field_value: Any, filter_value: Any, definition: FilterDefinition) -> bool:
    if definition.kind == FieldKind.DATE:
        field_date, filter_date = to_datetime(field_value), to_datetime(filter_value)
        if field_date is not None and filter_date is not None:
            return field_date.astimezone(timezone.utc).date() == filter_date.astimezone(timezone.utc).date()
    return _loose_equals(field_value, filter_value)


def _contains(field_value: Any, filter_value: Any) -> bool:
    # Array fields test membership, any-of when the filter value is itself a list
    if isinstance(field_value, list):
        if isinstance(filter_value, list):
            return any(v in field_value for v in filter_value)
        return filter_value in field_value
    return to_text(filter_value).lower() in to_text(field_value).lower()


def _compare_numbers(field_value: Any, filter_value: Any, compare: Callable[[float, float], bool]) -> bool:
    return compare(to_number(field_value), to_number(filter_value))


def _compare_dates(field_value: Any, filter_value: Any, compare: Callable[[float, float], bool]) -> bool:
    return compare(to_epoch_ms(field_value), to_epoch_ms(filter_value))


def _between(field_value: Any, filter_value: Any, definition: FilterDefinition) -> bool:
    if not isinstance(filter_value, list) or len(filter_value) != 2:
        return False
    coerce = to_epoch_ms if definition.kind == FieldKind.DATE else to_number
    value, low, high = coerce(field_value), coerce(filter_value[0]), coerce(filter_value[1])
    return low <= value <= high


def matches(record: Record, active_filter: ActiveFilter, definition: FilterDefinition) -> bool:
    """Whether a single record satisfies a single active filter."""
    field_value = resolve_field(record, definition.field)
    filter_value = active_filter.value
    operator = active_filter.operator

    if field_value is None:
        return operator == Operator.IS_FALSE and definition.kind == FieldKind.BOOLEAN

    if operator == Operator.EQUALS:
        return _equals(field_value, filter_value, definition)
    if operator == Operator.NOT_EQUALS:
        return not _equals(field_value, filter_value, definition)
    if operator == Operator.CONTAINS:
        return _contains(field_value, filter_value)
    if operator == Operator.NOT_CONTAINS:
        return not _contains(field_value, filter_value)
    if operator == Operator.STARTS_WITH:
        return to_text(field_value).lower().startswith(to_text(filter_value).lower())
    if operator == Operator.ENDS_WITH:
        return to_text(field_value).lower().endswith(to_text(filter_value).lower())
    if operator == Operator.GREATER_THAN:
        return _compare_numbers(field_value, filter_value, lambda a, b: a > b)
    if operator == Operator.LESS_THAN:
        return _compare_numbers(field_value, filter_value, lambda a, b: a < b)
    if operator == Operator.GREATER_THAN_OR_EQUAL:
        return _compare_numbers(field_value, filter_value, lambda a, b: a >= b)
    if operator == Operator.LESS_THAN_OR_EQUAL:
        return _compare_numbers(field_value, filter_value, lambda a, b: a <= b)
    if operator == Operator.IN:
        return isinstance(filter_value, list) and field_value in filter_value
    if operator == Operator.NOT_IN:
        return not isinstance(filter_value, list) or field_value not in filter_value
    if operator == Operator.IS_TRUE:
        return field_value is True
    if operator == Operator.IS_FALSE:
        return field_value is False
    if operator == Operator.BEFORE:
        return _compare_dates(field_value, filter_value, lambda a, b: a < b)
    if operator == Operator.AFTER:
        return _compare_dates(field_value, filter_value, lambda a, b: a > b)
    if operator == Operator.BETWEEN:
        return _between(field_value, filter_value, definition)

    # Operators unknown to this version let every record through
    return True


def _resolved(
    filters: Iterable[ActiveFilter], registry: type[FilterRegistry]
) -> list[tuple[ActiveFilter, FilterDefinition]]:
    resolved = []
    for active_filter in filters:
        definition = registry.lookup(active_filter.definition_id)
        if definition is None:
            logger.debug(f"Skipping filter {active_filter.id} with unknown definition {active_filter.definition_id}")
            continue
        resolved.append((active_filter, definition))
    return resolved


def _safe_matches(record: Record, active_filter: ActiveFilter, definition: FilterDefinition) -> bool:
    try:
        return matches(record, active_filter, definition)
    except (TypeError, ValueError, ArithmeticError, AttributeError) as e:
        logger.warning(f"Filter {active_filter.id} failed on a record and does not match it: {e}")
        return False


def apply_filters(
    records: Sequence[Record], filters: Iterable[ActiveFilter], registry: type[FilterRegistry]
) -> list[Record]:
    """Records that satisfy every filter, in their original order."""
    resolved = _resolved(filters, registry)
    if not resolved:
        return list(records)
    return [
        record
        for record in records
        if all(_safe_matches(record, active_filter, definition) for active_filter, definition in resolved)
    ]


def _sign(number: float) -> int:
    if math.isnan(number):
        return 0
    return (number > 0) - (number < 0)


def compare_values(a: Any, b: Any) -> int:
    """Three-way comparison of two non-null record values."""
    if isinstance(a, str) and isinstance(b, str):
        return _sign(locale.strcoll(a, b))
    if is_number(a) and is_number(b):
        return (a > b) - (a < b)
    if isinstance(a, (datetime, date)) and isinstance(b, (datetime, date)):
        return _sign(to_epoch_ms(a) - to_epoch_ms(b))
    return _sign(locale.strcoll(to_text(a), to_text(b)))


def _sort_key_comparator(keys: list[tuple[str, SortDirection]]) -> Callable[[Record, Record], int]:
    def compare(a: Record, b: Record) -> int:
        for field, direction in keys:
            a_value, b_value = resolve_field(a, field), resolve_field(b, field)
            # Absent values sort last whatever the direction
            if a_value is None and b_value is None:
                continue
            if a_value is None:
                return 1
            if b_value is None:
                return -1
            try:
                comparison = compare_values(a_value, b_value)
            except (TypeError, ValueError, ArithmeticError) as e:
                logger.warning(f"Cannot compare values of field {field}: {e}")
                comparison = 0
            if comparison != 0:
                return -comparison if direction == SortDirection.DESC else comparison
        return 0

    return compare


def apply_sorting(
    records: Sequence[Record], filters: Iterable[ActiveFilter], registry: type[FilterRegistry]
) -> list[Record]:
    """Stable multi-key sort of ``records`` into a new list.

    Every filter with a sort direction contributes a key, in set order: the
    first is the primary key, the next breaks its ties and so on. Records tied
    on every key keep their original order.
    """
    keys = [
        (definition.field, SortDirection(active_filter.sort_direction))
        for active_filter, definition in _resolved(filters, registry)
        if active_filter.sort_direction is not None
    ]
    if not keys:
        return list(records)
    return sorted(records, key=cmp_to_key(_sort_key_comparator(keys)))


def evaluate(records: Sequence[Record], filter_set: ActiveFilterSet) -> list[Record]:
    """Filter then sort ``records`` with ``filter_set``. The input sequence is never mutated."""
    filters = filter_set.filters
    registry = filter_set.registry
    return apply_sorting(apply_filters(records, filters, registry), filters, registry)
