import copy
import json
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..config.configuration import config
from ..types.filter import LIST_OPERATORS, FieldKind, FilterValue, Operator, SortDirection
from .active import ActiveFilter
from .active_set import ActiveFilterSet
from .registry import FilterRegistry
from .values import to_text

logger = logging.getLogger(__name__)

_FLAT_KEY = re.compile(r"^filter_(\d+)_(field|operator|value|sort)$")
_INTEGER = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True)
class QueryFilter:
    """Field-addressed projection of one active filter."""

    field: str
    operator: Operator | str
    value: FilterValue
    sort_direction: SortDirection | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "field": self.field,
            "operator": self.operator.value if isinstance(self.operator, Operator) else self.operator,
            "value": copy.deepcopy(self.value),
        }
        if self.sort_direction is not None:
            result["sortDirection"] = self.sort_direction.value
        return result


@dataclass(frozen=True)
class SortDirective:
    field: str
    direction: SortDirection

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "direction": self.direction.value}


@dataclass(frozen=True)
class GeneratedQuery:
    """Transport-neutral query description: filters plus sort directives.

    Always derived from an active filter set, never edited directly.
    """

    filters: tuple[QueryFilter, ...] = field(default_factory=tuple)
    sort: tuple[SortDirective, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Wire shape. The ``sort`` key is omitted when no filter carries a direction."""
        result: dict[str, Any] = {"filters": [f.to_dict() for f in self.filters]}
        if self.sort:
            result["sort"] = [s.to_dict() for s in self.sort]
        return result


def _stringify(value: Any, separator: str) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return separator.join(to_text(v) for v in value)
    return to_text(value)


def _parse_scalar(text: str, kind: FieldKind | None) -> Any:
    if kind == FieldKind.NUMBER:
        if not text:
            return None
        if _INTEGER.match(text):
            return int(text)
        try:
            return float(text)
        except ValueError:
            return text
    if kind == FieldKind.BOOLEAN:
        if not text:
            return None
        return {"true": True, "false": False}.get(text, text)
    if kind == FieldKind.DATE and not text:
        return None
    return text


def _parse_value(text: str, kind: FieldKind | None, operator: Operator | str, separator: str) -> FilterValue:
    if operator in LIST_OPERATORS or (kind == FieldKind.ARRAY and (not text or separator in text)):
        if not text:
            return []
        return [_parse_scalar(item, kind) for item in text.split(separator)]
    return _parse_scalar(text, kind)


class QueryCompiler:
    """Projects active filters onto field-addressed query descriptions.

    Compilation is a pure function of the filters and the registry: it never
    looks at records, and compiling an unchanged set twice yields equal output.
    Filters whose definition no longer resolves are dropped.
    """

    def __init__(self, registry: type[FilterRegistry], array_separator: str | None = None):
        """
        :param registry: Registry used to resolve definition ids to record fields
        :param array_separator: Separator joining list values in flat parameters
        """
        self.registry = registry
        self.array_separator = array_separator or config.flat_params_array_separator

    def compile(self, filters: Iterable[ActiveFilter]) -> GeneratedQuery:
        query_filters: list[QueryFilter] = []
        sort: list[SortDirective] = []

        for active_filter in filters:
            definition = self.registry.lookup(active_filter.definition_id)
            if definition is None:
                logger.warning(
                    f"Dropping filter {active_filter.id}: unknown definition {active_filter.definition_id}"
                )
                continue

            direction = SortDirection(active_filter.sort_direction) if active_filter.sort_direction else None
            query_filters.append(
                QueryFilter(
                    field=definition.field,
                    operator=active_filter.operator,
                    value=copy.deepcopy(active_filter.value),
                    sort_direction=direction,
                )
            )
            if direction is not None:
                sort.append(SortDirective(field=definition.field, direction=direction))

        return GeneratedQuery(filters=tuple(query_filters), sort=tuple(sort))

    def compile_to_flat_params(self, filters: Iterable[ActiveFilter]) -> dict[str, str]:
        """Flat ``filter_<i>_<part>`` encoding, ``i`` counting compiled filters in order."""
        params: dict[str, str] = {}
        for index, query_filter in enumerate(self.compile(filters).filters):
            prefix = f"filter_{index}"
            params[f"{prefix}_field"] = query_filter.field
            params[f"{prefix}_operator"] = (
                query_filter.operator.value if isinstance(query_filter.operator, Operator) else query_filter.operator
            )
            params[f"{prefix}_value"] = _stringify(query_filter.value, self.array_separator)
            if query_filter.sort_direction is not None:
                params[f"{prefix}_sort"] = query_filter.sort_direction.value
        return params

    def parse_flat_params(self, params: Mapping[str, str]) -> GeneratedQuery:
        """Rebuild a query from its flat encoding.

        Values are coerced back by the kind of the definition that owns the
        field. List values are split on the array separator; a one-item list
        on an array field comes back as a plain string. Keys that are not
        part of the encoding are ignored.
        """
        parts: dict[int, dict[str, str]] = {}
        for key, raw in params.items():
            match = _FLAT_KEY.match(key)
            if match:
                parts.setdefault(int(match.group(1)), {})[match.group(2)] = raw

        query_filters: list[QueryFilter] = []
        sort: list[SortDirective] = []
        for index in sorted(parts):
            entry = parts[index]
            if "field" not in entry or "operator" not in entry:
                logger.warning(f"Skipping incomplete flat filter at index {index}")
                continue

            definition = self.registry.get_by_field(entry["field"])
            kind = definition.kind if definition is not None else None
            operator: Operator | str = entry["operator"]
            if operator in {op.value for op in Operator}:
                operator = Operator(operator)

            direction = SortDirection(entry["sort"]) if entry.get("sort") in ("asc", "desc") else None
            query_filters.append(
                QueryFilter(
                    field=entry["field"],
                    operator=operator,
                    value=_parse_value(entry.get("value", ""), kind, operator, self.array_separator),
                    sort_direction=direction,
                )
            )
            if direction is not None:
                sort.append(SortDirective(field=entry["field"], direction=direction))

        return GeneratedQuery(filters=tuple(query_filters), sort=tuple(sort))

    def build_payload(self, filters: Iterable[ActiveFilter], now: datetime | None = None) -> dict[str, Any]:
        """Query wrapped with the time it was generated."""
        now = now or datetime.now(timezone.utc)
        return {
            "query": self.compile(filters).to_dict(),
            "timestamp": now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        }


def compile_query(filter_set: ActiveFilterSet) -> GeneratedQuery:
    return QueryCompiler(filter_set.registry).compile(filter_set)


def compile_to_flat_params(filter_set: ActiveFilterSet) -> dict[str, str]:
    return QueryCompiler(filter_set.registry).compile_to_flat_params(filter_set)


def parse_flat_params(params: Mapping[str, str], registry: type[FilterRegistry]) -> GeneratedQuery:
    return QueryCompiler(registry).parse_flat_params(params)


def build_query_payload(filter_set: ActiveFilterSet, now: datetime | None = None) -> dict[str, Any]:
    return QueryCompiler(filter_set.registry).build_payload(filter_set, now=now)


def log_query(filter_set: ActiveFilterSet, fmt: str = "payload") -> None:
    """Log the compiled output of ``filter_set`` as flat parameters or as a payload."""
    compiler = QueryCompiler(filter_set.registry)
    if fmt == "params":
        logger.info(f"Query parameters: {json.dumps(compiler.compile_to_flat_params(filter_set))}")
    else:
        logger.info(f"Query payload: {json.dumps(compiler.build_payload(filter_set))}")
    logger.info(f"Active filters: {json.dumps(filter_set.to_list())}")
