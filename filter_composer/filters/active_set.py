import logging
from collections.abc import Callable, Iterator
from typing import Any
from uuid import uuid4

from ..errors import UnknownDefinition
from ..types.filter import Operator, SortDirection
from .active import ActiveFilter
from .registry import FilterRegistry
from .values import default_value, normalize_value, validate_value

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class ActiveFilterSet:
    """Ordered collection of active filters bound to one registry.

    Order is meaningful: it is the visual composition order and the precedence
    of sort keys. Mutations that name a missing filter id are no-ops, since an
    edit may race with a removal of the same filter. The set is not internally
    synchronized; embed it behind a single writer or one lock per instance.
    """

    def __init__(
        self,
        registry: type[FilterRegistry],
        filters: list[ActiveFilter] | None = None,
        today: Callable[[], str] | None = None,
    ) -> None:
        """
        :param registry: Catalog the filters are bound to
        :param filters: Initial entries, trusted to satisfy the set invariants
        :param today: Clock returning today's ISO date, used for date defaults
        """
        self.registry = registry
        self._filters: list[ActiveFilter] = list(filters or [])
        self._today = today
        self._issued_ids: set[str] = {f.id for f in self._filters}

    def __iter__(self) -> Iterator[ActiveFilter]:
        return iter(list(self._filters))

    def __len__(self) -> int:
        return len(self._filters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActiveFilterSet):
            return NotImplemented
        return self.registry is other.registry and self._filters == other._filters

    def __repr__(self) -> str:
        return f"ActiveFilterSet(registry={self.registry.__name__}, filters={self._filters!r})"

    @property
    def filters(self) -> list[ActiveFilter]:
        """Snapshot of the entries in order."""
        return list(self._filters)

    def get(self, filter_id: str) -> ActiveFilter | None:
        for active_filter in self._filters:
            if active_filter.id == filter_id:
                return active_filter
        return None

    def _index_of(self, filter_id: str) -> int | None:
        for i, active_filter in enumerate(self._filters):
            if active_filter.id == filter_id:
                return i
        return None

    def _new_id(self, definition_id: str) -> str:
        while True:
            candidate = f"{definition_id}_{uuid4().hex[:12]}"
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate

    def compose(self, definition_id: str) -> ActiveFilter:
        """Append a new filter for ``definition_id`` with its defaults.

        :raises UnknownDefinition: If ``definition_id`` is not in the registry
        """
        definition = self.registry.lookup(definition_id)
        if definition is None:
            raise UnknownDefinition(definition_id)

        active_filter = ActiveFilter(
            id=self._new_id(definition_id),
            definition_id=definition_id,
            operator=definition.default_operator,
            value=default_value(definition.kind, self._today),
            sort_direction=None,
        )
        self._filters.append(active_filter)
        logger.debug(f"Composed filter {active_filter.id}")
        return active_filter

    def update(
        self,
        filter_id: str,
        *,
        operator: Operator | str = _UNSET,
        value: Any = _UNSET,
        sort_direction: SortDirection | str | None = _UNSET,
    ) -> ActiveFilter | None:
        """Apply a patch to the filter ``filter_id``.

        Only the given fields are touched. An operator not allowed by the
        filter's definition, a value of the wrong shape for its field kind, or
        an unknown sort direction is ignored while the rest of the patch still
        applies. Missing ``filter_id`` is a no-op.

        :return: The updated filter, or None if it is absent
        """
        index = self._index_of(filter_id)
        if index is None:
            logger.debug(f"Ignoring update of missing filter {filter_id}")
            return None

        current = self._filters[index]
        definition = self.registry.lookup(current.definition_id)
        changes: dict[str, Any] = {}

        if operator is not _UNSET:
            if definition is not None and definition.allows(operator):
                changes["operator"] = Operator(operator)
            else:
                logger.debug(f"Ignoring operator {operator!r} not allowed for filter {filter_id}")

        if value is not _UNSET:
            if definition is not None and validate_value(definition, value):
                changes["value"] = normalize_value(value)
            else:
                logger.debug(f"Ignoring value {value!r} of wrong shape for filter {filter_id}")

        if sort_direction is not _UNSET:
            if sort_direction is None:
                changes["sort_direction"] = None
            elif sort_direction in (SortDirection.ASC.value, SortDirection.DESC.value):
                changes["sort_direction"] = SortDirection(sort_direction)
            else:
                logger.debug(f"Ignoring sort direction {sort_direction!r} for filter {filter_id}")

        for name, new_value in changes.items():
            setattr(current, name, new_value)
        return current

    def remove(self, filter_id: str) -> ActiveFilter | None:
        """Delete the filter ``filter_id``. Missing id is a no-op.

        :return: The removed filter, or None if it is absent
        """
        index = self._index_of(filter_id)
        if index is None:
            return None
        return self._filters.pop(index)

    def reorder(self, filter_id: str, target_id: str) -> bool:
        """Move ``filter_id`` so that it immediately precedes ``target_id``.

        All other filters keep their relative order. Repeating the call once
        the order is achieved changes nothing. Missing ids are a no-op.
        Since the moved filter always lands before its target, reorder alone
        cannot put a filter in the last position.

        :return: Whether the order changed
        """
        if filter_id == target_id:
            return False
        source_index = self._index_of(filter_id)
        if source_index is None or self._index_of(target_id) is None:
            return False

        moved = self._filters.pop(source_index)
        target_index = self._index_of(target_id)
        self._filters.insert(target_index, moved)  # type: ignore[arg-type]
        return target_index != source_index

    def clear(self) -> None:
        self._filters.clear()

    def to_list(self) -> list[dict[str, Any]]:
        """Serialize every filter to the persisted wire shape."""
        return [active_filter.to_dict() for active_filter in self._filters]
