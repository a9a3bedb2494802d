import logging
from collections.abc import Sequence
from typing import Any

from .filters.active import ActiveFilter
from .filters.active_set import ActiveFilterSet
from .filters.definition import FilterDefinition
from .filters.evaluator import Record, evaluate
from .filters.query_builder import GeneratedQuery, QueryCompiler, log_query
from .filters.registry import FilterRegistry
from .filters.values import is_value_complete
from .storage import FilterStore, hydrate, persist
from .types.composition import DragSourceKind, DragState, DropTargetKind

logger = logging.getLogger(__name__)

_DROP_TARGETS = frozenset(target.value for target in DropTargetKind)


class CompositionController:
    """Drives an active filter set from drag gestures and chip edits.

    The drag protocol is a two-state machine: ``drag_start`` moves from idle
    to dragging and remembers the source; ``drop`` or ``cancel`` returns to
    idle. Only a drop decides whether the set changes:

    - an available definition dropped on the active surface is composed
    - an active filter dropped on another active filter is moved before it
    - anything else leaves the set untouched

    The stored set is hydrated when the controller is created and persisted
    on ``apply``.
    """

    def __init__(self, registry: type[FilterRegistry], store: FilterStore) -> None:
        self.registry = registry
        self.store = store
        self.filter_set: ActiveFilterSet = hydrate(store, registry)
        self.compiler = QueryCompiler(registry)
        self.state = DragState.IDLE
        self.source_kind: DragSourceKind | None = None
        self.source_id: str | None = None
        logger.debug(f"Hydrated {len(self.filter_set)} active filters")

    def drag_start(self, source_kind: DragSourceKind | str, source_id: str) -> None:
        if self.state == DragState.DRAGGING:
            logger.debug(f"Drag of {self.source_id} superseded by {source_id}")
        self.state = DragState.DRAGGING
        self.source_kind = DragSourceKind(source_kind)
        self.source_id = source_id
        logger.debug(f"Drag started: {self.source_kind.value} {source_id}")

    def drop(self, target_kind: DropTargetKind | str | None, target_id: str | None = None) -> ActiveFilter | None:
        """End the gesture over ``target_kind``/``target_id``; None means no recognized target.

        :return: The composed filter for a compose drop, else None
        """
        if self.state != DragState.DRAGGING:
            logger.debug("Drop without a drag in progress ignored")
            return None

        source_kind, source_id = self.source_kind, self.source_id
        self._reset_drag()
        target = DropTargetKind(target_kind) if target_kind in _DROP_TARGETS else None

        if source_kind == DragSourceKind.AVAILABLE and target == DropTargetKind.ACTIVE_SURFACE:
            return self.filter_set.compose(source_id)  # type: ignore[arg-type]
        if source_kind == DragSourceKind.ACTIVE and target == DropTargetKind.ACTIVE_FILTER and target_id:
            self.filter_set.reorder(source_id, target_id)  # type: ignore[arg-type]
            return None

        logger.debug(f"Drop of {source_id} on {target_kind} ignored")
        return None

    def cancel(self) -> None:
        self._reset_drag()

    def _reset_drag(self) -> None:
        self.state = DragState.IDLE
        self.source_kind = None
        self.source_id = None

    def update(self, filter_id: str, **patch: Any) -> ActiveFilter | None:
        return self.filter_set.update(filter_id, **patch)

    def remove(self, filter_id: str) -> ActiveFilter | None:
        return self.filter_set.remove(filter_id)

    def clear(self) -> None:
        self.filter_set.clear()

    def apply(self) -> None:
        """Persist the current set and log the query it produces."""
        persist(self.store, self.filter_set)
        log_query(self.filter_set, "payload")

    def reset(self) -> None:
        """Empty the set and the store."""
        self.filter_set.clear()
        persist(self.store, self.filter_set)

    def available_definitions(self) -> list[FilterDefinition]:
        return self.registry.all()

    def incomplete_filters(self) -> list[ActiveFilter]:
        """Filters whose value is not yet usable, e.g. an empty text box."""
        incomplete = []
        for active_filter in self.filter_set:
            definition = self.registry.lookup(active_filter.definition_id)
            if definition is not None and not is_value_complete(active_filter.operator, active_filter.value, definition):
                incomplete.append(active_filter)
        return incomplete

    def query(self) -> GeneratedQuery:
        return self.compiler.compile(self.filter_set)

    def flat_params(self) -> dict[str, str]:
        return self.compiler.compile_to_flat_params(self.filter_set)

    def payload(self) -> dict[str, Any]:
        return self.compiler.build_payload(self.filter_set)

    def filter_records(self, records: Sequence[Record]) -> list[Record]:
        return evaluate(records, self.filter_set)
