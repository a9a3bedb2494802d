from enum import Enum


class DragSourceKind(str, Enum):
    """Where a drag gesture started."""

    AVAILABLE = "filter"
    ACTIVE = "active-filter"


class DropTargetKind(str, Enum):
    """What a drag gesture was released over."""

    ACTIVE_SURFACE = "active-filters-droppable"
    ACTIVE_FILTER = "active-filter"


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
