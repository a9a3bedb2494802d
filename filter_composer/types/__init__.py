"""Type definitions for the filter composer."""

from .common import CatalogName
from .composition import DragSourceKind, DragState, DropTargetKind
from .filter import OPERATOR_LABELS, FieldKind, FilterValue, Operator, Scalar, SortDirection

__all__ = [
    "OPERATOR_LABELS",
    "CatalogName",
    "DragSourceKind",
    "DragState",
    "DropTargetKind",
    "FieldKind",
    "FilterValue",
    "Operator",
    "Scalar",
    "SortDirection",
]
