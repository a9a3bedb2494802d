"""Filter system: catalog, active filter set, evaluation and query generation."""

from .active import ActiveFilter
from .active_set import ActiveFilterSet
from .definition import FilterDefinition
from .evaluator import apply_filters, apply_sorting, evaluate
from .query_builder import (
    GeneratedQuery,
    QueryCompiler,
    QueryFilter,
    SortDirective,
    build_query_payload,
    compile_query,
    compile_to_flat_params,
    log_query,
    parse_flat_params,
)
from .registry import EmployeeFilterRegistry, FilterRegistry, get_all_registries, get_filter_registry
from .values import default_value, is_value_complete, validate_value

__all__ = [
    "ActiveFilter",
    "ActiveFilterSet",
    "EmployeeFilterRegistry",
    "FilterDefinition",
    "FilterRegistry",
    "GeneratedQuery",
    "QueryCompiler",
    "QueryFilter",
    "SortDirective",
    "apply_filters",
    "apply_sorting",
    "build_query_payload",
    "compile_query",
    "compile_to_flat_params",
    "default_value",
    "evaluate",
    "get_all_registries",
    "get_filter_registry",
    "is_value_complete",
    "log_query",
    "parse_flat_params",
    "validate_value",
]
