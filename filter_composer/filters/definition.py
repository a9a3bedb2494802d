from dataclasses import dataclass, field
from typing import Any

from ..errors import InvalidFilterDefinition
from ..types.filter import OPERATOR_LABELS, FieldKind, Operator


@dataclass(frozen=True)
class FilterDefinition:
    """Catalog entry describing a filterable record field.

    Definitions are pure configuration (data only, no behavior). Evaluation is
    handled by the evaluator and query generation by the query builder.

    :param id: Unique identifier of the definition within its registry
    :param label: Human-readable label for the filter
    :param description: Longer help text
    :param kind: Value kind of the field, decides coercion and value shapes
    :param field: Record attribute path the predicate reads (dotted for nested fields)
    :param allowed_operators: Operators legal for this field, in display order
    :param default_operator: Operator assigned to newly composed filters
    :param options: Available values for select fields
    """

    id: str
    label: str
    description: str
    kind: FieldKind
    field: str
    allowed_operators: tuple[Operator, ...]
    default_operator: Operator
    options: tuple[str, ...] | None = field(default=None)

    def __post_init__(self) -> None:
        if self.default_operator not in self.allowed_operators:
            raise InvalidFilterDefinition(
                f"Default operator '{self.default_operator.value}' of '{self.id}' is not among its allowed operators"
            )
        if self.kind == FieldKind.SELECT and not self.options:
            raise InvalidFilterDefinition(f"Select filter '{self.id}' must declare its options")

    def allows(self, operator: Operator | str) -> bool:
        """Whether ``operator`` is legal for this definition."""
        try:
            return Operator(operator) in self.allowed_operators
        except ValueError:
            return False

    def to_dict(self) -> dict[str, Any]:
        """Serialize the definition for display surfaces."""
        result: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "kind": self.kind.value,
            "field": self.field,
            "allowedOperators": [op.value for op in self.allowed_operators],
            "defaultOperator": self.default_operator.value,
            "operatorLabels": {op.value: OPERATOR_LABELS[op] for op in self.allowed_operators},
        }
        if self.options is not None:
            result["options"] = list(self.options)
        return result
