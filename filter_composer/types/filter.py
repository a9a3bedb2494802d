from enum import Enum
from typing import Union


class FieldKind(str, Enum):
    """Value kind of a filterable field. Decides legal operators and coercion."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    ARRAY = "array"
    SELECT = "select"


class Operator(str, Enum):
    """Comparison applied by a single filter."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    IN = "in"
    NOT_IN = "not_in"
    IS_TRUE = "is_true"
    IS_FALSE = "is_false"
    BEFORE = "before"
    AFTER = "after"
    BETWEEN = "between"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


OPERATOR_LABELS: dict[Operator, str] = {
    Operator.EQUALS: "Equals",
    Operator.NOT_EQUALS: "Not Equals",
    Operator.CONTAINS: "Contains",
    Operator.NOT_CONTAINS: "Does Not Contain",
    Operator.STARTS_WITH: "Starts With",
    Operator.ENDS_WITH: "Ends With",
    Operator.GREATER_THAN: "Greater Than",
    Operator.LESS_THAN: "Less Than",
    Operator.GREATER_THAN_OR_EQUAL: "Greater Than or Equal",
    Operator.LESS_THAN_OR_EQUAL: "Less Than or Equal",
    Operator.IN: "In",
    Operator.NOT_IN: "Not In",
    Operator.IS_TRUE: "Is True",
    Operator.IS_FALSE: "Is False",
    Operator.BEFORE: "Before",
    Operator.AFTER: "After",
    Operator.BETWEEN: "Between",
}

# Operators whose filter value is a list rather than a scalar
LIST_OPERATORS: frozenset[Operator] = frozenset({Operator.IN, Operator.NOT_IN, Operator.BETWEEN})

# Operators that ignore the stored filter value
VALUELESS_OPERATORS: frozenset[Operator] = frozenset({Operator.IS_TRUE, Operator.IS_FALSE})

Scalar = Union[str, int, float, bool]
FilterValue = Union[Scalar, list[str], list[int], list[float], None]
