from dataclasses import dataclass
from typing import Any

from ..types.filter import FilterValue, Operator, SortDirection

_OPERATOR_VALUES = frozenset(op.value for op in Operator)


@dataclass
class ActiveFilter:
    """A composed, user-configured predicate bound to a filter definition.

    Instances are owned by an ActiveFilterSet, which keeps ``operator`` legal
    for the definition and ``value`` shaped for the definition's field kind.

    :param id: Opaque unique token, never reused within a session
    :param definition_id: ID of the FilterDefinition this filter is bound to
    :param operator: Chosen operator. Usually an Operator; a plain string only
        when built by hand with an operator this version does not know.
    :param value: Filter value, or None when absent
    :param sort_direction: Sort direction contributed by this filter, if any
    """

    id: str
    definition_id: str
    operator: Operator | str
    value: FilterValue = None
    sort_direction: SortDirection | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted wire shape. Absent value and sort direction are omitted."""
        result: dict[str, Any] = {
            "id": self.id,
            "definitionId": self.definition_id,
            "operator": self.operator.value if isinstance(self.operator, Operator) else self.operator,
        }
        if self.value is not None:
            result["value"] = list(self.value) if isinstance(self.value, list) else self.value
        if self.sort_direction is not None:
            result["sortDirection"] = SortDirection(self.sort_direction).value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActiveFilter":
        """Read the persisted wire shape. Unknown keys are ignored.

        The legacy key names ``filterId`` and ``sortOrder`` are accepted too.

        :raises KeyError: If ``id`` or the definition id is missing
        :raises ValueError: If the sort direction is not ``asc``/``desc``
        """
        definition_id = data["definitionId"] if "definitionId" in data else data["filterId"]
        operator = data.get("operator")
        if operator in _OPERATOR_VALUES:
            operator = Operator(operator)
        sort_direction = data.get("sortDirection", data.get("sortOrder"))
        return cls(
            id=str(data["id"]),
            definition_id=str(definition_id),
            operator=operator,
            value=data.get("value"),
            sort_direction=SortDirection(sort_direction) if sort_direction is not None else None,
        )
