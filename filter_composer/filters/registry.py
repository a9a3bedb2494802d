from abc import ABC
from typing import ClassVar

from ..types.common import CatalogName
from ..types.filter import FieldKind, Operator
from .definition import FilterDefinition

_TEXT_OPERATORS = (
    Operator.EQUALS,
    Operator.NOT_EQUALS,
    Operator.CONTAINS,
    Operator.NOT_CONTAINS,
    Operator.STARTS_WITH,
    Operator.ENDS_WITH,
)
_SHORT_TEXT_OPERATORS = (Operator.EQUALS, Operator.NOT_EQUALS, Operator.CONTAINS, Operator.NOT_CONTAINS)
_MEMBERSHIP_OPERATORS = (Operator.EQUALS, Operator.NOT_EQUALS, Operator.IN, Operator.NOT_IN)
_NUMBER_OPERATORS = (
    Operator.EQUALS,
    Operator.NOT_EQUALS,
    Operator.GREATER_THAN,
    Operator.LESS_THAN,
    Operator.GREATER_THAN_OR_EQUAL,
    Operator.LESS_THAN_OR_EQUAL,
    Operator.BETWEEN,
)
_DATE_OPERATORS = (Operator.EQUALS, Operator.NOT_EQUALS, Operator.BEFORE, Operator.AFTER, Operator.BETWEEN)


def _catalog(*definitions: FilterDefinition) -> dict[str, FilterDefinition]:
    return {definition.id: definition for definition in definitions}


class FilterRegistry(ABC):
    """Abstract, read-only catalog of filter definitions.

    Subclasses must define:
    - _filters: ClassVar[dict[str, FilterDefinition]] - definitions in declaration order
    - catalog_name: ClassVar[CatalogName] - the catalog this registry serves
    """

    _filters: ClassVar[dict[str, FilterDefinition]] = {}
    catalog_name: ClassVar[CatalogName]

    @classmethod
    def lookup(cls, definition_id: str) -> FilterDefinition | None:
        """Get a definition by ID, or None if not found."""
        return cls._filters.get(definition_id)

    @classmethod
    def all(cls) -> list[FilterDefinition]:
        """All definitions in catalog declaration order."""
        return list(cls._filters.values())

    @classmethod
    def get_filters_by_kind(cls, kind: FieldKind) -> list[FilterDefinition]:
        """Get all definitions of a specific field kind."""
        return [f for f in cls._filters.values() if f.kind == kind]

    @classmethod
    def get_by_field(cls, field: str) -> FilterDefinition | None:
        """First definition reading ``field``, or None."""
        for definition in cls._filters.values():
            if definition.field == field:
                return definition
        return None


class EmployeeFilterRegistry(FilterRegistry):
    """Employee directory filter definitions."""

    catalog_name: ClassVar[CatalogName] = CatalogName.Employees
    _filters: ClassVar[dict[str, FilterDefinition]] = _catalog(
        # Personal information
        FilterDefinition(
            id="firstName",
            label="First Name",
            description="Filter by employee first name",
            kind=FieldKind.TEXT,
            field="firstName",
            allowed_operators=_TEXT_OPERATORS,
            default_operator=Operator.CONTAINS,
        ),
        FilterDefinition(
            id="lastName",
            label="Last Name",
            description="Filter by employee last name",
            kind=FieldKind.TEXT,
            field="lastName",
            allowed_operators=_TEXT_OPERATORS,
            default_operator=Operator.CONTAINS,
        ),
        FilterDefinition(
            id="email",
            label="Email",
            description="Filter by employee email address",
            kind=FieldKind.TEXT,
            field="email",
            allowed_operators=_TEXT_OPERATORS,
            default_operator=Operator.CONTAINS,
        ),
        FilterDefinition(
            id="phone",
            label="Phone",
            description="Filter by employee phone number",
            kind=FieldKind.TEXT,
            field="phone",
            allowed_operators=_SHORT_TEXT_OPERATORS,
            default_operator=Operator.CONTAINS,
        ),
        # Work information
        FilterDefinition(
            id="department",
            label="Department",
            description="Filter by employee department",
            kind=FieldKind.SELECT,
            field="department",
            allowed_operators=_MEMBERSHIP_OPERATORS,
            default_operator=Operator.EQUALS,
            options=(
                "Customer Success",
                "Marketing",
                "Operations",
                "Engineering",
                "Design",
                "Legal",
                "Finance",
                "HR",
                "Product",
                "Security",
                "Sales",
            ),
        ),
        FilterDefinition(
            id="position",
            label="Position",
            description="Filter by employee job position/title",
            kind=FieldKind.TEXT,
            field="position",
            allowed_operators=_SHORT_TEXT_OPERATORS,
            default_operator=Operator.CONTAINS,
        ),
        FilterDefinition(
            id="manager",
            label="Manager",
            description="Filter by employee manager",
            kind=FieldKind.TEXT,
            field="manager",
            allowed_operators=_SHORT_TEXT_OPERATORS,
            default_operator=Operator.CONTAINS,
        ),
        FilterDefinition(
            id="salary",
            label="Salary",
            description="Filter by employee salary amount",
            kind=FieldKind.NUMBER,
            field="salary",
            allowed_operators=_NUMBER_OPERATORS,
            default_operator=Operator.GREATER_THAN_OR_EQUAL,
        ),
        FilterDefinition(
            id="startDate",
            label="Start Date",
            description="Filter by employee start date",
            kind=FieldKind.DATE,
            field="startDate",
            allowed_operators=_DATE_OPERATORS,
            default_operator=Operator.AFTER,
        ),
        FilterDefinition(
            id="birthDate",
            label="Birth Date",
            description="Filter by employee birth date",
            kind=FieldKind.DATE,
            field="birthDate",
            allowed_operators=_DATE_OPERATORS,
            default_operator=Operator.BEFORE,
        ),
        # Location
        FilterDefinition(
            id="city",
            label="City",
            description="Filter by employee city",
            kind=FieldKind.TEXT,
            field="city",
            allowed_operators=_SHORT_TEXT_OPERATORS,
            default_operator=Operator.EQUALS,
        ),
        FilterDefinition(
            id="state",
            label="State",
            description="Filter by employee state",
            kind=FieldKind.TEXT,
            field="state",
            allowed_operators=_MEMBERSHIP_OPERATORS,
            default_operator=Operator.EQUALS,
        ),
        FilterDefinition(
            id="country",
            label="Country",
            description="Filter by employee country",
            kind=FieldKind.TEXT,
            field="country",
            allowed_operators=(Operator.EQUALS, Operator.NOT_EQUALS),
            default_operator=Operator.EQUALS,
        ),
        FilterDefinition(
            id="zipCode",
            label="ZIP Code",
            description="Filter by employee ZIP/postal code",
            kind=FieldKind.TEXT,
            field="zipCode",
            allowed_operators=(Operator.EQUALS, Operator.NOT_EQUALS, Operator.STARTS_WITH),
            default_operator=Operator.STARTS_WITH,
        ),
        # Performance and status
        FilterDefinition(
            id="isActive",
            label="Active Status",
            description="Filter by employee active status",
            kind=FieldKind.BOOLEAN,
            field="isActive",
            allowed_operators=(Operator.IS_TRUE, Operator.IS_FALSE),
            default_operator=Operator.IS_TRUE,
        ),
        FilterDefinition(
            id="performanceRating",
            label="Performance Rating",
            description="Filter by employee performance rating (1-5)",
            kind=FieldKind.NUMBER,
            field="performanceRating",
            allowed_operators=_NUMBER_OPERATORS,
            default_operator=Operator.GREATER_THAN_OR_EQUAL,
        ),
        FilterDefinition(
            id="projects",
            label="Projects Count",
            description="Filter by number of projects assigned",
            kind=FieldKind.NUMBER,
            field="projects",
            allowed_operators=_NUMBER_OPERATORS,
            default_operator=Operator.GREATER_THAN_OR_EQUAL,
        ),
        FilterDefinition(
            id="vacationDays",
            label="Vacation Days",
            description="Filter by number of vacation days",
            kind=FieldKind.NUMBER,
            field="vacationDays",
            allowed_operators=_NUMBER_OPERATORS,
            default_operator=Operator.GREATER_THAN_OR_EQUAL,
        ),
        FilterDefinition(
            id="skills",
            label="Skills",
            description="Filter by employee skills and competencies",
            kind=FieldKind.ARRAY,
            field="skills",
            allowed_operators=(Operator.CONTAINS, Operator.NOT_CONTAINS, Operator.IN, Operator.NOT_IN),
            default_operator=Operator.CONTAINS,
        ),
    )


def get_all_registries() -> list[type[FilterRegistry]]:
    """Get all registered FilterRegistry subclasses.

    Automatically discovers all concrete subclasses of FilterRegistry.
    """
    return [registry for registry in FilterRegistry.__subclasses__() if hasattr(registry, "catalog_name")]


def get_filter_registry(catalog_name: CatalogName | str) -> type[FilterRegistry]:
    """Get the filter registry class for a catalog name."""
    for registry in get_all_registries():
        if registry.catalog_name == catalog_name:
            return registry
    supported = ", ".join(r.catalog_name.value for r in get_all_registries())
    raise ValueError(f"Unknown filter catalog: {catalog_name}. Supported: {supported}")
