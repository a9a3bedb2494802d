from enum import Enum


class CatalogName(str, Enum):
    """Names of the filter catalogs shipped with the package."""

    Employees = "employees"
