import os
from typing import Any

import pytest

from filter_composer.filters.active_set import ActiveFilterSet
from filter_composer.filters.registry import EmployeeFilterRegistry, FilterRegistry

os.environ.setdefault("TESTING", "1")

TODAY = "2024-03-01"


@pytest.fixture
def registry() -> type[FilterRegistry]:
    return EmployeeFilterRegistry


@pytest.fixture
def filter_set(registry: type[FilterRegistry]) -> ActiveFilterSet:
    """Empty set whose date defaults are pinned to TODAY."""
    return ActiveFilterSet(registry, today=lambda: TODAY)


@pytest.fixture
def employees() -> list[dict[str, Any]]:
    return [
        {
            "id": "EMP00001",
            "firstName": "Alice",
            "lastName": "Smith",
            "email": "alice.smith@example.com",
            "department": "Engineering",
            "salary": 95000,
            "startDate": "2019-04-01",
            "isActive": True,
            "skills": ["python", "go"],
            "performanceRating": 4.5,
        },
        {
            "id": "EMP00002",
            "firstName": "Bob",
            "lastName": "Jones",
            "email": "bob@corp.example.com",
            "department": "HR",
            "salary": 75000,
            "startDate": "2021-09-15",
            "isActive": False,
            "skills": ["recruiting"],
            "performanceRating": 3,
        },
        {
            "id": "EMP00003",
            "firstName": "Carol",
            "lastName": "Smithers",
            "email": "carol@example.com",
            "department": "Engineering",
            "salary": 80000,
            "startDate": "2020-06-15",
            "skills": ["python", "rust"],
            "performanceRating": None,
        },
    ]
