"""Unit tests for value shapes, defaults and coercion."""

import math
from datetime import date, datetime, timezone

import pytest

from filter_composer.filters.registry import EmployeeFilterRegistry
from filter_composer.filters.values import (
    default_value,
    is_value_complete,
    to_epoch_ms,
    to_number,
    to_text,
    validate_value,
)
from filter_composer.types.filter import FieldKind, Operator


def _definition(definition_id: str):
    definition = EmployeeFilterRegistry.lookup(definition_id)
    assert definition is not None
    return definition


class TestDefaultValue:
    """Tests for kind default values."""

    @pytest.mark.parametrize(
        "kind, expected",
        [
            (FieldKind.NUMBER, 0),
            (FieldKind.BOOLEAN, True),
            (FieldKind.ARRAY, []),
            (FieldKind.TEXT, ""),
            (FieldKind.SELECT, ""),
        ],
    )
    def test_default_per_kind(self, kind: FieldKind, expected: object) -> None:
        """Each kind starts from its documented default."""
        assert default_value(kind) == expected

    def test_date_default_is_today(self) -> None:
        """Date filters default to today's calendar date."""
        assert default_value(FieldKind.DATE) == date.today().isoformat()
        assert default_value(FieldKind.DATE, today=lambda: "2024-03-01") == "2024-03-01"

    def test_array_default_is_fresh_list(self) -> None:
        """Each call returns a new list."""
        assert default_value(FieldKind.ARRAY) is not default_value(FieldKind.ARRAY)


class TestValidateValue:
    """Tests for value shape checks per field kind."""

    @pytest.mark.parametrize(
        "definition_id, value",
        [
            ("firstName", "Al"),
            ("state", ["CA", "NY"]),
            ("salary", 80000),
            ("salary", 2.5),
            ("salary", [50000, 90000]),
            ("startDate", "2020-01-01"),
            ("startDate", ["2020-01-01", "2020-12-31"]),
            ("isActive", False),
            ("skills", "python"),
            ("skills", ["python", "go"]),
            ("department", "HR"),
            ("salary", None),
        ],
    )
    def test_valid_shapes_accepted(self, definition_id: str, value: object) -> None:
        """Values shaped for the field kind pass."""
        assert validate_value(_definition(definition_id), value)

    @pytest.mark.parametrize(
        "definition_id, value",
        [
            ("firstName", 5),
            ("salary", "80000"),
            ("salary", True),
            ("salary", float("nan")),
            ("startDate", "not a date"),
            ("startDate", 20200101),
            ("isActive", "true"),
            ("isActive", [True]),
            ("skills", [1, 2]),
            ("firstName", {"$gt": ""}),
        ],
    )
    def test_invalid_shapes_rejected(self, definition_id: str, value: object) -> None:
        """Values of the wrong shape for the field kind fail."""
        assert not validate_value(_definition(definition_id), value)

    def test_long_string_rejected(self) -> None:
        """Strings beyond the configured maximum length fail."""
        assert not validate_value(_definition("firstName"), "a" * 2000)

    def test_large_array_rejected(self) -> None:
        """Lists beyond the configured maximum length fail."""
        assert not validate_value(_definition("skills"), ["x"] * 200)


class TestIsValueComplete:
    """Tests for the readiness check of filter values."""

    def test_empty_text_is_incomplete(self) -> None:
        """A text filter with an empty string is not ready."""
        assert not is_value_complete(Operator.CONTAINS, "", _definition("firstName"))

    def test_zero_is_complete_number(self) -> None:
        """Zero is a usable number."""
        assert is_value_complete(Operator.EQUALS, 0, _definition("salary"))

    def test_boolean_operators_need_no_value(self) -> None:
        """is_true and is_false ignore the stored value."""
        assert is_value_complete(Operator.IS_TRUE, None, _definition("isActive"))

    def test_unparseable_date_is_incomplete(self) -> None:
        """A date filter needs a parseable date."""
        assert is_value_complete(Operator.AFTER, "2020-01-01", _definition("startDate"))
        assert not is_value_complete(Operator.AFTER, "soon", _definition("startDate"))

    def test_array_accepts_list_or_string(self) -> None:
        """Array filters accept a non-empty list or a string."""
        assert is_value_complete(Operator.CONTAINS, ["go"], _definition("skills"))
        assert is_value_complete(Operator.CONTAINS, "go", _definition("skills"))
        assert not is_value_complete(Operator.CONTAINS, [], _definition("skills"))


class TestCoercion:
    """Tests for coercions used by the evaluator."""

    def test_to_number(self) -> None:
        """Numbers, numeric strings and booleans coerce; other values become NaN."""
        assert to_number("42") == 42.0
        assert to_number(" 2.5 ") == 2.5
        assert to_number(True) == 1.0
        assert to_number("") == 0.0
        assert math.isnan(to_number("abc"))
        assert math.isnan(to_number(None))
        assert math.isnan(to_number(["1"]))

    def test_to_epoch_ms_parses_calendar_dates(self) -> None:
        """Date strings and date objects map to the same instant."""
        expected = datetime(2020, 6, 15, tzinfo=timezone.utc).timestamp() * 1000
        assert to_epoch_ms("2020-06-15") == expected
        assert to_epoch_ms(date(2020, 6, 15)) == expected
        assert to_epoch_ms(datetime(2020, 6, 15)) == expected
        assert math.isnan(to_epoch_ms("garbage"))

    def test_to_text(self) -> None:
        """String forms follow the wire conventions."""
        assert to_text(True) == "true"
        assert to_text(3.0) == "3"
        assert to_text(2.5) == "2.5"
        assert to_text(["a", "b"]) == "a,b"
        assert to_text(None) == ""
