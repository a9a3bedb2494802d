"""Unit tests for ActiveFilterSet.

Tests composition, edits and reordering through public APIs only.
"""

import pytest

from filter_composer.errors import UnknownDefinition
from filter_composer.filters.active_set import ActiveFilterSet
from filter_composer.types.filter import Operator, SortDirection

TODAY = "2024-03-01"


def _ids(filter_set: ActiveFilterSet) -> list[str]:
    return [f.id for f in filter_set]


def _definition_ids(filter_set: ActiveFilterSet) -> list[str]:
    return [f.definition_id for f in filter_set]


class TestCompose:
    """Tests for ActiveFilterSet.compose."""

    def test_compose_uses_definition_defaults(self, filter_set: ActiveFilterSet) -> None:
        """A composed filter carries the default operator and kind default value."""
        # Arrange & Act
        salary = filter_set.compose("salary")
        start = filter_set.compose("startDate")
        skills = filter_set.compose("skills")
        active = filter_set.compose("isActive")

        # Assert
        assert salary.operator == Operator.GREATER_THAN_OR_EQUAL
        assert salary.value == 0
        assert start.value == TODAY
        assert skills.value == []
        assert active.value is True
        assert salary.sort_direction is None

    def test_compose_appends_to_end(self, filter_set: ActiveFilterSet) -> None:
        """New filters always land last."""
        # Arrange
        filter_set.compose("firstName")
        filter_set.compose("salary")

        # Act
        filter_set.compose("city")

        # Assert
        assert _definition_ids(filter_set) == ["firstName", "salary", "city"]

    def test_compose_assigns_unique_ids(self, filter_set: ActiveFilterSet) -> None:
        """Composing the same definition twice yields distinct ids."""
        # Arrange & Act
        first = filter_set.compose("salary")
        second = filter_set.compose("salary")

        # Assert
        assert first.id != second.id

    def test_ids_are_not_reused_after_removal(self, filter_set: ActiveFilterSet) -> None:
        """A removed filter's id is never handed out again."""
        # Arrange
        removed = filter_set.compose("salary")
        filter_set.remove(removed.id)

        # Act
        new_ids = {filter_set.compose("salary").id for _ in range(20)}

        # Assert
        assert removed.id not in new_ids

    def test_compose_unknown_definition_raises(self, filter_set: ActiveFilterSet) -> None:
        """compose fails loudly for ids missing from the registry."""
        # Act & Assert
        with pytest.raises(UnknownDefinition, match="nickname"):
            filter_set.compose("nickname")
        assert len(filter_set) == 0


class TestUpdate:
    """Tests for ActiveFilterSet.update."""

    def test_update_replaces_given_fields(self, filter_set: ActiveFilterSet) -> None:
        """update changes operator, value and sort direction in place."""
        # Arrange
        salary = filter_set.compose("salary")

        # Act
        result = filter_set.update(salary.id, operator="between", value=[50000, 90000], sort_direction="desc")

        # Assert
        assert result is salary
        assert salary.operator == Operator.BETWEEN
        assert salary.value == [50000, 90000]
        assert salary.sort_direction == SortDirection.DESC

    def test_update_leaves_missing_fields_untouched(self, filter_set: ActiveFilterSet) -> None:
        """Fields absent from the patch keep their values."""
        # Arrange
        salary = filter_set.compose("salary")
        filter_set.update(salary.id, sort_direction="asc")

        # Act
        filter_set.update(salary.id, value=1000)

        # Assert
        assert salary.sort_direction == SortDirection.ASC
        assert salary.operator == Operator.GREATER_THAN_OR_EQUAL

    def test_update_clears_sort_direction_with_none(self, filter_set: ActiveFilterSet) -> None:
        """Passing None removes the sort direction."""
        # Arrange
        salary = filter_set.compose("salary")
        filter_set.update(salary.id, sort_direction=SortDirection.ASC)

        # Act
        filter_set.update(salary.id, sort_direction=None)

        # Assert
        assert salary.sort_direction is None

    def test_update_ignores_disallowed_operator(self, filter_set: ActiveFilterSet) -> None:
        """An operator not allowed by the definition is dropped from the patch."""
        # Arrange
        salary = filter_set.compose("salary")

        # Act
        filter_set.update(salary.id, operator=Operator.CONTAINS, value=5)

        # Assert
        assert salary.operator == Operator.GREATER_THAN_OR_EQUAL
        assert salary.value == 5

    def test_update_ignores_unknown_operator_string(self, filter_set: ActiveFilterSet) -> None:
        """Strings that are not operators never enter the set."""
        # Arrange
        name = filter_set.compose("firstName")

        # Act
        filter_set.update(name.id, operator="sounds_like")

        # Assert
        assert name.operator == Operator.CONTAINS

    def test_update_ignores_value_of_wrong_shape(self, filter_set: ActiveFilterSet) -> None:
        """A value not fitting the field kind is dropped from the patch."""
        # Arrange
        salary = filter_set.compose("salary")

        # Act
        filter_set.update(salary.id, value="a lot", sort_direction="asc")

        # Assert
        assert salary.value == 0
        assert salary.sort_direction == SortDirection.ASC

    def test_update_ignores_unknown_sort_direction(self, filter_set: ActiveFilterSet) -> None:
        """Only asc and desc are accepted as sort directions."""
        # Arrange
        salary = filter_set.compose("salary")

        # Act
        filter_set.update(salary.id, sort_direction="sideways")

        # Assert
        assert salary.sort_direction is None

    def test_update_copies_list_values(self, filter_set: ActiveFilterSet) -> None:
        """The set does not share list values with the caller."""
        # Arrange
        skills = filter_set.compose("skills")
        wanted = ["python"]

        # Act
        filter_set.update(skills.id, value=wanted)
        wanted.append("go")

        # Assert
        assert skills.value == ["python"]

    def test_update_missing_id_is_noop(self, filter_set: ActiveFilterSet) -> None:
        """update of an absent id returns None without raising."""
        # Arrange
        filter_set.compose("salary")

        # Act
        result = filter_set.update("gone", value=1)

        # Assert
        assert result is None
        assert filter_set.filters[0].value == 0


class TestRemoveAndClear:
    """Tests for ActiveFilterSet.remove and clear."""

    def test_remove_deletes_entry(self, filter_set: ActiveFilterSet) -> None:
        """remove deletes only the matching filter."""
        # Arrange
        first = filter_set.compose("firstName")
        second = filter_set.compose("salary")

        # Act
        removed = filter_set.remove(first.id)

        # Assert
        assert removed is first
        assert _ids(filter_set) == [second.id]

    def test_remove_missing_id_is_noop(self, filter_set: ActiveFilterSet) -> None:
        """remove of an absent id changes nothing."""
        # Arrange
        filter_set.compose("firstName")

        # Act
        result = filter_set.remove("gone")

        # Assert
        assert result is None
        assert len(filter_set) == 1

    def test_clear_empties_set(self, filter_set: ActiveFilterSet) -> None:
        """clear removes every filter."""
        # Arrange
        filter_set.compose("firstName")
        filter_set.compose("salary")

        # Act
        filter_set.clear()

        # Assert
        assert len(filter_set) == 0


class TestReorder:
    """Tests for ActiveFilterSet.reorder."""

    @pytest.fixture
    def abcd(self, filter_set: ActiveFilterSet) -> list[str]:
        return [filter_set.compose(d).id for d in ("firstName", "lastName", "email", "phone")]

    def test_move_up_lands_before_target(self, filter_set: ActiveFilterSet, abcd: list[str]) -> None:
        """Moving a later filter onto an earlier one places it just before."""
        # Arrange
        a, b, c, d = abcd

        # Act
        changed = filter_set.reorder(d, b)

        # Assert
        assert changed
        assert _ids(filter_set) == [a, d, b, c]

    def test_move_down_lands_before_target(self, filter_set: ActiveFilterSet, abcd: list[str]) -> None:
        """Moving an earlier filter onto a later one places it just before, others keep order."""
        # Arrange
        a, b, c, d = abcd

        # Act
        filter_set.reorder(a, d)

        # Assert
        assert _ids(filter_set) == [b, c, a, d]

    def test_reorder_is_idempotent(self, filter_set: ActiveFilterSet, abcd: list[str]) -> None:
        """Repeating a reorder once achieved is a no-op."""
        # Arrange
        a, b, c, d = abcd
        filter_set.reorder(d, b)
        expected = _ids(filter_set)

        # Act
        changed = filter_set.reorder(d, b)

        # Assert
        assert not changed
        assert _ids(filter_set) == expected

    def test_reorder_when_already_preceding_is_noop(self, filter_set: ActiveFilterSet, abcd: list[str]) -> None:
        """A filter already right before its target stays put."""
        # Arrange
        a, b, c, d = abcd

        # Act
        changed = filter_set.reorder(b, c)

        # Assert
        assert not changed
        assert _ids(filter_set) == [a, b, c, d]

    @pytest.mark.parametrize("missing", ["source", "target"])
    def test_reorder_missing_id_is_noop(self, filter_set: ActiveFilterSet, abcd: list[str], missing: str) -> None:
        """reorder with an absent id changes nothing."""
        # Arrange
        a, b, c, d = abcd
        source, target = ("gone", b) if missing == "source" else (d, "gone")

        # Act
        changed = filter_set.reorder(source, target)

        # Assert
        assert not changed
        assert _ids(filter_set) == [a, b, c, d]

    def test_reorder_onto_itself_is_noop(self, filter_set: ActiveFilterSet, abcd: list[str]) -> None:
        """Dropping a filter on itself changes nothing."""
        # Arrange
        a, b, c, d = abcd

        # Act & Assert
        assert not filter_set.reorder(c, c)
        assert _ids(filter_set) == [a, b, c, d]


class TestSnapshots:
    """Tests for read access to the set."""

    def test_filters_returns_snapshot(self, filter_set: ActiveFilterSet) -> None:
        """Mutating the snapshot does not change the set."""
        # Arrange
        filter_set.compose("salary")

        # Act
        filter_set.filters.clear()

        # Assert
        assert len(filter_set) == 1

    def test_get_returns_filter_by_id(self, filter_set: ActiveFilterSet) -> None:
        """get finds filters by id and returns None otherwise."""
        # Arrange
        salary = filter_set.compose("salary")

        # Act & Assert
        assert filter_set.get(salary.id) is salary
        assert filter_set.get("gone") is None
