"""Constraint tests."""

from __future__ import annotations

import pytest

from xunit_core import (
    AssertionFailedError,
    Callback,
    Contains,
    Count,
    GreaterThan,
    IsAnything,
    IsEqual,
    IsFalse,
    IsIdentical,
    IsInstanceOf,
    IsNone,
    IsTrue,
    LessThan,
    LogicalNot,
    StringContains,
)
from xunit_core.constraints import as_constraint, export


class TestMatching:
    """Tests for what each constraint accepts."""

    @pytest.mark.parametrize(
        ("constraint", "accepted", "rejected"),
        [
            (IsEqual(2), 2.0, 3),
            (IsIdentical(1), 1, True),
            (IsInstanceOf(str), "a", 1),
            (IsInstanceOf((int, str)), "a", 1.5),
            (IsNone(), None, 0),
            (IsTrue(), True, 1),
            (IsFalse(), False, 0),
            (StringContains("ell"), "hello", "help"),
            (Contains(2), [1, 2], [3]),
            (Count(2), (1, 2), [1]),
            (GreaterThan(1), 2, 1),
            (LessThan(1), 0, 1),
            (Callback(lambda value: value % 2 == 0), 4, 5),
            (LogicalNot(1), 2, 1),
        ],
    )
    def test_accepts_and_rejects(self, constraint, accepted, rejected):
        assert constraint.matches(accepted)
        assert not constraint.matches(rejected)

    def test_identical_objects(self):
        """Test non-scalars must be the same object."""
        value = [1]
        assert IsIdentical(value).matches(value)
        assert not IsIdentical(value).matches([1])

    def test_anything(self):
        assert IsAnything().matches(object())

    def test_string_contains_ignore_case(self):
        assert StringContains("ELL", ignore_case=True).matches("hello")
        assert not StringContains("ell").matches(42)

    def test_contains_on_non_container(self):
        assert not Contains(1).matches(5)


class TestFailureMessages:
    """Tests for failure descriptions."""

    def test_equal(self):
        assert IsEqual("b").failure_message("c") == "Failed asserting that 'c' is equal to 'b'."

    def test_description_is_prepended(self):
        message = IsTrue().failure_message(False, "flag must be set")
        assert message == "flag must be set\nFailed asserting that False is true."

    def test_count(self):
        assert Count(3).failure_message([1]) == (
            "Failed asserting that actual size 1 matches expected size 3."
        )

    def test_logical_not(self):
        assert LogicalNot(IsNone()).to_string() == "not is None"

    def test_instance_of_tuple(self):
        assert IsInstanceOf((int, str)).to_string() == "is an instance of one of int, str"

    def test_export_truncates_long_values(self):
        text = export("x" * 500)
        assert len(text) == 120
        assert text.endswith("...")


class TestEvaluate:
    """Tests for evaluate()."""

    def test_matching_value_passes(self):
        IsEqual(1).evaluate(1)

    def test_mismatch_raises(self):
        with pytest.raises(AssertionFailedError, match="is greater than 5"):
            GreaterThan(5).evaluate(1)


class TestAsConstraint:
    def test_wraps_plain_values(self):
        constraint = as_constraint("a")
        assert isinstance(constraint, IsEqual)
        assert constraint.value == "a"

    def test_returns_constraints_unchanged(self):
        constraint = IsNone()
        assert as_constraint(constraint) is constraint
