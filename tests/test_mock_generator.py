"""Test double generation tests.

These tests verify:
- Generated doubles intercept public methods
- Keyword arguments are bound to positional order
- Default return values follow return annotations
- Stubs, partial mocks and test proxies
- Creation events
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import pytest

from xunit_core import EventKind, MethodCannotBeConfiguredError, MockObjectError
from xunit_core.mock_object import (
    InvokedCount,
    create_double,
    doubleable_methods,
    generate_return_value,
    invocation_handler_of,
    is_double,
)


class Mailer:
    def __init__(self, host: str) -> None:
        self.host = host
        self.sent: list[str] = []

    def send(self, recipient: str, subject: str = "Hello") -> bool:
        self.sent.append(recipient)
        return True

    def count(self) -> int:
        return len(self.sent)

    def recipients(self) -> list[str]:
        return list(self.sent)

    def find(self, recipient: str) -> str | None:
        return recipient if recipient in self.sent else None

    def broadcast(self, *recipients: str) -> int:
        return len(recipients)

    @staticmethod
    def version() -> str:
        return "1.0"

    @property
    def label(self) -> str:
        return f"mailer@{self.host}"

    def _connect(self) -> None:
        raise AssertionError("never called on a double")


class Repository(ABC):
    @abstractmethod
    def load(self, key: str) -> dict: ...


class TestDoubleableMethods:
    """Tests for method discovery."""

    def test_public_instance_methods_only(self):
        """Test static methods, properties and private methods are skipped."""
        assert set(doubleable_methods(Mailer)) == {
            "send",
            "count",
            "recipients",
            "find",
            "broadcast",
        }


class TestMockObjects:
    """Tests for mock objects."""

    def test_double_is_instance_of_doubled_class(self, facade):
        mailer = create_double(Mailer, facade=facade)
        assert isinstance(mailer, Mailer)
        assert is_double(mailer)
        assert not is_double(Mailer("localhost"))

    def test_constructor_is_not_called(self, facade):
        """Test the original constructor is skipped by default."""
        mailer = create_double(Mailer, facade=facade)
        assert not hasattr(mailer, "host")

    def test_default_return_values(self, facade):
        """Test unconfigured calls return values derived from annotations."""
        mailer = create_double(Mailer, facade=facade)

        assert mailer.send("alice") is False
        assert mailer.count() == 0
        assert mailer.recipients() == []
        assert mailer.find("alice") is None

    def test_keyword_arguments_are_bound_positionally(self, facade):
        """Test keyword arguments arrive in signature order with defaults applied."""
        mailer = create_double(Mailer, facade=facade)
        mailer.expects(InvokedCount(1)).method("send").with_("alice", "Hi")

        mailer.send(subject="Hi", recipient="alice")

        assert invocation_handler_of(mailer).verify().is_success

    def test_defaults_are_applied(self, facade):
        mailer = create_double(Mailer, facade=facade)
        mailer.send("alice")
        invocation = invocation_handler_of(mailer).history()[0]
        assert invocation.arguments == ("alice", "Hello")

    def test_var_positional_arguments_are_expanded(self, facade):
        mailer = create_double(Mailer, facade=facade)
        mailer.broadcast("a", "b")
        assert invocation_handler_of(mailer).history()[0].arguments == ("a", "b")

    def test_method_shorthand(self, facade):
        """Test method() configures an any-count expectation."""
        mailer = create_double(Mailer, facade=facade)
        mailer.method("count").will_return(3)
        assert mailer.count() == 3
        assert mailer.count() == 3

    def test_unknown_method_cannot_be_configured(self, facade):
        mailer = create_double(Mailer, facade=facade)
        with pytest.raises(MethodCannotBeConfiguredError):
            mailer.method("version")

    def test_abstract_class(self, facade):
        """Test abstract classes can be doubled."""
        repository = create_double(Repository, facade=facade)
        repository.method("load").will_return({"id": 1})
        assert repository.load("a") == {"id": 1}

    def test_each_double_has_its_own_handler(self, facade):
        first = create_double(Mailer, facade=facade)
        second = create_double(Mailer, facade=facade)
        first.count()
        assert len(invocation_handler_of(first).history()) == 1
        assert len(invocation_handler_of(second).history()) == 0

    def test_not_a_double(self):
        with pytest.raises(MockObjectError):
            invocation_handler_of(Mailer("localhost"))

    def test_class_required(self, facade):
        with pytest.raises(MockObjectError):
            create_double(Mailer("localhost"), facade=facade)

    def test_creation_event(self, facade, collector):
        create_double(Mailer, facade=facade)
        facade.seal()
        assert "Mock Object Created (Mailer)" in collector.as_strings()


class TestStubs:
    """Tests for stubs."""

    def test_stub_has_no_expects(self, facade):
        stub = create_double(Mailer, stub=True, facade=facade)
        assert not hasattr(stub, "expects")
        stub.method("count").will_return(2)
        assert stub.count() == 2

    def test_creation_event(self, facade, collector):
        create_double(Mailer, stub=True, facade=facade)
        facade.seal()
        assert EventKind.TEST_STUB_CREATED in collector.kinds()


class TestPartialDoubles:
    """Tests for partial mocks and test proxies."""

    def test_partial_mock_keeps_other_methods(self, facade):
        """Test methods not listed keep their implementation."""
        mailer = create_double(
            Mailer,
            only_methods=["count"],
            call_original_constructor=True,
            constructor_arguments=("localhost",),
            facade=facade,
        )
        mailer.method("count").will_return(10)

        mailer.send("alice")

        assert mailer.sent == ["alice"]
        assert mailer.count() == 10

    def test_partial_mock_unknown_method(self, facade):
        with pytest.raises(MethodCannotBeConfiguredError):
            create_double(Mailer, only_methods=["missing"], facade=facade)

    def test_test_proxy_forwards_and_records(self, facade):
        """Test proxies call the original and still record invocations."""
        mailer = create_double(
            Mailer,
            call_original_constructor=True,
            constructor_arguments=("localhost",),
            forward_to_original=True,
            facade=facade,
        )
        mailer.expects(InvokedCount(1)).method("send")

        assert mailer.send("alice") is True
        assert mailer.count() == 1
        assert mailer.label == "mailer@localhost"
        assert invocation_handler_of(mailer).verify().is_success


class TestGenerateReturnValue:
    """Tests for default return value generation."""

    @pytest.mark.parametrize(
        ("annotation", "expected"),
        [
            (int, 0),
            (bool, False),
            (str, ""),
            (list[int], []),
            (dict[str, int], {}),
            (tuple, ()),
            (int | None, None),
            (None, None),
            (Mailer, None),
        ],
    )
    def test_defaults(self, annotation, expected):
        assert generate_return_value(annotation) == expected
