"""Test suite model and loader.

A TestSuite is a tree: class suites contain TestMethods, and a test method
with data sets becomes a nested suite named ``Class::method`` holding one
TestMethod per data set.

The loader builds suites from classes, modules, files and directories.
Data providers are resolved while loading, so their events are emitted
before the event facade is sealed.

Example:
    >>> loader = TestSuiteLoader(DataProviderResolver(facade))
    >>> suite = loader.load_file("tests/greeter_test.py")
    >>> suite.count()
    4
"""

from __future__ import annotations

import importlib.util
import inspect
import sys
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any

from .data_provider import DataProviderResolver
from .event_facade import EventFacade
from .exceptions import InvalidDataProviderError
from .logging import log_debug, log_info, log_warn
from .test_case import TestCase, build_test_id


@dataclass(frozen=True)
class TestMethod:
    """One runnable test: a method of a test class with one data set.

    When the data provider of the method could not be resolved, the test
    carries the error instead of data and is reported as Errored.
    """

    __test__ = False

    test_class: type[TestCase]
    method_name: str
    data_set_name: int | str | None = None
    data: tuple[Any, ...] = ()
    provider_error: InvalidDataProviderError | None = None

    def test_id(self) -> str:
        return build_test_id(self.test_class, self.method_name, self.data_set_name)

    def create(self, facade: EventFacade | None = None) -> TestCase:
        """Instantiate the test case that runs this test."""
        return self.test_class(self.method_name, self.data, self.data_set_name, facade)


class TestSuite:
    """Named, ordered collection of tests and nested suites."""

    __test__ = False

    def __init__(self, name: str, test_class: type[TestCase] | None = None) -> None:
        self.name = name
        self.test_class = test_class
        self._children: list[TestSuite | TestMethod] = []

    def add(self, child: TestSuite | TestMethod) -> None:
        self._children.append(child)

    def children(self) -> list[TestSuite | TestMethod]:
        return list(self._children)

    def tests(self) -> Iterator[TestMethod]:
        """Iterate over all tests in the tree, depth first."""
        for child in self._children:
            if isinstance(child, TestSuite):
                yield from child.tests()
            else:
                yield child

    def count(self) -> int:
        return sum(1 for _ in self.tests())

    def is_empty(self) -> bool:
        return self.count() == 0

    @classmethod
    def from_class(
        cls,
        test_class: type[TestCase],
        resolver: DataProviderResolver | None = None,
    ) -> TestSuite:
        """Build the suite for a test class.

        Args:
            test_class: TestCase subclass to collect test methods from.
            resolver: Resolver for data providers (defaults to one on the
                singleton facade).
        """
        resolver = resolver or DataProviderResolver()
        suite = cls(test_class.__qualname__, test_class)

        for method_name in collect_test_methods(test_class):
            try:
                data_sets = resolver.resolve(test_class, method_name)
            except InvalidDataProviderError as e:
                log_warn(
                    "Invalid data provider",
                    {"test": f"{test_class.__qualname__}::{method_name}", "error": str(e)},
                )
                suite.add(TestMethod(test_class, method_name, provider_error=e))
                continue

            if data_sets is None:
                suite.add(TestMethod(test_class, method_name))
                continue

            data_suite = cls(f"{test_class.__qualname__}::{method_name}")
            for key, data in data_sets.items():
                data_suite.add(TestMethod(test_class, method_name, key, data))
            suite.add(data_suite)

        return suite

    def __repr__(self) -> str:
        return f"TestSuite({self.name!r}, tests={self.count()})"


def collect_test_methods(test_class: type) -> list[str]:
    """Return the test method names of a class in declaration order.

    Inherited test methods come first; an override keeps the position of
    the method it overrides.
    """
    prefix = getattr(test_class, "test_method_prefix", "test")
    names: dict[str, None] = {}
    for klass in reversed(test_class.__mro__):
        if klass in TestCase.__mro__:
            continue
        for name, attribute in vars(klass).items():
            if not name.startswith(prefix) or not inspect.isfunction(attribute):
                continue
            names[name] = None
    return list(names)


def is_test_class(candidate: Any) -> bool:
    return (
        inspect.isclass(candidate)
        and issubclass(candidate, TestCase)
        and candidate is not TestCase
        and not inspect.isabstract(candidate)
        and not candidate.__name__.startswith("_")
    )


class TestSuiteLoader:
    """Builds test suites from classes, modules, files and directories."""

    __test__ = False

    def __init__(self, resolver: DataProviderResolver | None = None) -> None:
        self._resolver = resolver or DataProviderResolver()

    def load_class(self, test_class: type[TestCase]) -> TestSuite:
        return TestSuite.from_class(test_class, self._resolver)

    def load_module(self, module: ModuleType) -> TestSuite:
        """Collect the test classes defined in a module, in definition order.

        A module that defines a single test class yields that class's suite.
        """
        classes = [
            candidate
            for candidate in vars(module).values()
            if is_test_class(candidate) and candidate.__module__ == module.__name__
        ]
        if len(classes) == 1:
            return self.load_class(classes[0])

        suite = TestSuite(module.__name__)
        for test_class in classes:
            suite.add(self.load_class(test_class))
        return suite

    def load_file(self, path: str | Path) -> TestSuite:
        """Import a Python file and collect its test classes.

        Raises:
            FileNotFoundError: If the file does not exist.
            ImportError: If the file cannot be imported.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Test file not found: {path}")

        module_name = path.stem
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot import test file: {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
        log_debug(f"Imported test file: {path}")

        return self.load_module(module)

    def load_directory(self, path: str | Path, pattern: str = "test_*.py") -> TestSuite:
        """Collect the test files below a directory matching ``pattern``."""
        path = Path(path)
        suite = TestSuite(str(path))
        for file in sorted(path.rglob(pattern)):
            suite.add(self.load_file(file))
        log_info(f"Loaded {suite.count()} tests from {path}")
        return suite

    def load_path(self, path: str | Path) -> TestSuite:
        """Load a file or a directory."""
        path = Path(path)
        if path.is_dir():
            return self.load_directory(path)
        return self.load_file(path)


__all__ = ["TestMethod", "TestSuite", "TestSuiteLoader", "is_test_class", "collect_test_methods"]
