"""TestSuite and TestSuiteLoader tests."""

from __future__ import annotations

import textwrap

import pytest

from xunit_core import (
    DataProviderResolver,
    InvalidDataProviderError,
    TestCase,
    TestMethod,
    TestSuite,
    TestSuiteLoader,
    data_provider,
)
from xunit_core.suite import collect_test_methods, is_test_class


class BaseCase(TestCase):
    def test_inherited(self):
        pass

    def test_overridden(self):
        pass


class ChildCase(BaseCase):
    def test_own(self):
        pass

    def test_overridden(self):
        pass

    def helper(self):
        pass

    test_not_a_function = 3


class ProviderCase(TestCase):
    @staticmethod
    def names():
        return {"alice": ("Alice",), "bob": ("Bob",)}

    def instance_provider(self):
        return []

    def test_plain(self):
        pass

    @data_provider("names")
    def test_named(self, name):
        pass

    @data_provider("instance_provider")
    def test_invalid(self, value):
        pass


class _PrivateCase(TestCase):
    def test_hidden(self):
        pass


@pytest.fixture
def loader(facade) -> TestSuiteLoader:
    return TestSuiteLoader(DataProviderResolver(facade))


class TestCollectTestMethods:
    """Tests for test method discovery."""

    def test_declaration_order_with_inheritance(self):
        """Test inherited methods first, overrides keep their position."""
        assert collect_test_methods(ChildCase) == ["test_inherited", "test_overridden", "test_own"]

    def test_framework_methods_are_not_tests(self):
        """Test TestCase's own test-prefixed helpers such as test_id are ignored."""

        class SingleCase(TestCase):
            def test_one(self):
                pass

        assert collect_test_methods(SingleCase) == ["test_one"]

    def test_mixin_tests_are_collected(self):
        class SharedTests:
            def test_shared(self):
                pass

        class MixedCase(SharedTests, TestCase):
            def test_own(self):
                pass

        assert collect_test_methods(MixedCase) == ["test_shared", "test_own"]

    def test_is_test_class(self):
        assert is_test_class(ChildCase)
        assert not is_test_class(TestCase)
        assert not is_test_class(_PrivateCase)
        assert not is_test_class(object)
        assert not is_test_class(ChildCase("test_own"))


class TestTestSuite:
    """Tests for the suite tree."""

    def test_from_class(self, loader):
        suite = loader.load_class(ChildCase)
        assert suite.name == "ChildCase"
        assert suite.test_class is ChildCase
        assert [test.test_id() for test in suite.tests()] == [
            "ChildCase::test_inherited",
            "ChildCase::test_overridden",
            "ChildCase::test_own",
        ]

    def test_data_sets_become_nested_suite(self, loader):
        """Test a method with data sets becomes a suite named Class::method."""
        suite = loader.load_class(ProviderCase)
        children = suite.children()

        assert isinstance(children[0], TestMethod)
        assert isinstance(children[1], TestSuite)
        assert children[1].name == "ProviderCase::test_named"
        assert [test.test_id() for test in children[1].tests()] == [
            'ProviderCase::test_named with data set "alice"',
            'ProviderCase::test_named with data set "bob"',
        ]
        assert suite.count() == 4

    def test_invalid_provider_becomes_placeholder(self, loader):
        """Test a provider error is carried by a placeholder test."""
        suite = loader.load_class(ProviderCase)
        placeholder = suite.children()[2]

        assert isinstance(placeholder, TestMethod)
        assert placeholder.test_id() == "ProviderCase::test_invalid"
        assert isinstance(placeholder.provider_error, InvalidDataProviderError)
        assert "is not static" in str(placeholder.provider_error)

    def test_create_test_case(self, facade):
        test = TestMethod(ProviderCase, "test_named", "alice", ("Alice",))
        case = test.create(facade)
        assert isinstance(case, ProviderCase)
        assert case.data == ("Alice",)
        assert case.test_id() == test.test_id()

    def test_empty_suite(self):
        suite = TestSuite("empty")
        assert suite.is_empty()
        assert suite.count() == 0


class TestLoadingFiles:
    """Tests for loading files and directories."""

    def write_case(self, directory, name, class_names):
        body = "from xunit_core import TestCase\n"
        for class_name in class_names:
            body += textwrap.dedent(
                f"""

                class {class_name}(TestCase):
                    def test_one(self):
                        self.assert_true(True)

                    def test_two(self):
                        self.assert_true(True)
                """
            )
        path = directory / name
        path.write_text(body, encoding="utf-8")
        return path

    def test_single_class_file_yields_class_suite(self, loader, tmp_path):
        """Test a file with one test class yields that class's suite."""
        path = self.write_case(tmp_path, "test_single_file.py", ["SingleCase"])
        suite = loader.load_file(path)
        assert suite.name == "SingleCase"
        assert suite.count() == 2

    def test_several_classes_are_grouped_by_module(self, loader, tmp_path):
        path = self.write_case(tmp_path, "test_several_file.py", ["FirstCase", "SecondCase"])
        suite = loader.load_file(path)
        assert suite.name == "test_several_file"
        assert [child.name for child in suite.children()] == ["FirstCase", "SecondCase"]

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(FileNotFoundError):
            loader.load_file(tmp_path / "missing.py")

    def test_load_directory(self, loader, tmp_path):
        """Test only files matching the pattern are loaded, sorted by path."""
        self.write_case(tmp_path, "test_b_dir.py", ["BDirCase"])
        self.write_case(tmp_path, "test_a_dir.py", ["ADirCase"])
        self.write_case(tmp_path, "helper_dir.py", ["HelperDirCase"])

        suite = loader.load_path(tmp_path)

        assert [child.name for child in suite.children()] == ["ADirCase", "BDirCase"]
        assert suite.count() == 4
