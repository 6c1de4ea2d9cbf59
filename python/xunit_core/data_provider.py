"""Resolution of data sets for parameterized test methods.

A test method receives its data sets either from provider methods
(``data_provider`` / ``data_provider_external``) or from literal
declarations (``with_data``). When provider methods are declared, the
literal declarations are ignored.

Resolution Contract:
1. No declared source: resolve() returns None
2. Provider methods are validated (public, static, no parameters) before
   they are called; a failing check or a raising provider is reported as
   InvalidDataProviderError
3. Positional data sets are numbered in order across all providers; a
   named data set may only be defined once
4. The result must not be empty and every data set must be a tuple or list

``Data Provider Method Called`` is emitted before each provider is called,
and one ``Data Provider Method Finished`` listing every provider called so
far is emitted on both the success and the failure path.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .event_facade import EventFacade
from .exceptions import InvalidDataProviderError
from .logging import log_debug
from .metadata import DataProvider, MetadataCollection, MetadataParser, TestWith
from .reflection import describe_method
from .types import ClassMethod

DataSets = dict[int | str, tuple[Any, ...]]


class DataProviderResolver:
    """Expands declared data sources into concrete argument tuples.

    Example:
        >>> resolver = DataProviderResolver(facade=facade)
        >>> resolver.resolve(GreeterTest, "test_greets")
        {'alice': ('Alice',), 'bob': ('Bob',)}
    """

    def __init__(
        self,
        facade: EventFacade | None = None,
        parser: MetadataParser | None = None,
    ) -> None:
        self._facade = facade or EventFacade.instance()
        self._parser = parser or MetadataParser()

    def resolve(self, test_class: type, method_name: str) -> DataSets | None:
        """Return the data sets for a test method, or None if it declares none.

        Raises:
            InvalidDataProviderError: If the data sets cannot be resolved.
        """
        metadata = self._parser.for_method(test_class, method_name)
        providers = metadata.is_data_provider()
        test_with = metadata.is_test_with()

        if providers.is_empty() and test_with.is_empty():
            return None

        if providers.is_not_empty():
            data = self._data_provided_by_methods(test_class, method_name, providers)
        else:
            data = self._data_provided_by_metadata(test_with)

        if not data:
            raise InvalidDataProviderError("Empty data set provided by data provider")

        result: DataSets = {}
        for key, value in data.items():
            if not isinstance(value, (tuple, list)):
                label = f"#{key}" if isinstance(key, int) else f'"{key}"'
                raise InvalidDataProviderError(f"Data set {label} is invalid")
            result[key] = tuple(value)

        log_debug(
            f"Resolved {len(result)} data sets",
            {"test": f"{test_class.__qualname__}::{method_name}"},
        )
        return result

    def _data_provided_by_methods(
        self,
        test_class: type,
        method_name: str,
        providers: MetadataCollection,
    ) -> dict[int | str, Any]:
        emitter = self._facade.emitter()
        test_method = ClassMethod(class_name=test_class.__qualname__, method_name=method_name)
        methods_called: list[ClassMethod] = []
        result: dict[int | str, Any] = {}
        next_index = 0

        for provider in providers:
            if not isinstance(provider, DataProvider):
                raise TypeError(f"Expected DataProvider metadata, got {type(provider).__name__}")
            provider_method = ClassMethod(
                class_name=provider.class_name,
                method_name=provider.method_name,
            )
            emitter.data_provider_method_called(test_method, provider_method)
            methods_called.append(provider_method)

            try:
                items = self._call_provider(provider)
            except Exception as e:
                emitter.data_provider_method_finished(test_method, *methods_called)
                raise InvalidDataProviderError(str(e)) from e

            for key, value in items:
                if isinstance(key, int):
                    result[next_index] = value
                    next_index += 1
                elif key in result:
                    emitter.data_provider_method_finished(test_method, *methods_called)
                    raise InvalidDataProviderError(
                        f'The key "{key}" has already been defined by a previous data provider'
                    )
                else:
                    result[key] = value

        emitter.data_provider_method_finished(test_method, *methods_called)
        return result

    def _call_provider(self, provider: DataProvider) -> list[tuple[Any, Any]]:
        if provider.class_ref is None:
            raise InvalidDataProviderError(
                f"Data Provider method {provider.method_name}() has no class"
            )

        descriptor = describe_method(provider.class_ref, provider.method_name)
        name = f"{descriptor.class_name}::{descriptor.method_name}()"

        if not descriptor.is_public:
            raise InvalidDataProviderError(f"Data Provider method {name} is not public")
        if not descriptor.is_static:
            raise InvalidDataProviderError(f"Data Provider method {name} is not static")
        if descriptor.parameter_count > 0:
            raise InvalidDataProviderError(f"Data Provider method {name} expects an argument")

        data = descriptor.invoke()

        if isinstance(data, Mapping):
            return list(data.items())
        if isinstance(data, (str, bytes)) or not isinstance(data, Iterable):
            raise InvalidDataProviderError(
                f"Data Provider method {name} must return an iterable, "
                f"{type(data).__name__} returned"
            )
        return list(enumerate(data))

    def _data_provided_by_metadata(self, test_with: MetadataCollection) -> dict[int | str, Any]:
        result: dict[int | str, Any] = {}
        next_index = 0

        for declaration in test_with:
            if not isinstance(declaration, TestWith):
                raise TypeError(f"Expected TestWith metadata, got {type(declaration).__name__}")
            if declaration.has_name():
                key = declaration.name
                if key in result:
                    raise InvalidDataProviderError(
                        f'The key "{key}" has already been defined by a previous '
                        "with_data declaration"
                    )
                result[key] = declaration.data
            else:
                result[next_index] = declaration.data
                next_index += 1

        return result


__all__ = ["DataProviderResolver", "DataSets"]
