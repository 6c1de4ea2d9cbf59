"""Generation of test doubles.

A double is an instance of a subclass generated on the fly for the doubled
class. Every intercepted public method binds its arguments against the
original signature and delegates to the double's InvocationHandler, so
keyword and positional calls are recorded the same way.

Example:
    >>> mailer = create_double(Mailer)
    >>> mailer.expects(InvokedCount(1)).method("send").will_return(True)
    >>> mailer.send("alice@example.com")
    True
    >>> invocation_handler_of(mailer).verify().is_success
    True
"""

from __future__ import annotations

import functools
import inspect
import itertools
import typing
from collections.abc import Callable, Iterable
from typing import Any

from ..event_facade import EventFacade
from ..exceptions import MethodCannotBeConfiguredError, MockObjectError
from ..logging import log_debug
from .builder import InvocationMocker
from .handler import InvocationHandler
from .rules import AnyInvokedCount, InvocationCountRule

_HANDLER_ATTRIBUTE = "_xunit_invocation_handler"
_counter = itertools.count(1)


def doubleable_methods(spec: type) -> dict[str, Callable[..., Any]]:
    """Return the public instance methods of a class, by name.

    Static methods, class methods, properties and names starting with an
    underscore are not doubled.
    """
    methods: dict[str, Callable[..., Any]] = {}
    for name in dir(spec):
        if name.startswith("_"):
            continue
        attribute = inspect.getattr_static(spec, name)
        if isinstance(attribute, (staticmethod, classmethod, property)):
            continue
        if inspect.isfunction(attribute):
            methods[name] = attribute
    return methods


def invocation_handler_of(double: Any) -> InvocationHandler:
    """Return the InvocationHandler behind a generated double.

    Raises:
        MockObjectError: If the object is not a generated double.
    """
    handler = getattr(type(double), _HANDLER_ATTRIBUTE, None)
    if not isinstance(handler, InvocationHandler):
        raise MockObjectError(f"{double!r} is not a test double")
    return handler


def is_double(value: Any) -> bool:
    return isinstance(getattr(type(value), _HANDLER_ATTRIBUTE, None), InvocationHandler)


def _return_annotation(function: Callable[..., Any]) -> Any:
    try:
        hints = typing.get_type_hints(function)
    except (NameError, TypeError):
        return None
    return hints.get("return")


def _intercept(
    name: str,
    function: Callable[..., Any],
    handler: InvocationHandler,
) -> Callable[..., Any]:
    try:
        signature: inspect.Signature | None = inspect.signature(function)
    except (TypeError, ValueError):
        signature = None
    return_annotation = _return_annotation(function)

    @functools.wraps(function)
    def intercepted(self: Any, *args: Any, **kwargs: Any) -> Any:
        if signature is None:
            arguments: list[Any] = list(args)
            if kwargs:
                arguments.append(kwargs)
        else:
            bound = signature.bind(self, *args, **kwargs)
            bound.apply_defaults()
            arguments = []
            for parameter in list(signature.parameters.values())[1:]:
                value = bound.arguments[parameter.name]
                if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
                    arguments.extend(value)
                elif parameter.kind is inspect.Parameter.VAR_KEYWORD:
                    if value:
                        arguments.append(value)
                else:
                    arguments.append(value)

        return handler.invoke(
            name,
            arguments,
            target=self,
            original=function.__get__(self, type(self)),
            return_annotation=return_annotation,
        )

    return intercepted


def _expects(self: Any, rule: InvocationCountRule) -> InvocationMocker:
    return invocation_handler_of(self).expects(rule)


def _method(self: Any, constraint: Any) -> InvocationMocker:
    return invocation_handler_of(self).expects(AnyInvokedCount()).method(constraint)


def _no_constructor(self: Any, *args: Any, **kwargs: Any) -> None:
    pass


def create_double(
    spec: type,
    *,
    stub: bool = False,
    only_methods: Iterable[str] | None = None,
    call_original_constructor: bool = False,
    constructor_arguments: tuple[Any, ...] = (),
    constructor_keywords: dict[str, Any] | None = None,
    forward_to_original: bool = False,
    facade: EventFacade | None = None,
) -> Any:
    """Generate a test double for a class.

    Args:
        spec: The class to double.
        stub: Create a stub (no ``expects()``; emits Test Stub Created).
        only_methods: Intercept only these methods; the others keep their
            original implementation (partial doubles).
        call_original_constructor: Run the doubled class's ``__init__``.
        constructor_arguments: Positional arguments for the constructor.
        constructor_keywords: Keyword arguments for the constructor.
        forward_to_original: Call the original implementation for calls no
            stub action answers (test proxies).
        facade: Facade to emit the creation event through.

    Returns:
        The double instance.

    Raises:
        MethodCannotBeConfiguredError: If only_methods names a method the
            class does not have.
    """
    if not isinstance(spec, type):
        raise MockObjectError(f"Cannot create a test double for {spec!r}, a class is required")

    available = doubleable_methods(spec)
    if only_methods is None:
        intercepted = available
    else:
        intercepted = {}
        for name in only_methods:
            if name not in available:
                raise MethodCannotBeConfiguredError(name)
            intercepted[name] = available[name]

    handler = InvocationHandler(
        spec.__qualname__,
        intercepted.keys(),
        forward_unconfigured=forward_to_original,
    )

    namespace: dict[str, Any] = {
        name: _intercept(name, function, handler) for name, function in intercepted.items()
    }
    namespace[_HANDLER_ATTRIBUTE] = handler
    namespace["__module__"] = spec.__module__
    namespace["__repr__"] = lambda self: f"<{'Stub' if stub else 'MockObject'} of {spec.__qualname__}>"
    if "method" not in available:
        namespace["method"] = _method
    if not stub and "expects" not in available:
        namespace["expects"] = _expects
    if not call_original_constructor:
        namespace["__init__"] = _no_constructor

    prefix = "Stub" if stub else "MockObject"
    metaclass = type(spec)
    double_class = metaclass(f"{prefix}_{spec.__name__}_{next(_counter)}", (spec,), namespace)
    double_class.__abstractmethods__ = frozenset()

    double = double_class(*constructor_arguments, **(constructor_keywords or {}))

    emitter = (facade or EventFacade.instance()).emitter()
    if stub:
        emitter.test_stub_created(spec.__qualname__)
    else:
        emitter.mock_object_created(spec.__qualname__)
    log_debug(
        f"Created {prefix} for {spec.__qualname__}",
        {"methods": ",".join(sorted(intercepted))},
    )
    return double


__all__ = [
    "create_double",
    "doubleable_methods",
    "invocation_handler_of",
    "is_double",
]
