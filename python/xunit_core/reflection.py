"""Narrow reflection interface over class methods.

The data provider resolver validates provider methods through a
MethodDescriptor instead of inspecting classes directly.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any


class MethodNotFoundError(AttributeError):
    """Raised when a class has no method of the requested name."""

    pass


@dataclass(frozen=True)
class MethodDescriptor:
    """Visibility, static-ness and arity of a class method.

    A method is public when its name does not start with an underscore and
    static when it is declared as a staticmethod or classmethod. The
    parameter count excludes the implicit ``cls``.

    Example:
        >>> descriptor = describe_method(GreeterTest, "names")
        >>> descriptor.is_static, descriptor.parameter_count
        (True, 0)
    """

    owner: type
    method_name: str
    is_public: bool
    is_static: bool
    parameter_count: int

    @property
    def class_name(self) -> str:
        return self.owner.__qualname__

    def invoke(self, *args: Any, **kwargs: Any) -> Any:
        """Call the method through its class."""
        return getattr(self.owner, self.method_name)(*args, **kwargs)


def describe_method(owner: type, method_name: str) -> MethodDescriptor:
    """Describe ``owner.method_name`` without calling it.

    Raises:
        MethodNotFoundError: If the class has no such callable attribute.
    """
    try:
        attribute = inspect.getattr_static(owner, method_name)
    except AttributeError:
        raise MethodNotFoundError(
            f"Method {owner.__qualname__}::{method_name}() does not exist"
        ) from None

    is_static = isinstance(attribute, (staticmethod, classmethod))
    function = attribute.__func__ if is_static else attribute
    if not callable(function):
        raise MethodNotFoundError(f"Method {owner.__qualname__}::{method_name}() does not exist")

    parameters = list(inspect.signature(function).parameters.values())
    if isinstance(attribute, classmethod) or not is_static:
        # cls for class methods, self for instance methods
        parameters = parameters[1:]

    return MethodDescriptor(
        owner=owner,
        method_name=method_name,
        is_public=not method_name.startswith("_"),
        is_static=is_static,
        parameter_count=len(parameters),
    )


__all__ = ["MethodDescriptor", "MethodNotFoundError", "describe_method"]
