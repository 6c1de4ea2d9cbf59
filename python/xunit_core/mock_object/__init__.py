"""Test doubles: invocation recording, matcher rules and stub actions.

Components:
- InvocationRecorder: append-only log of the calls made against a double
- Matcher rules: cardinality (any, exactly, at least, at most), method name
  and parameter constraints
- InvocationHandler: per-double expectation registry; selects the
  expectation for each call, applies its stub, verifies at teardown
- create_double: generates the double class and instance

Usage:
    from xunit_core.mock_object import InvokedCount, create_double

    mailer = create_double(Mailer)
    mailer.expects(InvokedCount(2)).method("send").will_return(True)
"""

from __future__ import annotations

from .builder import InvocationMocker
from .generator import create_double, doubleable_methods, invocation_handler_of, is_double
from .handler import InvocationHandler
from .invocation import Invocation, InvocationHistory, InvocationRecorder
from .matcher import Matcher
from .return_value import generate_return_value
from .rules import (
    AnyInvokedCount,
    AnyParameters,
    InvocationCountRule,
    InvokedAtLeastCount,
    InvokedAtLeastOnce,
    InvokedAtMostCount,
    InvokedCount,
    MethodName,
    Parameters,
    ParametersRule,
    VerificationResult,
)
from .stubs import (
    ConsecutiveCalls,
    ExceptionStub,
    ForwardToOriginal,
    ReturnArgument,
    ReturnCallback,
    ReturnSelf,
    ReturnStub,
    ReturnValueMap,
    Stub,
)

__all__ = [
    # Invocations
    "Invocation",
    "InvocationHistory",
    "InvocationRecorder",
    # Rules
    "InvocationCountRule",
    "AnyInvokedCount",
    "InvokedCount",
    "InvokedAtLeastCount",
    "InvokedAtLeastOnce",
    "InvokedAtMostCount",
    "MethodName",
    "ParametersRule",
    "AnyParameters",
    "Parameters",
    "VerificationResult",
    # Stubs
    "Stub",
    "ReturnStub",
    "ReturnCallback",
    "ExceptionStub",
    "ForwardToOriginal",
    "ConsecutiveCalls",
    "ReturnArgument",
    "ReturnSelf",
    "ReturnValueMap",
    # Handler and builder
    "Matcher",
    "InvocationMocker",
    "InvocationHandler",
    # Generation
    "create_double",
    "doubleable_methods",
    "generate_return_value",
    "invocation_handler_of",
    "is_double",
]
