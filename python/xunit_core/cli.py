"""Command line entry point.

Usage:
    xunit tests/greeter_test.py
    xunit --log-events-text events.txt --do-not-cache-result tests/

Exit codes: 0 when every test passed, 1 when a test failed, 2 when a test
errored or the suite could not be loaded.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from typing import Any

from . import __version__
from .data_provider import DataProviderResolver
from .event_facade import EventFacade
from .logging import configure_logging, log_error, log_info
from .runner import TestRunner
from .suite import TestSuiteLoader
from .types import RunnerConfig

EXIT_EXCEPTION = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xunit",
        description="Run xunit-core test cases from a file or directory.",
    )
    parser.add_argument("test", help="Test file or directory to run")
    parser.add_argument(
        "--do-not-cache-result",
        action="store_true",
        help="Do not write test results to the result cache file",
    )
    parser.add_argument(
        "--no-configuration",
        action="store_true",
        help="Ignore XUNIT_* environment configuration",
    )
    parser.add_argument(
        "--no-output",
        action="store_true",
        help="Suppress log output",
    )
    parser.add_argument(
        "--log-events-text",
        metavar="PATH",
        help="Write a text trace of all events to PATH",
    )
    parser.add_argument(
        "--fail-on-warning",
        action="store_true",
        help="Report tests that trigger warnings as failed",
    )
    parser.add_argument(
        "--enforce-time-limit",
        action="store_true",
        help="Interrupt tests that exceed their time limit",
    )
    parser.add_argument(
        "--default-time-limit",
        type=float,
        metavar="SECONDS",
        help="Time limit for tests that do not declare one",
    )
    parser.add_argument("--version", action="version", version=f"xunit-core {__version__}")
    return parser


def config_from_arguments(args: argparse.Namespace) -> RunnerConfig:
    """Build the runner configuration; command line flags win over the environment."""
    overrides: dict[str, Any] = {}
    if args.do_not_cache_result:
        overrides["cache_result"] = False
    if args.no_output:
        overrides["no_output"] = True
    if args.log_events_text:
        overrides["log_events_text"] = args.log_events_text
    if args.fail_on_warning:
        overrides["fail_on_warning"] = True
    if args.enforce_time_limit:
        overrides["enforce_time_limit"] = True
    if args.default_time_limit is not None:
        overrides["default_time_limit"] = args.default_time_limit

    if args.no_configuration:
        return RunnerConfig(**overrides)
    return RunnerConfig.from_environment(**overrides)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the tests named on the command line and return the exit code."""
    args = build_parser().parse_args(argv)
    config = config_from_arguments(args)
    configure_logging("error" if config.no_output else config.log_level)

    facade = EventFacade.instance()
    emitter = facade.emitter()
    emitter.application_started(__version__)

    runner = TestRunner(config, facade)
    try:
        runner.configure()
        suite = TestSuiteLoader(DataProviderResolver(facade)).load_path(args.test)
    except Exception as e:
        log_error(f"Could not load tests: {e}", {"path": args.test, "error_type": type(e).__name__})
        if not facade.is_sealed:
            facade.seal()
        emitter.application_finished(EXIT_EXCEPTION)
        return EXIT_EXCEPTION

    runner.load(suite)
    runner.seal()
    result = runner.run()

    exit_code = result.shell_exit_code
    log_info(
        f"Tests: {result.tests}, Assertions: {result.assertions}, "
        f"Failures: {result.failed}, Errors: {result.errored}",
        {"exit_code": exit_code},
    )
    emitter.application_finished(exit_code)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
