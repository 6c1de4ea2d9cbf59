"""pytest configuration and fixtures for xunit_core tests.

This module provides shared fixtures for testing xunit_core, including a
fresh EventFacade with an event collector attached, runner configuration
and the golden fixture directory.
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from xunit_core import EventCollector, EventFacade, RunnerConfig

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def xunit_core_module():
    """Provide the xunit_core module as a fixture."""
    import xunit_core

    return xunit_core


@pytest.fixture
def facade() -> Generator[EventFacade, None, None]:
    """Provide a fresh, unsealed EventFacade for each test.

    The singleton is reset before and after the test.
    """
    from xunit_core import EventFacade

    EventFacade.reset_instance()
    instance = EventFacade.instance()
    yield instance
    EventFacade.reset_instance()


@pytest.fixture
def collector(facade: EventFacade) -> EventCollector:
    """Provide an EventCollector registered as tracer on the facade."""
    from xunit_core import EventCollector

    tracer = EventCollector()
    facade.register_tracer(tracer)
    return tracer


@pytest.fixture
def runner_config(tmp_path: Path) -> RunnerConfig:
    """Provide a RunnerConfig that keeps the result cache in tmp_path."""
    from xunit_core import RunnerConfig

    return RunnerConfig(cache_result=False, cache_result_file=str(tmp_path / "cache.json"))


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding test case files and golden event traces."""
    return FIXTURES


# Markers for test categorization
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "golden: compares an event trace with a golden file under tests/fixtures",
    )
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow running",
    )
