"""Unit test conftest.

Provides an in-memory MockDocument and fast timing settings so the engine
components run without a browser. Real-time waits are kept tiny rather
than faked.
"""

import random

import pytest

from tests.unit.mocks import MockContext, MockDocument
from ui_engine.config import SelectorConfig
from ui_engine.convergence import ConvergenceWaiter
from ui_engine.engine import UIEngine
from ui_engine.extractor import FallbackExtractor
from ui_engine.orchestrator import QueryOrchestrator
from ui_engine.selector import ShapeSelector
from ui_engine.settings import EngineSettings, OpenmrsEnvironment


@pytest.fixture
def settings() -> EngineSettings:
    """Timing small enough to keep every wait in the tens of milliseconds."""
    return EngineSettings(
        probe_timeout=0.05,
        poll_interval=0.005,
        convergence_timeout=0.1,
        max_attempts=3,
        attempt_delay=0.01,
        shape_timeout=0.05,
    )


@pytest.fixture
def document() -> MockDocument:
    return MockDocument(url="http://openmrs.test/openmrs/login.htm")


@pytest.fixture
def extractor(document: MockDocument, settings: EngineSettings) -> FallbackExtractor:
    return FallbackExtractor(document, settings)


@pytest.fixture
def selector(document: MockDocument, extractor: FallbackExtractor,
             settings: EngineSettings) -> ShapeSelector:
    return ShapeSelector(document, extractor, settings, rng=random.Random(7))


@pytest.fixture
def waiter(document: MockDocument, settings: EngineSettings) -> ConvergenceWaiter:
    return ConvergenceWaiter(document, settings)


@pytest.fixture
def orchestrator(extractor: FallbackExtractor, waiter: ConvergenceWaiter,
                 settings: EngineSettings) -> QueryOrchestrator:
    return QueryOrchestrator(extractor, waiter, settings)


@pytest.fixture(scope="session")
def selector_config() -> SelectorConfig:
    return SelectorConfig.load()


@pytest.fixture
def environment() -> OpenmrsEnvironment:
    return OpenmrsEnvironment(base_url="http://openmrs.test/openmrs/")


@pytest.fixture
def engine(document: MockDocument, selector_config: SelectorConfig,
           settings: EngineSettings) -> UIEngine:
    return UIEngine(document, selector_config, settings=settings, rng=random.Random(7))


@pytest.fixture
def ui_context() -> MockContext:
    """Mock scenario context fixture.

    Provides a clean, isolated context for each unit test.
    """
    return MockContext()
