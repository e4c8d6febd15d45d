"""Root conftest.py - Register step definitions and browser fixtures for pytest-bdd."""

from pathlib import Path
from typing import Any, Iterator

import pytest
from playwright.sync_api import sync_playwright
from selenium import webdriver
from selenium.webdriver.firefox.options import Options

from tests.step_defs.helpers import ScenarioContext
from ui_engine.backends import PlaywrightDocument, SeleniumDocument
from ui_engine.config import SelectorConfig
from ui_engine.engine import UIEngine
from ui_engine.settings import OpenmrsEnvironment

# Register every tests/step_defs/*_steps.py module as a plugin so pytest-bdd
# can discover its steps from any test module.
STEP_DEFS_DIR = Path(__file__).parent / "tests" / "step_defs"
pytest_plugins = [f"tests.step_defs.{p.stem}" for p in sorted(STEP_DEFS_DIR.glob("*_steps.py"))]


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("openmrs")
    group.addoption(
        "--e2e",
        action="store_true",
        default=False,
        help="run @e2e scenarios against the OpenMRS instance at $BASE_URL",
    )
    group.addoption(
        "--ui-backend",
        choices=("playwright", "selenium"),
        default="playwright",
        help="browser driver behind the Document Interface (default: playwright)",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--e2e"):
        return
    skip_e2e = pytest.mark.skip(reason="needs a live OpenMRS, run with --e2e")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


# -- Environment Fixtures --


@pytest.fixture(scope="session")
def environment() -> OpenmrsEnvironment:
    """Target OpenMRS instance and admin account, read from the environment."""
    return OpenmrsEnvironment.from_env()


@pytest.fixture(scope="session")
def selector_config(environment: OpenmrsEnvironment) -> SelectorConfig:
    """Selector YAML for the configured OpenMRS UI version."""
    return SelectorConfig.load(environment.ui_version)


# -- Browser Fixtures --


@pytest.fixture(scope="session")
def playwright_browser(environment: OpenmrsEnvironment) -> Iterator[Any]:
    """One Firefox instance for the whole session."""
    with sync_playwright() as p:
        browser = p.firefox.launch(headless=environment.headless)
        yield browser
        browser.close()


@pytest.fixture
def document(request: pytest.FixtureRequest, environment: OpenmrsEnvironment) -> Iterator[Any]:
    """A fresh browser surface per scenario, wrapped in a Document Interface."""
    if request.config.getoption("--ui-backend") == "selenium":
        options = Options()
        if environment.headless:
            options.add_argument("--headless")
        driver = webdriver.Firefox(options=options)
        try:
            yield SeleniumDocument(driver)
        finally:
            driver.quit()
        return

    browser = request.getfixturevalue("playwright_browser")
    context = browser.new_context()
    try:
        yield PlaywrightDocument(context.new_page())
    finally:
        context.close()


@pytest.fixture
def engine(document: Any, selector_config: SelectorConfig) -> UIEngine:
    """UI interaction engine bound to this scenario's browser surface."""
    return UIEngine(document, selector_config)


@pytest.fixture
def ui_context() -> ScenarioContext:
    """Scenario state shared between steps."""
    return ScenarioContext()
