"""Shared helper functions for step definitions."""

from dataclasses import dataclass
from typing import Any, Optional

import pytest

from ui_engine.errors import InteractionUnavailable
from ui_engine.pages import Credentials, HomePage, LoginPage, PatientData
from ui_engine.settings import OpenmrsEnvironment


@dataclass
class ScenarioContext:
    """State carried from one step to the next within a scenario.

    The login step stores the returned session here; later steps read it
    instead of asking the engine whether someone is logged in.
    """

    session: Optional[Any] = None
    login_result: Optional[Any] = None
    current_page: Optional[Any] = None
    search_result: Optional[Any] = None
    selection: Optional[Any] = None
    patient_data: Optional[PatientData] = None
    patient_info: Optional[Any] = None
    last_error: Optional[Exception] = None


def admin_credentials(environment: OpenmrsEnvironment) -> Credentials:
    return Credentials(username=environment.username, password=environment.password)


def open_login_page(engine: Any, environment: OpenmrsEnvironment) -> LoginPage:
    """Navigate to the login form, skipping the scenario if OpenMRS cannot be reached."""
    login_page = LoginPage(engine, environment)
    try:
        displayed = login_page.goto()
    except InteractionUnavailable as e:
        pytest.skip(f"OpenMRS not reachable at {environment.base_url}: {e}")
    if not displayed:
        raise AssertionError(f"Login page not displayed at {environment.base_url}")
    return login_page


def log_in_as_admin(engine: Any, environment: OpenmrsEnvironment, ui_context: Any,
                    location: Optional[str] = None) -> HomePage:
    """Open the login page and log in with the configured admin account."""
    login_page = open_login_page(engine, environment)
    result = login_page.login(admin_credentials(environment), location or environment.default_location)
    ui_context.login_result = result
    ui_context.session = result.session
    if not result.success:
        raise AssertionError(f"Admin login failed: {result.error}")
    home = HomePage(engine, environment)
    ui_context.current_page = home
    return home


def require_page(ui_context: Any, page_type: type) -> Any:
    """Return the current page, asserting it is a ``page_type``."""
    page = ui_context.current_page
    if not isinstance(page, page_type):
        raise AssertionError(
            f"Expected to be on {page_type.__name__}, current page is {type(page).__name__}"
        )
    return page


def require_session(ui_context: Any) -> Any:
    if ui_context.session is None:
        raise AssertionError("No session in context - log in first")
    ui_context.session.require_authenticated()
    return ui_context.session
