"""Step definitions for patient search."""

from typing import Any

from pytest_bdd import given, parsers, then, when

from tests.step_defs.helpers import require_page, require_session
from ui_engine.pages import HomePage, PatientDetailPage, PatientSearchPage
from ui_engine.settings import OpenmrsEnvironment


@given("the patient search page is open")
def search_page_open(engine: Any, environment: OpenmrsEnvironment, ui_context: Any) -> None:
    require_session(ui_context)
    home = ui_context.current_page
    if not isinstance(home, HomePage):
        home = HomePage(engine, environment)
        home.goto()
    search_page = home.go_to_find_patient()
    if not search_page.is_displayed():
        raise AssertionError("Patient search input is not displayed")
    ui_context.current_page = search_page
    print("✓ Patient search page open")


@when(parsers.parse('the user searches for "{query}"'))
def user_searches_for(query: str, ui_context: Any) -> None:
    search_page = require_page(ui_context, PatientSearchPage)
    ui_context.search_result = search_page.search(query)
    print(f"✓ {ui_context.search_result.message} "
          f"({ui_context.search_result.outcome.attempts_used} attempt(s))")


@when("the user searches for the registered patient")
def user_searches_registered(engine: Any, environment: OpenmrsEnvironment, ui_context: Any) -> None:
    if ui_context.patient_data is None:
        raise AssertionError("No patient was registered in this scenario")
    home = HomePage(engine, environment)
    home.goto()
    ui_context.current_page = home.go_to_find_patient()
    user_searches_for(ui_context.patient_data.family_name, ui_context)


@when("the user opens the first matching patient")
def open_first_match(ui_context: Any) -> None:
    search_page = require_page(ui_context, PatientSearchPage)
    result = ui_context.search_result
    if result is None or not result.has_results:
        raise AssertionError("No search results to open")
    patient = result.patients[0]
    ui_context.current_page = search_page.select_patient(patient.index)
    print(f"✓ Opened patient {patient.name} ({patient.id})")


@then(parsers.parse('at least one patient matching "{query}" is found'))
def patients_found(query: str, ui_context: Any) -> None:
    result = ui_context.search_result
    if result is None or not result.has_results:
        raise AssertionError(f"No patients found matching {query!r}")
    needle = query.lower()
    if not any(needle in p.name.lower() or needle in p.id.lower() for p in result.patients):
        raise AssertionError(f"No result name or id contains {query!r}: {result.patients}")
    print(f"✓ {result.message}")


@then("no patients are found")
def no_patients_found(ui_context: Any) -> None:
    result = ui_context.search_result
    if result is None:
        raise AssertionError("No search was performed")
    if result.has_results:
        raise AssertionError(f"Expected no results, got {result.patients}")
    print(f"✓ {result.message} after {result.outcome.attempts_used} attempt(s)")


@then("the registered patient is among the results")
def registered_among_results(ui_context: Any) -> None:
    expected = ui_context.patient_data
    result = ui_context.search_result
    if result is None or not result.has_results:
        raise AssertionError(f"Registered patient {expected.full_name} not found")
    names = [p.name.lower() for p in result.patients]
    if not any(expected.given_name.lower() in n and expected.family_name.lower() in n for n in names):
        raise AssertionError(f"{expected.full_name} not in results: {names}")
    print(f"✓ Found registered patient {expected.full_name}")


@then("the patient dashboard is displayed")
def dashboard_displayed(ui_context: Any) -> None:
    detail = require_page(ui_context, PatientDetailPage)
    if not detail.is_displayed():
        raise AssertionError("Patient dashboard is not displayed")
    print("✓ Patient dashboard displayed")
