"""Step definitions for patient registration and the patient dashboard."""

import re
from typing import Any

from pytest_bdd import parsers, then, when

from tests.step_defs.helpers import require_page, require_session
from ui_engine.pages import HomePage, PatientData, PatientDetailPage
from ui_engine.settings import OpenmrsEnvironment

GENDERS = {"male": "M", "female": "F"}


@when(parsers.parse('the user registers a new {gender} patient "{given_name} {family_name}" born "{birthdate}"'))
def user_registers_patient(gender: str, given_name: str, family_name: str, birthdate: str,
                           engine: Any, environment: OpenmrsEnvironment, ui_context: Any) -> None:
    """Register a patient through whichever registration form the home page offers."""
    require_session(ui_context)
    patient = PatientData(
        given_name=given_name,
        family_name=family_name,
        gender=GENDERS[gender.lower()],
        birthdate=birthdate,
    )
    home = ui_context.current_page
    if not isinstance(home, HomePage):
        home = HomePage(engine, environment)
        home.goto()
    simple = home.simple_register_available()
    registration = home.go_to_register_patient(simple=simple)
    if simple:
        detail = registration.simple_register(patient)
    else:
        detail = registration.register(patient)
    ui_context.patient_data = patient
    ui_context.current_page = detail
    print(f"✓ Registered {patient.full_name} ({'basic' if simple else 'standard'} form)")


@then("the patient dashboard shows the registered patient")
def dashboard_shows_registered(ui_context: Any) -> None:
    detail = require_page(ui_context, PatientDetailPage)
    expected = ui_context.patient_data
    if not detail.verify_registration(expected):
        raise AssertionError(f"Dashboard does not show {expected.full_name} ({expected.gender_label})")
    ui_context.patient_info = detail.patient_info()
    print(f"✓ {detail.registration_message()}")


@then("the patient age and birthdate are shown")
def age_and_birthdate_shown(ui_context: Any) -> None:
    detail = require_page(ui_context, PatientDetailPage)
    info = ui_context.patient_info or detail.patient_info()
    if not re.fullmatch(r"\d+\s+year\(s\)", info.age):
        raise AssertionError(f"Unexpected age text: {info.age!r}")
    if not re.fullmatch(r"\d{1,2}\.\w{3}\.\d{4}", info.birthdate):
        raise AssertionError(f"Unexpected birthdate text: {info.birthdate!r}")
    print(f"✓ Age {info.age}, born {info.birthdate}")


@then("the patient has an identifier")
def patient_has_identifier(ui_context: Any) -> None:
    detail = require_page(ui_context, PatientDetailPage)
    info = ui_context.patient_info or detail.patient_info()
    if not info.patient_id:
        raise AssertionError("Patient ID is not shown on the dashboard")
    print(f"✓ Patient ID {info.patient_id}")
