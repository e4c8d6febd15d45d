"""Unit tests for registration and dashboard step definitions."""

from unittest.mock import Mock

import pytest

from tests.step_defs.patient_steps import (
    age_and_birthdate_shown,
    dashboard_shows_registered,
    patient_has_identifier,
    user_registers_patient,
)
from ui_engine.pages import HomePage, PatientData, PatientDetailPage, PatientInfo
from ui_engine.session import SessionContext

INFO = PatientInfo(
    given_name="John",
    family_name="Doe",
    gender="Male",
    age="49 year(s)",
    birthdate="22.Mar.1976",
    patient_id="100HNY",
)


@pytest.fixture
def home(ui_context):
    ui_context.session = SessionContext("admin", "Pharmacy", authenticated=True)
    page = Mock(spec=HomePage)
    ui_context.current_page = page
    return page


@pytest.fixture
def detail(ui_context):
    page = Mock(spec=PatientDetailPage)
    page.patient_info.return_value = INFO
    ui_context.current_page = page
    return page


@pytest.mark.parametrize("simple", [False, True])
def test_user_registers_patient(engine, environment, ui_context, home, simple):
    home.simple_register_available.return_value = simple
    registration = home.go_to_register_patient.return_value

    user_registers_patient("male", "John", "Doe", "1976-03-22", engine, environment, ui_context)

    expected = PatientData("John", "Doe", "M", "1976-03-22")
    home.go_to_register_patient.assert_called_once_with(simple=simple)
    if simple:
        registration.simple_register.assert_called_once_with(expected)
        assert ui_context.current_page is registration.simple_register.return_value
    else:
        registration.register.assert_called_once_with(expected)
        assert ui_context.current_page is registration.register.return_value
    assert ui_context.patient_data == expected


def test_register_requires_login(engine, environment, ui_context):
    with pytest.raises(AssertionError, match="log in first"):
        user_registers_patient("female", "Jane", "Doe", "1998-01-02", engine, environment,
                               ui_context)


def test_dashboard_shows_registered(ui_context, detail):
    ui_context.patient_data = PatientData("John", "Doe", "M", "1976-03-22")
    detail.verify_registration.return_value = True
    detail.registration_message.return_value = "John Doe successfully registered"

    dashboard_shows_registered(ui_context)

    assert ui_context.patient_info == INFO


def test_dashboard_shows_someone_else(ui_context, detail):
    ui_context.patient_data = PatientData("John", "Doe", "M", "1976-03-22")
    detail.verify_registration.return_value = False

    with pytest.raises(AssertionError, match="does not show John Doe"):
        dashboard_shows_registered(ui_context)


def test_age_and_birthdate_shown(ui_context, detail):
    age_and_birthdate_shown(ui_context)

    detail.patient_info.return_value = PatientInfo("John", "Doe", "Male", "", "22.Mar.1976", "")
    with pytest.raises(AssertionError, match="Unexpected age"):
        age_and_birthdate_shown(ui_context)


def test_patient_has_identifier(ui_context, detail):
    patient_has_identifier(ui_context)

    ui_context.patient_info = PatientInfo("John", "Doe", "Male", "49 year(s)", "22.Mar.1976", "")
    with pytest.raises(AssertionError, match="Patient ID"):
        patient_has_identifier(ui_context)
