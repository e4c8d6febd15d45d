"""Unit tests for the patient dashboard extraction."""

import pytest

from tests.unit.mocks import MockNode
from ui_engine.pages.patient_data import PatientData
from ui_engine.pages.patient_detail import (
    Observation,
    PatientContact,
    PatientDetailPage,
    PatientInfo,
    Relative,
)

DASHBOARD_URL = "http://openmrs.test/openmrs/coreapps/clinicianfacing/patient.page?patientId=7"


@pytest.fixture
def detail(engine, environment):
    return PatientDetailPage(engine, environment)


@pytest.fixture
def probes(selector_config):
    """Locators of the header fields, keyed by field then probe position."""
    fields = selector_config.field_probes("patient_detail.fields")
    return {name: [p.locator for p in probe.probes] for name, probe in fields.items()}


@pytest.fixture
def header(document, selector_config, probes):
    """A patient header as rendered by the reference application."""
    document.url = DASHBOARD_URL
    document.add(probes["given_name"][0], MockNode("John", tag="span"))
    document.add(probes["family_name"][0], MockNode("Doe", tag="span"))
    document.add(probes["gender"][0], MockNode("Male", tag="span"))
    # age, birthdate and age_text share the "year(s)" locator
    document.add(probes["age"][0], MockNode("49 year(s) ( 22.Mar.1976)", tag="span"))
    document.add(probes["patient_id"][0], MockNode("Patient ID 100HNY", tag="div"))


def section(document, config, name, container_text, *entries):
    container = config.field_probe(f"patient_detail.sections.{name}.container").probes[0]
    first_entries = config.field_probe(f"patient_detail.sections.{name}.entries").probes[0]
    document.add(container.locator, MockNode(container_text))
    document.add(first_entries.locator, *[MockNode(e, tag="li") for e in entries])


def test_patient_info(detail, header):
    assert detail.patient_info() == PatientInfo(
        given_name="John",
        family_name="Doe",
        gender="Male",
        age="49 year(s)",
        birthdate="22.Mar.1976",
        patient_id="100HNY",
    )


def test_patient_info_falls_back_to_later_probes(detail, document, probes):
    document.add(probes["given_name"][0], MockNode("Jane", tag="span"))
    document.add(probes["age"][1], MockNode("27 year(s)", tag="span"))
    document.add(probes["birthdate"][1], MockNode("Born 02.Jan.1998", tag="div"))

    info = detail.patient_info()

    assert info.given_name == "Jane"
    assert info.age == "27 year(s)"
    assert info.birthdate == "02.Jan.1998"
    assert info.family_name == ""
    assert info.patient_id == ""
    assert info.full_name == "Jane"


def test_birthdate_pattern_rejects_unformatted_text(detail, document, probes):
    document.add(probes["birthdate"][1], MockNode("Birthdate unknown", tag="div"))

    assert detail.patient_info().birthdate == ""


def test_is_displayed_needs_dashboard_url(detail, document, header):
    assert detail.is_displayed()

    document.url = "http://openmrs.test/openmrs/registrationapp/registerPatient.page"

    assert not detail.is_displayed()


def test_verify_registration(detail, header):
    assert detail.verify_registration(PatientData("John", "Doe", "M", "1976-03-22"))
    assert detail.verify_registration(PatientData("john", "DOE", "M", "1976-03-22"))
    assert not detail.verify_registration(PatientData("John", "Doe", "F", "1976-03-22"))
    assert not detail.verify_registration(PatientData("Jack", "Doe", "M", "1976-03-22"))


def test_verify_registration_off_dashboard(detail, document, header):
    document.url = "http://openmrs.test/openmrs/index.htm"

    assert not detail.verify_registration(PatientData("John", "Doe", "M", "1976-03-22"))


def test_registration_message(detail, header):
    assert detail.registration_message() == "John Doe successfully registered"


def test_contact_expands_section(detail, document, selector_config):
    def reveal():
        document.add(selector_config.locator("patient_detail.contact.address"),
                     MockNode("12 Main Street, Kigali"))
        document.add(selector_config.locator("patient_detail.contact.phone_number"),
                     MockNode("0788 123 456"))

    toggle = MockNode("Show Contact Info", tag="a", on_click=reveal)
    document.add(selector_config.locator("patient_detail.show_contact"), toggle)

    assert detail.contact() == PatientContact("12 Main Street, Kigali", "0788 123 456")
    assert toggle.clicks == 1


def test_contact_missing(detail):
    assert detail.contact() == PatientContact()


def test_relatives(detail, document, selector_config):
    document.add(selector_config.locator("patient_detail.family.content"),
                 MockNode("Jane Doe Sibling"))
    document.add(selector_config.locator("patient_detail.family.items"),
                 MockNode("Jane Doe"), MockNode("Jim Doe"))

    assert detail.has_relatives()
    assert detail.relatives() == [Relative("Jane Doe"), Relative("Jim Doe")]


def test_no_relatives(detail, document, selector_config):
    document.add(selector_config.locator("patient_detail.family.content"), MockNode("None"))

    assert not detail.has_relatives()
    assert detail.relatives() == []


def test_diagnoses(detail, document, selector_config):
    section(document, selector_config, "diagnoses", "DIAGNOSES Malaria Hypertension",
            "Malaria", "Hypertension")

    assert detail.has_section_with_content("diagnoses")
    assert detail.diagnoses() == ["Malaria", "Hypertension"]


def test_empty_section_says_none(detail, document, selector_config):
    section(document, selector_config, "visits", "RECENT VISITS None")

    assert not detail.has_section_with_content("visits")
    assert detail.visits() == []


def test_missing_section(detail):
    assert detail.diagnoses() == []


def test_entries_fall_back_to_later_probe(detail, document, selector_config):
    container = selector_config.field_probe("patient_detail.sections.visits.container").probes[0]
    entries = selector_config.field_probe("patient_detail.sections.visits.entries").probes
    document.add(container.locator, MockNode("RECENT VISITS 12.Jan.2024 Outpatient"))
    document.add(entries[2].locator, MockNode("12.Jan.2024 Outpatient", tag="tr"))

    assert detail.visits() == ["12.Jan.2024 Outpatient"]


def test_observations(detail, document, selector_config):
    section(document, selector_config, "observations", "LATEST OBSERVATIONS ...",
            "Weight: 70 kg", "Temperature: 37.5 C", "Mood: calm", "Stable")

    assert detail.observations() == [
        Observation("Weight", "70", "kg"),
        Observation("Temperature", "37.5", "C"),
        Observation("Mood", "calm"),
        Observation("Unknown", "Stable"),
    ]


def test_unknown_section_raises(detail):
    with pytest.raises(ValueError, match="vitals"):
        detail.section_entries("vitals")
