"""Patient dashboard intents: demographics, contact, family and clinical sections."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from ui_engine.extractor import FieldProbe
from ui_engine.pages.base import BasePage
from ui_engine.pages.patient_data import GENDER_LABELS, PatientData

logger = logging.getLogger(__name__)

SECTIONS = ("diagnoses", "visits", "observations", "conditions", "allergies")

_OBSERVATION = re.compile(r"([^:]+):\s*(.+)")
_VALUE_WITH_UNIT = re.compile(r"([\d.,]+)\s*([^\d\s]*)")


@dataclass(frozen=True)
class PatientInfo:
    given_name: str
    family_name: str
    gender: str
    age: str
    birthdate: str
    patient_id: str

    @property
    def full_name(self) -> str:
        return f"{self.given_name} {self.family_name}".strip()


@dataclass(frozen=True)
class PatientContact:
    address: str = ""
    phone_number: str = ""


@dataclass(frozen=True)
class Relative:
    name: str
    relationship: str = "Unknown"


@dataclass(frozen=True)
class Observation:
    name: str
    value: str
    unit: str = ""

    @classmethod
    def parse(cls, text: str) -> "Observation":
        """Parse "Weight: 70 kg"; text without a ``name:`` prefix is kept whole."""
        match = _OBSERVATION.match(text)
        if match is None:
            return cls(name="Unknown", value=text.strip())
        name, value_with_unit = match.group(1).strip(), match.group(2).strip()
        value_match = _VALUE_WITH_UNIT.match(value_with_unit)
        if value_match is None:
            return cls(name=name, value=value_with_unit)
        return cls(name=name, value=value_match.group(1), unit=value_match.group(2).strip())


class PatientDetailPage(BasePage):
    """The clinician-facing patient dashboard.

    Every field is read through fallback probes; a field no probe can read
    comes back as ``""`` rather than failing the whole extraction.
    """

    def is_displayed(self, timeout: Optional[float] = None) -> bool:
        fields = self.config.field_probes("patient_detail.fields")
        present = self.engine.extractor.probe_field(fields["given_name"], timeout=timeout).found
        return present and self.url_matches("urls.patient_markers")

    def extract(self, probes: Mapping[str, FieldProbe]) -> dict[str, str]:
        """Extract an arbitrary set of fields from the dashboard."""
        return self.engine.extractor.extract_fields(probes)

    def patient_info(self) -> PatientInfo:
        """Read the demographics shown in the patient header.

        Age and birthdate are split from the combined "49 year(s) ( 22.Mar.1976)"
        text when it is present; the individual probes are the fallback.
        """
        values = self.extract(self.config.field_probes("patient_detail.fields"))
        parts = self.engine.extractor.extract_compound(
            self.config.field_probe("patient_detail.age_text"),
            self.config.compound("age_birthdate"),
        )
        if parts:
            values.update({k: v for k, v in parts.items() if v})
        info = PatientInfo(
            given_name=values.get("given_name", ""),
            family_name=values.get("family_name", ""),
            gender=values.get("gender", ""),
            age=values.get("age", ""),
            birthdate=values.get("birthdate", ""),
            patient_id=values.get("patient_id", ""),
        )
        logger.info("Patient info: %s", info)
        return info

    def verify_registration(self, expected: PatientData) -> bool:
        """Check that the dashboard shows the registered names and gender."""
        if not self.is_displayed():
            logger.info("Not on patient detail page: %s", self.engine.document.current_url())
            return False
        info = self.patient_info()
        given_ok = expected.given_name.lower() in info.given_name.lower()
        family_ok = expected.family_name.lower() in info.family_name.lower()
        gender_ok = GENDER_LABELS[expected.gender] in info.gender
        logger.info(
            "Registration check: given %s (%r in %r), family %s (%r in %r), gender %s (%r vs %r)",
            given_ok, expected.given_name, info.given_name,
            family_ok, expected.family_name, info.family_name,
            gender_ok, expected.gender_label, info.gender,
        )
        return given_ok and family_ok and gender_ok

    def registration_message(self) -> str:
        return f"{self.patient_info().full_name} successfully registered"

    def contact(self) -> PatientContact:
        """Expand the contact section if needed and read address and phone."""
        self.engine.click("patient_detail.show_contact", timeout=0)
        values = self.extract(self.config.field_probes("patient_detail.contact"))
        return PatientContact(
            address=values.get("address", ""),
            phone_number=values.get("phone_number", ""),
        )

    def has_relatives(self) -> bool:
        content = self.engine.extractor.extract_field(
            self.config.field_probe("patient_detail.family.content")
        )
        return bool(content) and "none" not in content.lower()

    def relatives(self) -> list[Relative]:
        if not self.has_relatives():
            return []
        names = self.engine.extractor.collect_texts(
            self.config.field_probe("patient_detail.family.items")
        )
        return [Relative(name=name) for name in names]

    def has_section_with_content(self, section: str) -> bool:
        """True if ``section`` is on the page and does not just say "None"."""
        text = self.engine.extractor.extract_field(self._section_probe(section, "container"))
        return bool(text) and "none" not in text.lower()

    def section_entries(self, section: str) -> list[str]:
        """Entries listed under a dashboard section such as ``"diagnoses"``."""
        if not self.has_section_with_content(section):
            logger.info("No %s section found or no content", section)
            return []
        entries = self.engine.extractor.collect_texts(self._section_probe(section, "entries"))
        logger.info("Extracted %d %s", len(entries), section)
        return entries

    def diagnoses(self) -> list[str]:
        return self.section_entries("diagnoses")

    def visits(self) -> list[str]:
        return self.section_entries("visits")

    def observations(self) -> list[Observation]:
        return [Observation.parse(text) for text in self.section_entries("observations")]

    def _section_probe(self, section: str, part: str) -> FieldProbe:
        if section not in SECTIONS:
            raise ValueError(f"Unknown section {section!r}, expected one of {SECTIONS}")
        return self.config.field_probe(f"patient_detail.sections.{section}.{part}")
