"""Patient registration intent.

The standard form is a wizard: names, gender, birthdate, address, phone,
relatives, then a confirmation page. The basic form stops after the
birthdate. Gender, birth month and country render as a select on some
builds and as free inputs or item lists on others, so they go through the
shape-polymorphic selector.
"""

from __future__ import annotations

import calendar
import logging
from typing import Optional

from ui_engine.errors import InteractionUnavailable
from ui_engine.pages.base import BasePage
from ui_engine.pages.patient_data import PatientData, RelativeData
from ui_engine.pages.patient_detail import PatientDetailPage

logger = logging.getLogger(__name__)


class RegistrationPage(BasePage):
    def is_displayed(self, timeout: Optional[float] = None) -> bool:
        return all(
            self.engine.is_present(path, timeout)
            for path in ("registration.given_name", "registration.family_name", "registration.next")
        )

    def fill_names(self, patient: PatientData) -> None:
        self._fill("registration.given_name", patient.given_name)
        self._fill("registration.family_name", patient.family_name)

    def select_gender(self, patient: PatientData) -> None:
        self.engine.selector.choose(self.config.control("registration.gender"), patient.gender_label)

    def fill_birthdate(self, patient: PatientData) -> None:
        """Fill day / month / year fields, or the single birthdate input when they are absent."""
        born = patient.birth_date
        if self.engine.is_present("registration.birthdate_day"):
            logger.debug("Filling birthdate: year=%d month=%d day=%d", born.year, born.month, born.day)
            self._fill("registration.birthdate_day", str(born.day))
            self.engine.selector.fill_or_select(
                self.config.control("registration.birthdate_month"), calendar.month_name[born.month]
            )
            self._fill("registration.birthdate_year", str(born.year))
        else:
            self._fill("registration.birthdate", patient.birthdate)

    def fill_address(self, patient: PatientData) -> None:
        if patient.address1:
            self._fill("registration.address1", patient.address1)
        if patient.city_village:
            self._fill("registration.city_village", patient.city_village)
        if patient.country:
            self.engine.selector.fill_or_select(
                self.config.control("registration.country"), patient.country
            )

    def fill_phone_number(self, patient: PatientData) -> None:
        if patient.phone_number:
            self._fill("registration.phone_number", patient.phone_number)

    def add_relative(self, relative: RelativeData, index: int = 0) -> None:
        """Fill relative row ``index`` and open a new empty row."""
        selects = self._await_count("registration.relationship_type", index + 1)
        names = self._await_count("registration.relative_name", index + 1)
        if index >= len(selects) or index >= len(names):
            raise InteractionUnavailable("add relative", f"relative row {index}")
        self.engine.document.dispatch_select(selects[index], relative.relationship_type)
        self.engine.document.dispatch_fill(names[index], relative.person_name)
        add_buttons = self._nodes("registration.add_relative", timeout=0)
        if add_buttons:
            self.engine.document.dispatch_click(add_buttons[-1])

    def relationship_types(self) -> list[str]:
        return self.engine.extractor.enumerate_texts(
            self.config.locator("registration.relationship_options"),
            placeholders=("Select Relationship Type",),
        )

    def next(self) -> None:
        self._click("registration.next")

    def submit(self) -> None:
        self._click("registration.submit")

    def confirm(self) -> bool:
        """Click Confirm when a confirmation step is shown."""
        return self.engine.click("registration.confirm", timeout=0)

    def register(self, patient: PatientData) -> PatientDetailPage:
        """Walk the full registration wizard for ``patient``."""
        logger.info("Registering patient %s", patient.full_name)
        self.fill_names(patient)
        self.next()
        self.select_gender(patient)
        self.next()
        self.fill_birthdate(patient)
        self.next()
        self.fill_address(patient)
        self.next()
        self.fill_phone_number(patient)
        self.next()
        for index, relative in enumerate(patient.relatives):
            self.add_relative(relative, index)
        self.next()
        self.submit()
        self.confirm()
        return PatientDetailPage(self.engine, self.environment)

    def simple_register(self, patient: PatientData) -> PatientDetailPage:
        """Register with the basic form: names, gender and birthdate only."""
        logger.info("Registering patient %s (basic form)", patient.full_name)
        self.fill_names(patient)
        self.next()
        self.select_gender(patient)
        self.next()
        self.fill_birthdate(patient)
        self.next()
        self.submit()
        self.confirm()
        return PatientDetailPage(self.engine, self.environment)

    def is_registration_successful(self) -> bool:
        """Success message shown, or redirected to a loaded patient dashboard."""
        if self.engine.is_present("registration.success", timeout=0):
            return True
        if self.url_matches("urls.patient_markers"):
            return self.engine.is_present("registration.patient_heading") and self.engine.is_present(
                "registration.general_actions"
            )
        return not self.url_matches("urls.registration_markers")

    def error_messages(self, timeout: float = 5.0) -> list[str]:
        return self.engine.extractor.enumerate_texts(
            self.config.locator("registration.errors"), timeout=timeout
        )
