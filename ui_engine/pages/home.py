"""Home page intents: welcome message, navigation and logout."""

from __future__ import annotations

import logging
from typing import Optional

from ui_engine.errors import InteractionUnavailable
from ui_engine.pages.base import BasePage
from ui_engine.pages.registration import RegistrationPage
from ui_engine.pages.search import PatientSearchPage
from ui_engine.session import WelcomeMessage

logger = logging.getLogger(__name__)


class HomePage(BasePage):
    def goto(self) -> None:
        self.engine.navigate(self.environment.url(self.config.get("urls.home")))

    def welcome_message_parts(self) -> Optional[WelcomeMessage]:
        """Split "Logged in as Super User (admin) at Inpatient Ward." into its parts.

        Returns None when the greeting is missing or not in that format.
        """
        parts = self.engine.extractor.extract_compound(
            self.config.field_probe("home.welcome"), self.config.compound("welcome_message")
        )
        return WelcomeMessage.from_parts(parts)

    def is_logged_in(self, timeout: Optional[float] = None) -> bool:
        if timeout is None:
            timeout = self.settings.convergence_timeout
        return self.engine.is_present("home.find_patient", timeout)

    def is_on_home_page(self) -> bool:
        return self.engine.is_present("home.welcome") and self.url_matches("urls.home_markers")

    def logout(self) -> None:
        """Click Logout, opening the user menu first if the link is hidden."""
        if self.engine.click("home.logout"):
            logger.info("Logged out")
            return
        if self.engine.click("home.user_menu") and self.engine.click("home.logout"):
            logger.info("Logged out via user menu")
            return
        raise InteractionUnavailable("logout", "home.logout")

    def go_to_find_patient(self) -> PatientSearchPage:
        self._click("home.find_patient")
        return PatientSearchPage(self.engine, self.environment)

    def simple_register_available(self) -> bool:
        return self.engine.is_present("home.register_patient_simple", timeout=0)

    def go_to_register_patient(self, simple: Optional[bool] = None) -> RegistrationPage:
        """Open the registration app.

        Args:
            simple: use the basic registration link; by default it is used
                only when the standard link is not offered
        """
        if simple is None:
            simple = not self.engine.is_present("home.register_patient") and (
                self.simple_register_available()
            )
        self._click("home.register_patient_simple" if simple else "home.register_patient")
        return RegistrationPage(self.engine, self.environment)
