"""Login intent: credentials, location picker and the outcome of submitting them."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from ui_engine.pages.base import BasePage
from ui_engine.pages.home import HomePage
from ui_engine.selector import RANDOM, Selection, UIShape
from ui_engine.session import SessionContext, WelcomeMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class LoginResult:
    """What happened after the login form was submitted."""

    success: bool
    session: SessionContext
    selection: Optional[Selection] = None
    error: Optional[str] = None

    @property
    def welcome(self) -> Optional[WelcomeMessage]:
        return self.session.welcome


class LoginPage(BasePage):
    """OpenMRS login form.

    The location picker is a native ``<select>`` on some builds and a
    ``ul#sessionLocation`` list of clickable items on others; both are
    handled by the shape-polymorphic selector.
    """

    def goto(self) -> bool:
        self.engine.navigate(self.environment.url(self.config.get("urls.login")))
        return self.is_displayed()

    def is_displayed(self, timeout: Optional[float] = None) -> bool:
        return self.engine.is_present("login.username", timeout) and self.engine.is_present(
            "login.password", timeout
        )

    def fill_credentials(self, credentials: Credentials) -> None:
        self._fill("login.username", credentials.username)
        self._fill("login.password", credentials.password)

    def select_location(self, location: str = RANDOM) -> Selection:
        """Pick ``location`` by exact label, or any offered location for ``"random"``."""
        return self.engine.selector.choose(self.config.control("login.location"), location)

    def location_options(self) -> list[str]:
        """Locations offered by the picker, whatever its rendering.

        When a list rendering shows no items the reference locations are
        returned instead.
        """
        control = self.config.control("login.location")
        shape = self.engine.selector.resolve_shape(control)
        options = self.engine.selector.list_options(control, shape)
        if not options and shape is UIShape.ITEM_LIST:
            logger.warning("No location items found, reporting reference locations")
            return list(control.fallback_labels)
        return options

    def submit(self) -> None:
        self._click("login.submit")

    def login(self, credentials: Credentials, location: str = RANDOM) -> LoginResult:
        """Fill the form, pick a location and submit.

        Returns a LoginResult whose session is authenticated only when the
        home page shows up; a rejected login carries the error text instead.

        Raises:
            SelectionUnavailable: the requested location cannot be selected
        """
        logger.info("Logging in as %s at %s", credentials.username, location)
        self.fill_credentials(credentials)
        selection = self.select_location(location)
        self.submit()

        home = HomePage(self.engine, self.environment)
        if self._await_outcome(home):
            welcome = home.welcome_message_parts()
            session = SessionContext(
                username=credentials.username,
                location=selection.label,
                authenticated=True,
                welcome=welcome,
            )
            logger.info("Logged in as %s at %s", credentials.username, selection.label)
            return LoginResult(success=True, session=session, selection=selection)

        error = self.error_message()
        logger.info("Login rejected for %s: %s", credentials.username, error)
        return LoginResult(
            success=False,
            session=SessionContext(username=credentials.username, location=selection.label),
            selection=selection,
            error=error,
        )

    def error_message(self, timeout: float = 5.0) -> Optional[str]:
        text = self.engine.extractor.extract_field(
            self.config.field_probe("login.error"), timeout=timeout
        )
        return text or None

    def is_error_visible(self, timeout: float = 2.0) -> bool:
        return self.engine.is_present("login.error", timeout)

    def _await_outcome(self, home: HomePage) -> bool:
        """Wait until either the home page or a login error shows; True for home."""
        document = self.engine.document
        home_links = self.config.locators("home.find_patient")
        errors = self.config.locators("login.error")

        def visible(locators):
            return any(
                document.await_visible(node, 0)
                for locator in locators
                for node in document.locate(locator)
            )

        deadline = time.monotonic() + self.settings.convergence_timeout
        while True:
            if visible(home_links):
                return True
            if visible(errors):
                return False
            if time.monotonic() >= deadline:
                return home.is_logged_in(timeout=0)
            time.sleep(self.settings.poll_interval)
