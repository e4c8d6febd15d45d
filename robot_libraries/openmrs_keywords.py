"""OpenMRS Keywords for Robot Framework.

Keywords for the login, patient search and registration intents, aligned
with the BDD scenario steps. Uses @keyword decorator to map clean function
names to scenario step text.

Mirrors: tests/step_defs/login_steps.py, tests/step_defs/search_steps.py,
tests/step_defs/patient_steps.py
"""

import re
from typing import Any, Callable, Optional

from playwright.sync_api import sync_playwright
from robot.api.deco import keyword
from selenium import webdriver
from selenium.webdriver.firefox.options import Options

from ui_engine.backends import PlaywrightDocument, SeleniumDocument
from ui_engine.config import SelectorConfig
from ui_engine.engine import UIEngine
from ui_engine.errors import SelectionUnavailable
from ui_engine.pages import (
    Credentials,
    HomePage,
    LoginPage,
    LoginResult,
    PatientData,
    PatientDetailPage,
    PatientInfo,
    PatientSearchPage,
    SearchResult,
)
from ui_engine.selector import RANDOM
from ui_engine.session import SessionContext
from ui_engine.settings import OpenmrsEnvironment

GENDERS = {"male": "M", "female": "F"}


class OpenmrsKeywords:
    """Keywords for OpenMRS UI operations matching BDD scenario steps."""

    ROBOT_LIBRARY_SCOPE = "SUITE"
    ROBOT_LIBRARY_DOC_FORMAT = "TEXT"

    def __init__(self, backend: str = "playwright") -> None:
        """Initialize OpenmrsKeywords.

        Arguments:
            backend: browser driver, "playwright" or "selenium"
        """
        if backend not in ("playwright", "selenium"):
            raise ValueError(f"Unknown backend {backend!r}, expected playwright or selenium")
        self.backend = backend
        self.environment = OpenmrsEnvironment.from_env()
        self._engine: Optional[UIEngine] = None
        self._close: Optional[Callable[[], None]] = None
        self._session: Optional[SessionContext] = None
        self._login_result: Optional[LoginResult] = None
        self._page: Any = None
        self._search_result: Optional[SearchResult] = None
        self._patient: Optional[PatientData] = None
        self._patient_info: Optional[PatientInfo] = None

    @property
    def engine(self) -> UIEngine:
        if self._engine is None:
            raise AssertionError("No browser is open, run 'Open OpenMRS browser' first")
        return self._engine

    def _require_page(self, page_type: type) -> Any:
        if not isinstance(self._page, page_type):
            raise AssertionError(
                f"Expected to be on {page_type.__name__}, current page is {type(self._page).__name__}"
            )
        return self._page

    def _require_session(self) -> SessionContext:
        if self._session is None:
            raise AssertionError("No session - log in first")
        self._session.require_authenticated()
        return self._session

    # =========================================================================
    # Browser Keywords
    # =========================================================================

    @keyword("Open OpenMRS browser")
    def open_browser(self) -> None:
        """Start Firefox and bind a UI engine to it.

        The browser is headless unless HEADLESS=0 is set.
        """
        config = SelectorConfig.load(self.environment.ui_version)
        if self.backend == "selenium":
            options = Options()
            if self.environment.headless:
                options.add_argument("--headless")
            driver = webdriver.Firefox(options=options)
            self._engine = UIEngine(SeleniumDocument(driver), config)
            self._close = driver.quit
        else:
            playwright = sync_playwright().start()
            browser = playwright.firefox.launch(headless=self.environment.headless)
            self._engine = UIEngine(PlaywrightDocument(browser.new_page()), config)

            def close() -> None:
                browser.close()
                playwright.stop()

            self._close = close
        print(f"✓ Firefox opened via {self.backend}")

    @keyword("Close OpenMRS browser")
    def close_browser(self) -> None:
        """Close the browser opened by 'Open OpenMRS browser', if any."""
        if self._close is not None:
            self._close()
        self._close = None
        self._engine = None
        self._session = None
        self._page = None

    # =========================================================================
    # Login Keywords
    # =========================================================================

    @keyword("The OpenMRS login page is displayed")
    def login_page_displayed(self) -> None:
        """Navigate to the login page and wait for the form.

        Maps to scenario step:
        - "Given the OpenMRS login page is displayed"
        """
        login_page = LoginPage(self.engine, self.environment)
        if not login_page.goto():
            raise AssertionError(f"Login page not displayed at {self.environment.base_url}")
        self._page = login_page
        print(f"✓ Login page displayed at {self.environment.base_url}")

    @keyword("The admin is logged in")
    def admin_is_logged_in(self) -> SessionContext:
        """Log in with the configured admin account at the default location.

        Maps to scenario step:
        - "Given the admin is logged in"

        Returns:
            The authenticated session
        """
        self.login_page_displayed()
        self._login(self._admin(), self.environment.default_location)
        if not self._login_result.success:
            raise AssertionError(f"Admin login failed: {self._login_result.error}")
        return self._session

    @keyword("The admin logs in at a random location")
    def admin_logs_in_random(self) -> LoginResult:
        """Maps to scenario step:
        - "When the admin logs in at a random location"
        """
        return self._login(self._admin(), RANDOM)

    @keyword('The admin logs in at location "${location}"')
    def admin_logs_in_at(self, location: str) -> LoginResult:
        """Maps to scenario step:
        - 'When the admin logs in at location "<location>"'
        """
        return self._login(self._admin(), location)

    @keyword('A user logs in as "${username}" with password "${password}" at location "${location}"')
    def user_logs_in_with(self, username: str, password: str, location: str) -> LoginResult:
        """Maps to scenario step:
        - 'When a user logs in as "<username>" with password "<password>" at location "<location>"'
        """
        return self._login(Credentials(username, password), location)

    def _admin(self) -> Credentials:
        return Credentials(self.environment.username, self.environment.password)

    def _login(self, credentials: Credentials, location: str) -> LoginResult:
        login_page = self._require_page(LoginPage)
        try:
            result = login_page.login(credentials, location)
        except SelectionUnavailable as e:
            raise AssertionError(f"Location {location!r} could not be selected: {e}") from e
        self._login_result = result
        self._session = result.session
        if result.success:
            self._page = HomePage(self.engine, self.environment)
        print(f"✓ Submitted login for {credentials.username} at {result.session.location}")
        return result

    @keyword("The user logs out")
    def user_logs_out(self) -> None:
        """Maps to scenario step:
        - "When the user logs out"
        """
        self._require_page(HomePage).logout()
        self._session = None
        self._page = LoginPage(self.engine, self.environment)
        print("✓ Logged out")

    @keyword("The home page is displayed")
    def home_page_displayed(self) -> None:
        """Maps to scenario step:
        - "Then the home page is displayed"
        """
        self._require_session()
        if not self._require_page(HomePage).is_logged_in():
            raise AssertionError("Home page navigation is not displayed after login")
        print("✓ Home page displayed")

    @keyword("The welcome message shows the admin user at the selected location")
    def welcome_shows_admin(self) -> None:
        """Maps to scenario step:
        - "Then the welcome message shows the admin user at the selected location"
        """
        session = self._require_session()
        welcome = session.welcome
        if welcome is None:
            raise AssertionError("Welcome message could not be read from the home page")
        if welcome.user_info != self.environment.username:
            raise AssertionError(
                f"Welcome user is {welcome.user_info!r}, expected {self.environment.username!r}"
            )
        if welcome.ward != session.location:
            raise AssertionError(f"Welcome location is {welcome.ward!r}, expected {session.location!r}")
        print(f"✓ Welcome message: {welcome.user_info} at {welcome.ward}")

    @keyword('The login is rejected with message "${message}"')
    def login_rejected_with(self, message: str) -> None:
        """Maps to scenario step:
        - 'Then the login is rejected with message "<message>"'
        """
        result = self._login_result
        if result is None:
            raise AssertionError("No login was attempted")
        if result.success:
            raise AssertionError(f"Login unexpectedly succeeded for {result.session.username}")
        if result.error != message:
            raise AssertionError(f"Login error is {result.error!r}, expected {message!r}")
        if isinstance(self._page, LoginPage) and not self._page.is_error_visible():
            raise AssertionError("Login error message is not visible")
        print(f"✓ Login rejected: {result.error}")

    @keyword("The login page is still displayed")
    @keyword("The login page is displayed")
    def login_page_still_displayed(self) -> None:
        """Maps to scenario steps:
        - "Then the login page is displayed"
        - "Then the login page is still displayed"
        """
        login_page = LoginPage(self.engine, self.environment)
        if not login_page.is_displayed():
            raise AssertionError("Login form is not displayed")
        self._page = login_page
        print("✓ Login page displayed")

    # =========================================================================
    # Patient Search Keywords
    # =========================================================================

    @keyword("The patient search page is open")
    def search_page_open(self) -> PatientSearchPage:
        """Maps to scenario step:
        - "Given the patient search page is open"
        """
        self._require_session()
        home = self._page if isinstance(self._page, HomePage) else self._go_home()
        search_page = home.go_to_find_patient()
        if not search_page.is_displayed():
            raise AssertionError("Patient search input is not displayed")
        self._page = search_page
        print("✓ Patient search page open")
        return search_page

    def _go_home(self) -> HomePage:
        home = HomePage(self.engine, self.environment)
        home.goto()
        return home

    @keyword('The user searches for "${query}"')
    def user_searches_for(self, query: str) -> SearchResult:
        """Search and keep the result for the verification keywords.

        Maps to scenario step:
        - 'When the user searches for "<query>"'
        """
        result = self._require_page(PatientSearchPage).search(query)
        self._search_result = result
        print(f"✓ {result.message} ({result.outcome.attempts_used} attempt(s))")
        return result

    @keyword("The user searches for the registered patient")
    def user_searches_registered(self) -> SearchResult:
        """Maps to scenario step:
        - "When the user searches for the registered patient"
        """
        if self._patient is None:
            raise AssertionError("No patient was registered in this suite")
        self._page = self._go_home().go_to_find_patient()
        return self.user_searches_for(self._patient.family_name)

    @keyword("The user opens the first matching patient")
    def open_first_match(self) -> PatientDetailPage:
        """Maps to scenario step:
        - "When the user opens the first matching patient"
        """
        search_page = self._require_page(PatientSearchPage)
        if self._search_result is None or not self._search_result.has_results:
            raise AssertionError("No search results to open")
        patient = self._search_result.patients[0]
        self._page = search_page.select_patient(patient.index)
        print(f"✓ Opened patient {patient.name} ({patient.id})")
        return self._page

    @keyword('At least one patient matching "${query}" is found')
    def patients_found(self, query: str) -> None:
        """Maps to scenario step:
        - 'Then at least one patient matching "<query>" is found'
        """
        result = self._search_result
        if result is None or not result.has_results:
            raise AssertionError(f"No patients found matching {query!r}")
        needle = query.lower()
        if not any(needle in p.name.lower() or needle in p.id.lower() for p in result.patients):
            raise AssertionError(f"No result name or id contains {query!r}: {result.patients}")
        print(f"✓ {result.message}")

    @keyword("No patients are found")
    def no_patients_found(self) -> None:
        """Maps to scenario step:
        - "Then no patients are found"
        """
        result = self._search_result
        if result is None:
            raise AssertionError("No search was performed")
        if result.has_results:
            raise AssertionError(f"Expected no results, got {result.patients}")
        print(f"✓ {result.message} after {result.outcome.attempts_used} attempt(s)")

    @keyword("The registered patient is among the results")
    def registered_among_results(self) -> None:
        """Maps to scenario step:
        - "Then the registered patient is among the results"
        """
        expected = self._patient
        result = self._search_result
        if expected is None:
            raise AssertionError("No patient was registered in this suite")
        if result is None or not result.has_results:
            raise AssertionError(f"Registered patient {expected.full_name} not found")
        names = [p.name.lower() for p in result.patients]
        if not any(expected.given_name.lower() in n and expected.family_name.lower() in n
                   for n in names):
            raise AssertionError(f"{expected.full_name} not in results: {names}")
        print(f"✓ Found registered patient {expected.full_name}")

    @keyword("The patient dashboard is displayed")
    def dashboard_displayed(self) -> None:
        """Maps to scenario step:
        - "Then the patient dashboard is displayed"
        """
        if not self._require_page(PatientDetailPage).is_displayed():
            raise AssertionError("Patient dashboard is not displayed")
        print("✓ Patient dashboard displayed")

    # =========================================================================
    # Registration Keywords
    # =========================================================================

    @keyword('The user registers a new ${gender} patient "${given_name} ${family_name}" born "${birthdate}"')
    def user_registers_patient(self, gender: str, given_name: str, family_name: str,
                               birthdate: str) -> PatientDetailPage:
        """Register through whichever registration form the home page offers.

        Maps to scenario step:
        - 'When the user registers a new <gender> patient "<given> <family>" born "<YYYY-MM-DD>"'
        """
        self._require_session()
        if gender.lower() not in GENDERS:
            raise AssertionError(f"Unknown gender {gender!r}, expected male or female")
        patient = PatientData(
            given_name=given_name,
            family_name=family_name,
            gender=GENDERS[gender.lower()],
            birthdate=birthdate,
        )
        home = self._page if isinstance(self._page, HomePage) else self._go_home()
        simple = home.simple_register_available()
        registration = home.go_to_register_patient(simple=simple)
        if simple:
            detail = registration.simple_register(patient)
        else:
            detail = registration.register(patient)
        self._patient = patient
        self._patient_info = None
        self._page = detail
        print(f"✓ Registered {patient.full_name} ({'basic' if simple else 'standard'} form)")
        return detail

    @keyword("The patient dashboard shows the registered patient")
    def dashboard_shows_registered(self) -> PatientInfo:
        """Maps to scenario step:
        - "Then the patient dashboard shows the registered patient"
        """
        detail = self._require_page(PatientDetailPage)
        expected = self._patient
        if expected is None:
            raise AssertionError("No patient was registered in this suite")
        if not detail.verify_registration(expected):
            raise AssertionError(f"Dashboard does not show {expected.full_name} ({expected.gender_label})")
        self._patient_info = detail.patient_info()
        print(f"✓ {detail.registration_message()}")
        return self._patient_info

    @keyword("The patient age and birthdate are shown")
    def age_and_birthdate_shown(self) -> None:
        """Maps to scenario step:
        - "Then the patient age and birthdate are shown"
        """
        info = self._current_patient_info()
        if not re.fullmatch(r"\d+\s+year\(s\)", info.age):
            raise AssertionError(f"Unexpected age text: {info.age!r}")
        if not re.fullmatch(r"\d{1,2}\.\w{3}\.\d{4}", info.birthdate):
            raise AssertionError(f"Unexpected birthdate text: {info.birthdate!r}")
        print(f"✓ Age {info.age}, born {info.birthdate}")

    @keyword("The patient has an identifier")
    def patient_has_identifier(self) -> str:
        """Maps to scenario step:
        - "Then the patient has an identifier"

        Returns:
            The patient identifier shown on the dashboard
        """
        info = self._current_patient_info()
        if not info.patient_id:
            raise AssertionError("Patient ID is not shown on the dashboard")
        print(f"✓ Patient ID {info.patient_id}")
        return info.patient_id

    def _current_patient_info(self) -> PatientInfo:
        detail = self._require_page(PatientDetailPage)
        if self._patient_info is None:
            self._patient_info = detail.patient_info()
        return self._patient_info
