"""Page-level intents for the OpenMRS reference application."""

from ui_engine.pages.home import HomePage
from ui_engine.pages.login import Credentials, LoginPage, LoginResult
from ui_engine.pages.patient_data import PatientData, RelativeData
from ui_engine.pages.patient_detail import (
    Observation,
    PatientContact,
    PatientDetailPage,
    PatientInfo,
    Relative,
)
from ui_engine.pages.registration import RegistrationPage
from ui_engine.pages.search import PatientHit, PatientSearchPage, PatientSelection, SearchResult

__all__ = [
    "Credentials",
    "HomePage",
    "LoginPage",
    "LoginResult",
    "Observation",
    "PatientContact",
    "PatientData",
    "PatientDetailPage",
    "PatientHit",
    "PatientInfo",
    "PatientSearchPage",
    "PatientSelection",
    "RegistrationPage",
    "Relative",
    "RelativeData",
    "SearchResult",
]
