"""Patient data entered through the registration form."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

GENDER_LABELS = {"M": "Male", "F": "Female"}


@dataclass(frozen=True)
class RelativeData:
    relationship_type: str
    person_name: str


@dataclass(frozen=True)
class PatientData:
    """Demographics for one new patient.

    ``gender`` is "M" or "F"; ``birthdate`` is ISO formatted (YYYY-MM-DD).
    """

    given_name: str
    family_name: str
    gender: str
    birthdate: str
    address1: str = ""
    city_village: str = ""
    country: str = ""
    phone_number: str = ""
    relatives: tuple[RelativeData, ...] = ()

    def __post_init__(self) -> None:
        if self.gender not in GENDER_LABELS:
            raise ValueError(f"gender must be one of {sorted(GENDER_LABELS)}, got {self.gender!r}")
        date.fromisoformat(self.birthdate)

    @property
    def gender_label(self) -> str:
        return GENDER_LABELS[self.gender]

    @property
    def birth_date(self) -> date:
        return date.fromisoformat(self.birthdate)

    @property
    def full_name(self) -> str:
        return f"{self.given_name} {self.family_name}"
