"""Patient search intent.

The result table is filled asynchronously and may still show the rows of a
previous search, so a search is a query cycle: snapshot the rows, type the
query and press Enter, wait for a new row containing the query, harvest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ui_engine.document import Record
from ui_engine.errors import InteractionUnavailable
from ui_engine.orchestrator import RetryOutcome
from ui_engine.pages.base import BasePage
from ui_engine.pages.patient_detail import PatientDetailPage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatientHit:
    """One row of the search result table."""

    index: int
    id: str
    name: str
    gender: str = ""
    age: str = ""
    extra: tuple[str, ...] = ()


@dataclass(frozen=True)
class SearchResult:
    query: str
    outcome: RetryOutcome

    @property
    def patients(self) -> list[PatientHit]:
        return self.outcome.records

    @property
    def has_results(self) -> bool:
        return bool(self.outcome.records)

    @property
    def result_count(self) -> int:
        return len(self.outcome.records)

    @property
    def message(self) -> str:
        if self.has_results:
            return f'Found {self.result_count} patients matching "{self.query}"'
        return f'No patients found matching "{self.query}"'


@dataclass(frozen=True)
class PatientSelection:
    """Outcome of search-and-select."""

    success: bool
    message: str
    patient: Optional[PatientHit] = None
    detail: Optional[PatientDetailPage] = None


class PatientSearchPage(BasePage):
    def is_displayed(self, timeout: Optional[float] = None) -> bool:
        return self.engine.is_present("search.input", timeout)

    def clear_search(self) -> None:
        """Use the Clear button when there is one, else empty the input."""
        if not self.engine.click("search.clear", timeout=0):
            self._fill("search.input", "")

    def parse_row(self, index: int, record: Record) -> Optional[PatientHit]:
        """Structure a result row; rows with fewer than two cells or no name are dropped."""
        columns = self.config.get("search.columns")
        cells = record.cells
        if len(cells) < 2:
            return None

        def cell(key: str) -> str:
            position = columns[key]
            return cells[position] if position < len(cells) else ""

        name = cell("name")
        if not name:
            return None
        used = set(columns.values())
        return PatientHit(
            index=index,
            id=cell("id"),
            name=name,
            gender=cell("gender"),
            age=cell("age"),
            extra=tuple(c for i, c in enumerate(cells) if i not in used),
        )

    def search(self, query: str, max_attempts: Optional[int] = None) -> SearchResult:
        """Search for ``query`` and return the matching patients.

        Finding nobody is not an error: the result has ``has_results`` False
        after the retry budget is spent.
        """
        logger.info("Searching for patient: %s", query)

        def submit_query() -> None:
            box = self._node("search.input")
            self.engine.document.dispatch_fill(box, query)
            self.engine.document.dispatch_press(box, "Enter")

        outcome = self.engine.orchestrator.perform_query_cycle(
            action=submit_query,
            query=query,
            row_locator=self.config.locator("search.rows"),
            parse_record=self.parse_row,
            max_attempts=max_attempts,
            prepare=self.clear_search,
        )
        result = SearchResult(query=query, outcome=outcome)
        logger.info(result.message)
        return result

    def select_patient(self, index: int = 0) -> PatientDetailPage:
        """Open the patient in row ``index`` of the live result table."""
        rows = self.engine.document.locate(self.config.locator("search.rows"))
        if index >= len(rows):
            raise InteractionUnavailable("select patient", f"row {index} of {len(rows)}")
        self.engine.document.dispatch_click(rows[index])
        return PatientDetailPage(self.engine, self.environment)

    def search_and_select(self, query: str) -> PatientSelection:
        """Search and open the first matching patient."""
        result = self.search(query)
        if not result.has_results:
            return PatientSelection(success=False, message=f"No patients found for query: {query}")
        patient = result.patients[0]
        detail = self.select_patient(patient.index)
        return PatientSelection(
            success=True,
            message=f"Selected patient: {patient.name or 'Unknown'}",
            patient=patient,
            detail=detail,
        )

    def has_no_results_message(self, timeout: float = 5.0) -> bool:
        return self.engine.is_present("search.no_results", timeout)
