"""Bounded Retry Orchestrator.

Wraps "trigger action -> wait for convergence -> extract records" into a
capped retry loop. The UI may report zero rows while it is still settling,
so an empty harvest is retried; after the last attempt an empty result is
returned as data (``succeeded=False``), never raised. Failures of the
Document Interface itself (``InteractionUnavailable``) abort the cycle.

Per attempt the order is fixed:

    capture baseline snapshot -> dispatch action -> await convergence -> harvest

State machine::

    IDLE -> TRIGGERED -> AWAITING_CONVERGENCE -> EXTRACTING -> DONE
                ^                                     |
                +------------- SLEEPING <-------------+
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from ui_engine.convergence import (
    ConvergenceResult,
    ConvergenceWaiter,
    Matched,
    Predicate,
    contains_ignore_case,
)
from ui_engine.document import LocatorSpec, Record
from ui_engine.extractor import FallbackExtractor
from ui_engine.settings import EngineSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")

RecordParser = Callable[[int, Record], Optional[Any]]


class CycleState(str, Enum):
    IDLE = "idle"
    TRIGGERED = "triggered"
    AWAITING_CONVERGENCE = "awaiting_convergence"
    EXTRACTING = "extracting"
    SLEEPING = "sleeping"
    DONE = "done"


@dataclass
class RetryOutcome(Generic[T]):
    """Result of a query cycle. Owned by the caller once returned."""

    records: list[T]
    attempts_used: int
    succeeded: bool
    states: list[CycleState] = field(default_factory=list)
    convergence: list[ConvergenceResult] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        """True if any attempt observed a new matching record before its deadline."""
        return any(isinstance(r, Matched) for r in self.convergence)


def raw_record(index: int, record: Record) -> Record:
    """Default parser: keep the Record as-is."""
    return record


class QueryOrchestrator:
    """Run query cycles against one document, one at a time."""

    def __init__(
        self,
        extractor: FallbackExtractor,
        waiter: ConvergenceWaiter,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self.extractor = extractor
        self.waiter = waiter
        self.settings = settings or extractor.settings

    def perform_query_cycle(
        self,
        action: Callable[[], None],
        query: str,
        row_locator: LocatorSpec,
        parse_record: RecordParser = raw_record,
        max_attempts: Optional[int] = None,
        per_attempt_delay: Optional[float] = None,
        convergence_timeout: Optional[float] = None,
        predicate: Optional[Predicate] = None,
        prepare: Optional[Callable[[], None]] = None,
    ) -> RetryOutcome:
        """Trigger ``action`` and harvest records matching ``query``, retrying on empty.

        Args:
            action: dispatches the UI action expected to change the record set
            query: free text; the default predicate is case-insensitive containment
            row_locator: where the result rows live
            parse_record: turns ``(row_index, Record)`` into a structured entity,
                or None to drop the row
            max_attempts: upper bound on action dispatches
            per_attempt_delay: seconds slept between attempts
            convergence_timeout: deadline for each convergence wait
            predicate: overrides the query-derived predicate
            prepare: runs before each baseline capture, e.g. clearing the search box

        Returns:
            RetryOutcome with the structured records of the first non-empty attempt
        """
        max_attempts = self.settings.max_attempts if max_attempts is None else max_attempts
        delay = self.settings.attempt_delay if per_attempt_delay is None else per_attempt_delay
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        predicate = predicate or contains_ignore_case(query)

        outcome: RetryOutcome = RetryOutcome(records=[], attempts_used=0, succeeded=False)
        outcome.states.append(CycleState.IDLE)

        for attempt in range(1, max_attempts + 1):
            outcome.attempts_used = attempt
            outcome.states.append(CycleState.TRIGGERED)
            if prepare is not None:
                prepare()
            snapshot = self.waiter.capture_snapshot(row_locator)
            action()

            outcome.states.append(CycleState.AWAITING_CONVERGENCE)
            outcome.convergence.append(
                self.waiter.await_convergence(row_locator, snapshot, predicate, convergence_timeout)
            )

            outcome.states.append(CycleState.EXTRACTING)
            parsed = []
            for index, record in self.extractor.harvest(row_locator, predicate):
                entity = parse_record(index, record)
                if entity is not None:
                    parsed.append(entity)
            if parsed:
                outcome.records = parsed
                outcome.succeeded = True
                break

            if attempt < max_attempts:
                logger.info("Attempt %d/%d for %r found nothing, retrying in %.1fs",
                            attempt, max_attempts, query, delay)
                outcome.states.append(CycleState.SLEEPING)
                time.sleep(delay)

        outcome.states.append(CycleState.DONE)
        logger.info("Query %r: %d records after %d attempt(s)",
                    query, len(outcome.records), outcome.attempts_used)
        return outcome
