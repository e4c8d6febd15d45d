"""Snapshot-Diff Convergence Waiter.

A result list that is appended to or replaced asynchronously cannot be
trusted just because it is non-empty: the rows may be stale ones from before
the action. The waiter therefore captures the record texts BEFORE the
triggering action and, after it, waits for a record that is both absent from
that snapshot and matching the caller's predicate.

Usage::

    snapshot = waiter.capture_snapshot(rows)
    search_box_fill_and_enter()
    result = waiter.await_convergence(rows, snapshot, contains_ignore_case("john"))
    if isinstance(result, Matched):
        ...
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from ui_engine.document import DocumentInterface, LocatorSpec, Record
from ui_engine.settings import EngineSettings

logger = logging.getLogger(__name__)

Predicate = Callable[[str], bool]


@dataclass(frozen=True)
class Snapshot:
    """Record texts present at one instant. Membership testing only."""

    texts: frozenset[str]

    @classmethod
    def of(cls, records: list[Record]) -> "Snapshot":
        return cls(frozenset(r.text for r in records))

    def __contains__(self, record: object) -> bool:
        text = record.text if isinstance(record, Record) else record
        return text in self.texts

    def __len__(self) -> int:
        return len(self.texts)


@dataclass(frozen=True)
class Matched:
    record: Record
    polls: int
    elapsed: float


@dataclass(frozen=True)
class TimedOut:
    polls: int
    elapsed: float


ConvergenceResult = Union[Matched, TimedOut]


def contains_ignore_case(query: str) -> Predicate:
    """Predicate: record text contains ``query``, case-insensitively."""
    needle = query.lower()

    def predicate(text: str) -> bool:
        return needle in text.lower()

    predicate.__name__ = f"contains_ignore_case({query!r})"
    return predicate


class ConvergenceWaiter:
    """Block until a new, predicate-matching record appears or a deadline passes."""

    def __init__(self, document: DocumentInterface, settings: Optional[EngineSettings] = None):
        self.document = document
        self.settings = settings or EngineSettings()

    def capture_snapshot(self, row_locator: LocatorSpec) -> Snapshot:
        """Capture the baseline. Must be called before the triggering action."""
        snapshot = Snapshot.of(self.document.current_record_set(row_locator))
        logger.debug("Baseline snapshot of %s: %d records", row_locator.describe(), len(snapshot))
        return snapshot

    def find_new_match(
        self, records: list[Record], snapshot: Snapshot, predicate: Predicate
    ) -> Optional[Record]:
        for record in records:
            if record not in snapshot and predicate(record.text):
                return record
        return None

    def await_convergence(
        self,
        row_locator: LocatorSpec,
        snapshot: Snapshot,
        predicate: Predicate,
        timeout: Optional[float] = None,
    ) -> ConvergenceResult:
        """Poll the live record set at a fixed interval.

        Returns ``Matched`` with the first record that is new since
        ``snapshot`` and satisfies ``predicate``, or ``TimedOut`` once
        ``timeout`` seconds have elapsed. Never raises on timeout; failures
        of the Document Interface itself propagate.
        """
        timeout = self.settings.convergence_timeout if timeout is None else timeout
        start = time.monotonic()
        deadline = start + timeout
        polls = 0
        while True:
            records = self.document.current_record_set(row_locator)
            polls += 1
            match = self.find_new_match(records, snapshot, predicate)
            now = time.monotonic()
            if match is not None:
                logger.debug("Converged after %d polls: %r", polls, match.text)
                return Matched(record=match, polls=polls, elapsed=now - start)
            if now >= deadline:
                logger.info("No new matching record within %.1fs (%d polls, %d live rows)",
                            timeout, polls, len(records))
                return TimedOut(polls=polls, elapsed=now - start)
            time.sleep(min(self.settings.poll_interval, max(deadline - now, 0)))
