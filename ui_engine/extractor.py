"""Fallback Extractor.

Resolves one logical field to a value by trying an ordered list of probes.
A probe succeeds only when its locator resolves within a short bounded wait
AND the text it reads is non-empty AND, if the probe carries a pattern, the
pattern matches. Markup drift is absorbed by adding probes, not by changing
callers.

Compound text (one node carrying several logical fields) is split with a
``CompoundPattern``; a text the anchor pattern does not match yields ``None``
rather than a half-filled dict.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from ui_engine.document import DocumentInterface, LocatorSpec, Record
from ui_engine.settings import EngineSettings

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: Optional[str]) -> str:
    """Collapse whitespace runs and trim; ``None`` becomes ``""``."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


@dataclass(frozen=True)
class Probe:
    """One candidate strategy for a field: where to look and what to accept."""

    locator: LocatorSpec
    pattern: Optional[str] = None

    def accept(self, text: str) -> Optional[str]:
        """Return the value this probe yields for ``text``, or None.

        Without a pattern the whole text is the value. With a pattern, the
        ``value`` named group, else the first group, else the whole match.
        """
        if not text:
            return None
        if self.pattern is None:
            return text
        match = re.search(self.pattern, text)
        if match is None:
            return None
        if "value" in match.re.groupindex:
            value = match.group("value")
        elif match.re.groups:
            value = match.group(1)
        else:
            value = match.group(0)
        value = normalize_text(value)
        return value or None


@dataclass(frozen=True)
class FieldProbe:
    """Ordered probes for one logical field."""

    name: str
    probes: tuple[Probe, ...]

    @classmethod
    def of(cls, name: str, *probes: Probe) -> "FieldProbe":
        return cls(name=name, probes=tuple(probes))


@dataclass(frozen=True)
class ProbeHit:
    """Outcome of evaluating a FieldProbe; ``probe_index`` is None on a miss."""

    value: str
    probe_index: Optional[int] = None

    @property
    def found(self) -> bool:
        return self.probe_index is not None


@dataclass(frozen=True)
class CompoundPattern:
    """Anchor pattern splitting one text into several named fields.

    Every named group of ``pattern`` becomes a key of the result. ``trim``
    lists characters stripped from both ends of each value, e.g. the full
    stop closing "Logged in as ... at Inpatient Ward.".
    """

    name: str
    pattern: str
    trim: str = ""

    def apply(self, text: str) -> Optional[dict[str, str]]:
        match = re.search(self.pattern, normalize_text(text))
        if match is None:
            return None
        parts = {}
        for key, value in match.groupdict().items():
            value = normalize_text(value)
            if self.trim:
                value = value.strip(self.trim).strip()
            parts[key] = value
        return parts


# Compound formats shown by the OpenMRS reference application.
WELCOME_MESSAGE = CompoundPattern(
    name="welcome_message",
    pattern=r"Logged in as .*?\((?P<user_info>.*?)\) at (?P<ward>.*?)\.?$",
    trim=".",
)
AGE_BIRTHDATE = CompoundPattern(
    name="age_birthdate",
    pattern=r"(?P<age>\d+\s+\w+\(s\))\s*\(\s*(?P<birthdate>\d{1,2}\.\w{3}\.\d{4})\s*\)",
)

BUILTIN_COMPOUNDS = {p.name: p for p in (WELCOME_MESSAGE, AGE_BIRTHDATE)}


class FallbackExtractor:
    """Read fields from a live document through ordered fallback probes."""

    def __init__(self, document: DocumentInterface, settings: Optional[EngineSettings] = None):
        self.document = document
        self.settings = settings or EngineSettings()

    def await_nodes(
        self, locator: LocatorSpec, timeout: Optional[float] = None, within: Any = None
    ) -> list[Any]:
        """Poll ``locator`` until it resolves to at least one node or time runs out."""
        timeout = self.settings.probe_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout
        while True:
            nodes = self.document.locate(locator, within=within)
            if nodes:
                return nodes
            if time.monotonic() >= deadline:
                return []
            time.sleep(self.settings.poll_interval)

    def probe_field(
        self, field: FieldProbe, within: Any = None, timeout: Optional[float] = None
    ) -> ProbeHit:
        """Evaluate the probes of ``field`` in order; report which one won."""
        for index, probe in enumerate(field.probes):
            nodes = self.await_nodes(probe.locator, timeout=timeout, within=within)
            if not nodes:
                logger.debug("%s: probe %d (%s) did not resolve",
                             field.name, index, probe.locator.describe())
                continue
            # Empty duplicates of a node (e.g. a hidden copy) may match first.
            for node in nodes:
                text = normalize_text(self.document.read_text(node))
                value = probe.accept(text)
                if value is not None:
                    logger.debug("%s: probe %d -> %r", field.name, index, value)
                    return ProbeHit(value=value, probe_index=index)
            logger.debug("%s: probe %d matched %d node(s) but no text was accepted",
                         field.name, index, len(nodes))
        logger.debug("%s: all %d probes failed", field.name, len(field.probes))
        return ProbeHit(value="")

    def extract_field(
        self, field: FieldProbe, within: Any = None, timeout: Optional[float] = None
    ) -> str:
        """Return the first accepted probe value, or ``""`` if the field is unavailable."""
        return self.probe_field(field, within=within, timeout=timeout).value

    def extract_fields(
        self, fields: Mapping[str, FieldProbe], within: Any = None
    ) -> dict[str, str]:
        """Extract every field of ``fields``; missing fields map to ``""``."""
        return {name: self.extract_field(probe, within=within) for name, probe in fields.items()}

    def decompose(self, text: Optional[str], compound: CompoundPattern) -> Optional[dict[str, str]]:
        """Split ``text`` into named fields, or None if the anchor does not match."""
        if not text:
            return None
        parts = compound.apply(text)
        if parts is None:
            logger.debug("%s did not match %r", compound.name, text)
        return parts

    def extract_compound(
        self, field: FieldProbe, compound: CompoundPattern, within: Any = None
    ) -> Optional[dict[str, str]]:
        """Extract ``field`` and decompose it in one go."""
        return self.decompose(self.extract_field(field, within=within), compound)

    def enumerate_texts(
        self,
        locator: LocatorSpec,
        placeholders: Iterable[str] = (),
        timeout: Optional[float] = None,
        within: Any = None,
    ) -> list[str]:
        """Read the text of every node matching ``locator``.

        Empty entries and placeholder labels (compared case-insensitively)
        are dropped. Returns ``[]`` when nothing resolves in time.
        """
        skip = {p.lower() for p in placeholders}
        texts = []
        for node in self.await_nodes(locator, timeout=timeout, within=within):
            text = normalize_text(self.document.read_text(node))
            if text and text.lower() not in skip:
                texts.append(text)
        return texts

    def collect_texts(
        self,
        field: FieldProbe,
        exclude: Iterable[str] = ("none",),
        timeout: Optional[float] = None,
    ) -> list[str]:
        """Harvest every entry of a list-like field.

        Uses the first probe whose locator resolves to any node; entries
        equal to an ``exclude`` marker (e.g. the "None" shown for empty
        sections) are skipped, and the probe pattern, if any, filters and
        trims the rest.
        """
        markers = {m.lower() for m in exclude}
        for probe in field.probes:
            nodes = self.await_nodes(probe.locator, timeout=timeout)
            if not nodes:
                continue
            entries = []
            for node in nodes:
                text = normalize_text(self.document.read_text(node))
                if text.lower() in markers:
                    continue
                value = probe.accept(text)
                if value is not None:
                    entries.append(value)
            logger.debug("%s: %d entries via %s", field.name, len(entries), probe.locator.describe())
            return entries
        return []

    def harvest(
        self, row_locator: LocatorSpec, predicate: Callable[[str], bool]
    ) -> list[tuple[int, Record]]:
        """Read the live record set and keep rows whose text satisfies ``predicate``.

        Each kept record is paired with its position in the full live set so
        callers can act on that row later.
        """
        records = self.document.current_record_set(row_locator)
        kept = [(i, r) for i, r in enumerate(records) if r.text and predicate(r.text)]
        logger.debug("Harvested %d of %d rows from %s", len(kept), len(records), row_locator.describe())
        return kept
