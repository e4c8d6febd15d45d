"""Resilient UI interaction engine for OpenMRS end-to-end tests."""

from ui_engine.config import SelectorConfig, load_selector_config
from ui_engine.convergence import ConvergenceWaiter, Matched, Snapshot, TimedOut, contains_ignore_case
from ui_engine.document import DocumentInterface, LocatorSpec, Record
from ui_engine.engine import UIEngine
from ui_engine.errors import (
    InteractionUnavailable,
    SelectionUnavailable,
    SelectorConfigError,
    UIEngineError,
)
from ui_engine.extractor import CompoundPattern, FallbackExtractor, FieldProbe, Probe, ProbeHit
from ui_engine.orchestrator import CycleState, QueryOrchestrator, RetryOutcome
from ui_engine.selector import RANDOM, ControlSpec, Selection, ShapeSelector, UIShape
from ui_engine.session import SessionContext, WelcomeMessage
from ui_engine.settings import EngineSettings, OpenmrsEnvironment

__version__ = "0.1.0"

__all__ = [
    "RANDOM",
    "CompoundPattern",
    "ControlSpec",
    "ConvergenceWaiter",
    "CycleState",
    "DocumentInterface",
    "EngineSettings",
    "FallbackExtractor",
    "FieldProbe",
    "InteractionUnavailable",
    "LocatorSpec",
    "Matched",
    "OpenmrsEnvironment",
    "Probe",
    "ProbeHit",
    "QueryOrchestrator",
    "Record",
    "RetryOutcome",
    "SelectionUnavailable",
    "Selection",
    "SelectorConfig",
    "SelectorConfigError",
    "SessionContext",
    "ShapeSelector",
    "Snapshot",
    "TimedOut",
    "UIEngine",
    "UIEngineError",
    "UIShape",
    "WelcomeMessage",
    "contains_ignore_case",
    "load_selector_config",
]
