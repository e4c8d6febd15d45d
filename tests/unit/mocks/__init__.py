"""Mock classes for unit testing the engine and step definitions."""

from .mock_context import MockContext
from .mock_document import MockDocument, MockNode

__all__ = [
    "MockContext",
    "MockDocument",
    "MockNode",
]
