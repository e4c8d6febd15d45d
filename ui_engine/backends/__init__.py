"""Document Interface implementations for real browser drivers."""

from ui_engine.backends.playwright_document import PlaywrightDocument
from ui_engine.backends.selenium_document import SeleniumDocument

__all__ = ["PlaywrightDocument", "SeleniumDocument"]
