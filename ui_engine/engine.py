"""Wire the four engine components to one Document Interface."""

from __future__ import annotations

import logging
import random
from typing import Any, Optional

from ui_engine.config import SelectorConfig
from ui_engine.convergence import ConvergenceWaiter
from ui_engine.document import DocumentInterface
from ui_engine.extractor import FallbackExtractor
from ui_engine.orchestrator import QueryOrchestrator
from ui_engine.selector import ShapeSelector
from ui_engine.settings import EngineSettings

logger = logging.getLogger(__name__)


class UIEngine:
    """One engine per interactive surface.

    Example:
        engine = UIEngine.for_playwright(page, version="default")
        engine.extractor.extract_field(engine.config.field_probe("home.welcome"))
    """

    def __init__(
        self,
        document: DocumentInterface,
        config: Optional[SelectorConfig] = None,
        settings: Optional[EngineSettings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.document = document
        self.config = config or SelectorConfig.load()
        self.settings = settings or self.config.settings()
        self.extractor = FallbackExtractor(document, self.settings)
        self.selector = ShapeSelector(document, self.extractor, self.settings, rng=rng)
        self.waiter = ConvergenceWaiter(document, self.settings)
        self.orchestrator = QueryOrchestrator(self.extractor, self.waiter, self.settings)
        logger.debug("Engine ready on %s with %s", type(document).__name__, self.settings)

    @classmethod
    def for_playwright(cls, page: Any, version: str = "default", **kwargs: Any) -> "UIEngine":
        from ui_engine.backends.playwright_document import PlaywrightDocument

        return cls(PlaywrightDocument(page), SelectorConfig.load(version), **kwargs)

    @classmethod
    def for_selenium(cls, driver: Any, version: str = "default", **kwargs: Any) -> "UIEngine":
        from ui_engine.backends.selenium_document import SeleniumDocument

        return cls(SeleniumDocument(driver), SelectorConfig.load(version), **kwargs)

    def click(self, path: str, timeout: Optional[float] = None, **kwargs: Any) -> bool:
        """Click the first node resolved by any locator configured at ``path``.

        Returns False when none of the locators resolves in time.
        """
        for locator in self.config.locators(path, **kwargs):
            nodes = self.extractor.await_nodes(locator, timeout=timeout)
            if nodes:
                self.document.dispatch_click(nodes[0])
                return True
        logger.debug("Nothing to click at %s", path)
        return False

    def fill(self, path: str, value: str, timeout: Optional[float] = None) -> bool:
        """Fill the first node resolved at ``path``; False if none resolves."""
        for locator in self.config.locators(path):
            nodes = self.extractor.await_nodes(locator, timeout=timeout)
            if nodes:
                self.document.dispatch_fill(nodes[0], value)
                return True
        logger.debug("Nothing to fill at %s", path)
        return False

    def is_present(self, path: str, timeout: Optional[float] = None) -> bool:
        """True if any locator at ``path`` resolves to a visible node in time."""
        timeout = self.settings.probe_timeout if timeout is None else timeout
        for locator in self.config.locators(path):
            nodes = self.extractor.await_nodes(locator, timeout=timeout)
            if nodes and self.document.await_visible(nodes[0], timeout):
                return True
        return False

    def navigate(self, url: str) -> None:
        logger.info("Navigating to %s", url)
        self.document.navigate(url)
