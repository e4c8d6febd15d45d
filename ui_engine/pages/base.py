"""Shared plumbing for the OpenMRS page intents."""

from __future__ import annotations

import time
from typing import Any, Optional

from ui_engine.engine import UIEngine
from ui_engine.errors import InteractionUnavailable
from ui_engine.settings import OpenmrsEnvironment


class BasePage:
    """A page intent bound to one engine and one target environment."""

    def __init__(self, engine: UIEngine, environment: Optional[OpenmrsEnvironment] = None) -> None:
        self.engine = engine
        self.config = engine.config
        self.settings = engine.settings
        self.environment = environment or OpenmrsEnvironment.from_env()

    def url_matches(self, markers_path: str) -> bool:
        """True if the current URL contains any of the markers configured at ``markers_path``."""
        url = self.engine.document.current_url()
        return any(marker in url for marker in self.config.get(markers_path))

    def _nodes(self, path: str, timeout: Optional[float] = None) -> list[Any]:
        for locator in self.config.locators(path):
            nodes = self.engine.extractor.await_nodes(locator, timeout=timeout)
            if nodes:
                return nodes
        return []

    def _node(self, path: str, timeout: Optional[float] = None) -> Any:
        nodes = self._nodes(path, timeout)
        if not nodes:
            raise InteractionUnavailable("locate", path)
        return nodes[0]

    def _click(self, path: str, timeout: Optional[float] = None) -> None:
        if not self.engine.click(path, timeout=timeout):
            raise InteractionUnavailable("click", path)

    def _fill(self, path: str, value: str, timeout: Optional[float] = None) -> None:
        if not self.engine.fill(path, value, timeout=timeout):
            raise InteractionUnavailable("fill", path)

    def _await_count(self, path: str, count: int, timeout: Optional[float] = None) -> list[Any]:
        """Poll the first locator at ``path`` until it matches at least ``count`` nodes."""
        locator = self.config.locator(path)
        timeout = self.settings.probe_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout
        while True:
            nodes = self.engine.document.locate(locator)
            if len(nodes) >= count or time.monotonic() >= deadline:
                return nodes
            time.sleep(self.settings.poll_interval)
