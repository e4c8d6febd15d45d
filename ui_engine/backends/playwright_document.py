"""Document Interface backed by a Playwright (sync API) page."""

from __future__ import annotations

import logging
from typing import Any, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ui_engine.document import (
    BY_CSS,
    BY_HAS_TEXT,
    BY_ROLE,
    BY_TEXT,
    BY_XPATH,
    DocumentInterface,
    LocatorSpec,
    Record,
)
from ui_engine.errors import InteractionUnavailable

logger = logging.getLogger(__name__)

# Actions on a node that already resolved should not hang for the page default.
ACTION_TIMEOUT_MS = 10_000


class PlaywrightDocument(DocumentInterface):
    """Drive one Playwright ``Page``.

    Node handles are Playwright ``Locator`` objects pinned to a single match
    (as returned by ``Locator.all()``).
    """

    def __init__(self, page: Page, action_timeout_ms: int = ACTION_TIMEOUT_MS) -> None:
        self.page = page
        self.action_timeout_ms = action_timeout_ms

    def _to_locator(self, spec: LocatorSpec, within: Optional[Locator]) -> Locator:
        root = within if within is not None else self.page
        if spec.by == BY_CSS:
            return root.locator(spec.selector)
        if spec.by == BY_XPATH:
            return root.locator(f"xpath={spec.selector}")
        if spec.by == BY_TEXT:
            return root.get_by_text(spec.text or "", exact=spec.exact)
        if spec.by == BY_HAS_TEXT:
            return root.locator(spec.selector, has_text=spec.text or "")
        if spec.by == BY_ROLE:
            if spec.text is None:
                return root.get_by_role(spec.selector)
            return root.get_by_role(spec.selector, name=spec.text, exact=spec.exact)
        raise ValueError(f"Unsupported locator strategy: {spec.by}")

    def locate(self, locator: LocatorSpec, within: Any = None) -> list[Any]:
        try:
            return self._to_locator(locator, within).all()
        except PlaywrightError as e:
            # A detached frame or closed page is not "zero matches".
            if self.page.is_closed():
                raise InteractionUnavailable("locate", locator.describe(), e) from e
            logger.debug("locate %s failed: %s", locator.describe(), e)
            return []

    def await_visible(self, node: Any, timeout: float) -> bool:
        try:
            if timeout <= 0:
                # Playwright treats a zero timeout as "wait forever".
                return node.is_visible()
            node.wait_for(state="visible", timeout=timeout * 1000)
            return True
        except PlaywrightTimeoutError:
            return False
        except PlaywrightError as e:
            logger.debug("await_visible failed: %s", e)
            return False

    def read_text(self, node: Any) -> Optional[str]:
        try:
            return node.text_content(timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            logger.debug("read_text failed: %s", e)
            return None

    def tag_name(self, node: Any) -> Optional[str]:
        try:
            return str(node.evaluate("el => el.tagName")).lower()
        except PlaywrightError as e:
            logger.debug("tag_name failed: %s", e)
            return None

    def dispatch_click(self, node: Any) -> None:
        try:
            node.click(timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            raise InteractionUnavailable("click", str(node), e) from e

    def dispatch_fill(self, node: Any, value: str) -> None:
        try:
            node.fill(value, timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            raise InteractionUnavailable("fill", str(node), e) from e

    def dispatch_press(self, node: Any, key: str) -> None:
        try:
            node.press(key, timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            raise InteractionUnavailable(f"press {key}", str(node), e) from e

    def dispatch_select(self, node: Any, label: str) -> None:
        try:
            node.select_option(label=label, timeout=self.action_timeout_ms)
        except PlaywrightError as e:
            raise InteractionUnavailable(f"select {label!r}", str(node), e) from e

    def current_record_set(self, row_locator: LocatorSpec) -> list[Record]:
        records = []
        for row in self.locate(row_locator):
            try:
                text = (row.text_content() or "").strip()
                cells = tuple(c.strip() for c in row.locator("td").all_text_contents())
            except PlaywrightError as e:
                # Rows are replaced wholesale while the table redraws.
                logger.debug("Row vanished while reading record set: %s", e)
                continue
            records.append(Record(text=text, cells=cells))
        return records

    def navigate(self, url: str) -> None:
        try:
            self.page.goto(url)
        except PlaywrightError as e:
            raise InteractionUnavailable("navigate", url, e) from e

    def current_url(self) -> str:
        return self.page.url
