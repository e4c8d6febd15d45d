"""Document Interface backed by a Selenium WebDriver."""

from __future__ import annotations

import logging
from typing import Any, Optional

from selenium.common.exceptions import (
    StaleElementReferenceException,
    TimeoutException,
    WebDriverException,
)
from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import Select, WebDriverWait

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

# Implicit ARIA roles for the elements the OpenMRS pages use.
IMPLICIT_ROLES = {
    "button": "button, input[type='submit'], input[type='button']",
    "link": "a[href]",
    "listitem": "li",
    "option": "option",
    "row": "tr",
    "heading": "h1, h2, h3, h4, h5, h6",
}

KEYS = {
    "Enter": Keys.ENTER,
    "Tab": Keys.TAB,
    "Escape": Keys.ESCAPE,
}


def _xpath_literal(value: str) -> str:
    """Quote ``value`` for use inside an XPath expression."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


class SeleniumDocument(DocumentInterface):
    """Drive one Selenium ``WebDriver`` session.

    Node handles are ``WebElement`` objects.
    """

    def __init__(self, driver: Any) -> None:
        self.driver = driver

    def _find(self, root: Any, by: str, value: str) -> list[Any]:
        return list(root.find_elements(by, value))

    def locate(self, locator: LocatorSpec, within: Any = None) -> list[Any]:
        root = within if within is not None else self.driver
        try:
            if locator.by == BY_CSS:
                return self._find(root, By.CSS_SELECTOR, locator.selector)
            if locator.by == BY_XPATH:
                return self._find(root, By.XPATH, locator.selector)
            if locator.by == BY_TEXT:
                literal = _xpath_literal(locator.text or "")
                if locator.exact:
                    xpath = f".//*[normalize-space(text())={literal}]"
                else:
                    xpath = f".//*[contains(normalize-space(text()), {literal})]"
                return self._find(root, By.XPATH, xpath)
            if locator.by == BY_HAS_TEXT:
                nodes = self._find(root, By.CSS_SELECTOR, locator.selector)
                return [n for n in nodes if (locator.text or "") in (n.text or "")]
            if locator.by == BY_ROLE:
                css = f"[role='{locator.selector}']"
                implicit = IMPLICIT_ROLES.get(locator.selector)
                if implicit:
                    css = f"{css}, {implicit}"
                nodes = self._find(root, By.CSS_SELECTOR, css)
                if locator.text is None:
                    return nodes
                return [n for n in nodes if self._name_matches(n, locator)]
        except StaleElementReferenceException as e:
            logger.debug("locate %s hit a stale node: %s", locator.describe(), e)
            return []
        except WebDriverException as e:
            raise InteractionUnavailable("locate", locator.describe(), e) from e
        raise ValueError(f"Unsupported locator strategy: {locator.by}")

    @staticmethod
    def _name_matches(node: Any, locator: LocatorSpec) -> bool:
        name = (node.get_attribute("aria-label") or node.text or "").strip()
        if locator.exact:
            return name == locator.text
        return (locator.text or "").lower() in name.lower()

    def await_visible(self, node: Any, timeout: float) -> bool:
        try:
            WebDriverWait(self.driver, timeout).until(EC.visibility_of(node))
            return True
        except TimeoutException:
            return False
        except WebDriverException as e:
            logger.debug("await_visible failed: %s", e)
            return False

    def read_text(self, node: Any) -> Optional[str]:
        try:
            # .text is empty for hidden nodes; textContent mirrors Playwright.
            return node.text or node.get_attribute("textContent")
        except WebDriverException as e:
            logger.debug("read_text failed: %s", e)
            return None

    def tag_name(self, node: Any) -> Optional[str]:
        try:
            return node.tag_name.lower()
        except WebDriverException as e:
            logger.debug("tag_name failed: %s", e)
            return None

    def dispatch_click(self, node: Any) -> None:
        try:
            node.click()
        except WebDriverException as e:
            raise InteractionUnavailable("click", "element", e) from e

    def dispatch_fill(self, node: Any, value: str) -> None:
        try:
            node.clear()
            node.send_keys(value)
        except WebDriverException as e:
            raise InteractionUnavailable("fill", "input", e) from e

    def dispatch_press(self, node: Any, key: str) -> None:
        try:
            node.send_keys(KEYS.get(key, key))
        except WebDriverException as e:
            raise InteractionUnavailable(f"press {key}", "input", e) from e

    def dispatch_select(self, node: Any, label: str) -> None:
        try:
            Select(node).select_by_visible_text(label)
        except WebDriverException as e:
            raise InteractionUnavailable(f"select {label!r}", "select", e) from e

    def current_record_set(self, row_locator: LocatorSpec) -> list[Record]:
        records = []
        for row in self.locate(row_locator):
            try:
                text = (row.get_attribute("textContent") or row.text or "").strip()
                cells = tuple(
                    (c.get_attribute("textContent") or "").strip()
                    for c in row.find_elements(By.TAG_NAME, "td")
                )
            except WebDriverException as e:
                logger.debug("Row vanished while reading record set: %s", e)
                continue
            records.append(Record(text=text, cells=cells))
        return records

    def navigate(self, url: str) -> None:
        try:
            self.driver.get(url)
        except WebDriverException as e:
            raise InteractionUnavailable("navigate", url, e) from e

    def current_url(self) -> str:
        return self.driver.current_url
