"""Document Interface collaborator.

The engine never talks to a browser driver directly. Every read and every
action goes through a ``DocumentInterface`` implementation, so the same
fallback, shape and convergence logic runs on Playwright, Selenium or an
in-memory fake in unit tests.

Node handles are opaque to the engine: a Playwright ``Locator`` pinned to one
match, a Selenium ``WebElement``, or a fake node.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from ui_engine.errors import SelectorConfigError

BY_CSS = "css"
BY_XPATH = "xpath"
BY_TEXT = "text"
BY_HAS_TEXT = "has_text"
BY_ROLE = "role"

LOCATOR_STRATEGIES = (BY_CSS, BY_XPATH, BY_TEXT, BY_HAS_TEXT, BY_ROLE)


@dataclass(frozen=True)
class LocatorSpec:
    """Backend-neutral description of how to find nodes.

    Strategies:
        css       -- ``selector`` is a CSS selector
        xpath     -- ``selector`` is an XPath expression
        text      -- nodes whose text equals ``text`` (or contains it if not exact)
        has_text  -- nodes matching CSS ``selector`` whose text contains ``text``
        role      -- nodes with ARIA role ``selector`` whose name matches ``text``
    """

    by: str
    selector: str = ""
    text: Optional[str] = None
    exact: bool = True

    def __post_init__(self) -> None:
        if self.by not in LOCATOR_STRATEGIES:
            raise SelectorConfigError(f"Unknown locator strategy: {self.by}")

    @classmethod
    def from_config(cls, entry: dict[str, Any]) -> "LocatorSpec":
        """Build a spec from a YAML entry such as ``{by: css, selector: h4}``."""
        try:
            return cls(
                by=str(entry["by"]).lower(),
                selector=str(entry.get("selector", "")),
                text=entry.get("text"),
                exact=bool(entry.get("exact", True)),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise SelectorConfigError(f"Invalid locator entry {entry!r}: {e}") from e

    def format(self, **kwargs: Any) -> "LocatorSpec":
        """Return a copy with ``{placeholders}`` filled in selector and text."""
        return replace(
            self,
            selector=self.selector.format(**kwargs),
            text=self.text.format(**kwargs) if self.text is not None else None,
        )

    def describe(self) -> str:
        if self.text is None:
            return f"{self.by}={self.selector}"
        return f"{self.by}={self.selector}[{self.text!r}]"


@dataclass(frozen=True)
class Record:
    """One rendered row of a result set.

    Two records are the same iff their rendered text is equal; the cells are
    carried along for structuring but take no part in identity.
    """

    text: str
    cells: tuple[str, ...] = field(default=(), compare=False)


class DocumentInterface(abc.ABC):
    """Primitives the engine needs from a live interactive surface."""

    @abc.abstractmethod
    def locate(self, locator: LocatorSpec, within: Any = None) -> list[Any]:
        """Enumerate nodes matching ``locator`` right now, without waiting."""

    @abc.abstractmethod
    def await_visible(self, node: Any, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for ``node`` to become visible."""

    @abc.abstractmethod
    def read_text(self, node: Any) -> Optional[str]:
        """Return the node's text content, or None if it cannot be read."""

    @abc.abstractmethod
    def tag_name(self, node: Any) -> Optional[str]:
        """Return the lower-case tag name of ``node``, or None."""

    @abc.abstractmethod
    def dispatch_click(self, node: Any) -> None:
        """Click ``node``; raise ``InteractionUnavailable`` on failure."""

    @abc.abstractmethod
    def dispatch_fill(self, node: Any, value: str) -> None:
        """Replace the value of input ``node``."""

    @abc.abstractmethod
    def dispatch_press(self, node: Any, key: str) -> None:
        """Press ``key`` (e.g. ``"Enter"``) with focus on ``node``."""

    @abc.abstractmethod
    def dispatch_select(self, node: Any, label: str) -> None:
        """Select the option labelled ``label`` in native select ``node``."""

    @abc.abstractmethod
    def current_record_set(self, row_locator: LocatorSpec) -> list[Record]:
        """Read every row matching ``row_locator``, freshly on each call."""

    @abc.abstractmethod
    def navigate(self, url: str) -> None:
        """Load ``url`` in the surface."""

    @abc.abstractmethod
    def current_url(self) -> str:
        """Return the URL currently displayed."""
