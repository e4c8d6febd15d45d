"""Shape-Polymorphic Selector.

The same logical control (e.g. the login location picker) renders either as
a native ``<select>`` or as a list of clickable items, depending on the
application build. The shape is probed on every call, never cached, since it
can change between navigations; selection is then dispatched on the shape.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ui_engine.document import DocumentInterface, LocatorSpec
from ui_engine.errors import InteractionUnavailable, SelectionUnavailable
from ui_engine.extractor import FallbackExtractor
from ui_engine.settings import EngineSettings

logger = logging.getLogger(__name__)

RANDOM = "random"


class UIShape(str, Enum):
    NATIVE_CONTROL = "native_control"
    ITEM_LIST = "item_list"


@dataclass(frozen=True)
class ControlSpec:
    """Everything needed to find and operate one logical control.

    ``item_strategies`` are locator templates with a ``{label}`` placeholder,
    tried in order to click an item of the ITEM_LIST rendering.
    ``fallback_labels`` is the reference list used when item enumeration
    finds nothing.
    """

    name: str
    anchor: LocatorSpec
    options: Optional[LocatorSpec] = None
    items: Optional[LocatorSpec] = None
    item_strategies: tuple[LocatorSpec, ...] = ()
    fallback_labels: tuple[str, ...] = ()
    placeholders: tuple[str, ...] = ()


@dataclass(frozen=True)
class Selection:
    """What ``select_option`` actually did."""

    control: str
    shape: UIShape
    label: str
    via_fallback: bool = False


class ShapeSelector:
    """Uniform choose-value / choose-random over every rendering of a control."""

    def __init__(
        self,
        document: DocumentInterface,
        extractor: FallbackExtractor,
        settings: Optional[EngineSettings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.document = document
        self.extractor = extractor
        self.settings = settings or extractor.settings
        self.rng = rng or random.Random()

    def resolve_shape(self, control: ControlSpec) -> UIShape:
        """Classify the control by its anchor element.

        A ``select`` anchor is NATIVE_CONTROL; anything else, including an
        anchor that cannot be found or inspected in time, is ITEM_LIST.
        """
        nodes = self.extractor.await_nodes(control.anchor, timeout=self.settings.shape_timeout)
        if not nodes:
            logger.warning("%s: anchor %s not found, assuming %s",
                           control.name, control.anchor.describe(), UIShape.ITEM_LIST.value)
            return UIShape.ITEM_LIST
        tag = self.document.tag_name(nodes[0])
        if tag == "select":
            shape = UIShape.NATIVE_CONTROL
        else:
            shape = UIShape.ITEM_LIST
        logger.debug("%s: anchor <%s> -> %s", control.name, tag, shape.value)
        return shape

    def list_options(self, control: ControlSpec, shape: UIShape) -> list[str]:
        """Enumerate the labels currently offered by the control."""
        if shape is UIShape.NATIVE_CONTROL:
            locator = control.options
        elif shape is UIShape.ITEM_LIST:
            locator = control.items
        else:
            raise ValueError(f"Unknown shape: {shape}")
        if locator is None:
            return []
        return self.extractor.enumerate_texts(locator, placeholders=control.placeholders)

    def select_option(self, control: ControlSpec, shape: UIShape, target: str = RANDOM) -> Selection:
        """Select ``target`` (an exact label, or ``RANDOM``) on ``control``.

        Raises:
            SelectionUnavailable: no strategy could select the target
        """
        if shape is UIShape.NATIVE_CONTROL:
            selection = self._select_native(control, target)
        elif shape is UIShape.ITEM_LIST:
            selection = self._select_item(control, target)
        else:
            raise ValueError(f"Unknown shape: {shape}")
        logger.info("%s: selected %r (%s%s)", control.name, selection.label, shape.value,
                    ", reference list" if selection.via_fallback else "")
        return selection

    def choose(self, control: ControlSpec, target: str = RANDOM) -> Selection:
        """Resolve the shape and select in one call."""
        return self.select_option(control, self.resolve_shape(control), target)

    def fill_or_select(self, control: ControlSpec, value: str) -> UIShape:
        """Put ``value`` into a field rendered either as a select or as an input."""
        shape = self.resolve_shape(control)
        nodes = self.extractor.await_nodes(control.anchor)
        if not nodes:
            raise SelectionUnavailable(control.name, value, shape, "field not found")
        if shape is UIShape.NATIVE_CONTROL:
            self.document.dispatch_select(nodes[0], value)
        else:
            self.document.dispatch_fill(nodes[0], value)
        return shape

    def _select_native(self, control: ControlSpec, target: str) -> Selection:
        shape = UIShape.NATIVE_CONTROL
        labels = self.list_options(control, shape)
        if target == RANDOM:
            if not labels:
                raise SelectionUnavailable(control.name, target, shape, "no options to choose from")
            label = self.rng.choice(labels)
        else:
            if labels and target not in labels:
                raise SelectionUnavailable(control.name, target, shape, f"available: {labels}")
            label = target
        nodes = self.extractor.await_nodes(control.anchor)
        if not nodes:
            raise SelectionUnavailable(control.name, target, shape, "select element vanished")
        if labels:
            self.document.dispatch_select(nodes[0], label)
        else:
            # Options could not be read, so the label was never checked.
            try:
                self.document.dispatch_select(nodes[0], label)
            except InteractionUnavailable as e:
                raise SelectionUnavailable(control.name, target, shape, str(e)) from e
        return Selection(control=control.name, shape=shape, label=label)

    def _select_item(self, control: ControlSpec, target: str) -> Selection:
        shape = UIShape.ITEM_LIST
        labels = self.list_options(control, shape)
        via_fallback = not labels
        if target != RANDOM:
            candidates = [target]
        elif labels:
            candidates = [self.rng.choice(labels)]
        else:
            candidates = list(control.fallback_labels)
            self.rng.shuffle(candidates)
        if via_fallback:
            logger.warning("%s: no items enumerated, trying %s directly",
                           control.name, candidates if target == RANDOM else repr(target))

        for label in candidates:
            if self._click_item(control, label):
                return Selection(control=control.name, shape=shape, label=label,
                                 via_fallback=via_fallback)
        raise SelectionUnavailable(control.name, target, shape,
                                   f"no item strategy matched {candidates}")

    def _click_item(self, control: ControlSpec, label: str) -> bool:
        for template in control.item_strategies:
            locator = template.format(label=label)
            nodes = self.extractor.await_nodes(locator)
            if nodes:
                logger.debug("%s: clicking %r via %s", control.name, label, locator.describe())
                self.document.dispatch_click(nodes[0])
                return True
        return False
