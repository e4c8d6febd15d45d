"""Exceptions raised by the UI interaction engine.

Only conditions that are fatal to the calling intent are raised. An empty
search result is returned as data (see ``RetryOutcome``) and a probe whose
pattern does not match simply falls through to the next probe.
"""

from __future__ import annotations

from typing import Any, Optional


class UIEngineError(Exception):
    """Base class for all engine errors."""


class SelectorConfigError(UIEngineError):
    """Selector configuration is missing or malformed."""


class SelectionUnavailable(UIEngineError):
    """No rendering or strategy could select the requested option.

    :param control: name of the logical control (e.g. ``"login.location"``)
    :param target: requested label, or ``"random"``
    :param shape: the shape that was resolved for the control
    """

    def __init__(self, control: str, target: str, shape: Any, detail: str = "") -> None:
        self.control = control
        self.target = target
        self.shape = shape
        self.detail = detail
        message = f"Cannot select {target!r} on {control} rendered as {shape}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InteractionUnavailable(UIEngineError):
    """The Document Interface could not complete a dispatched action.

    Raised when a node detaches mid-action or the surface is unreachable.
    Never retried by the engine itself.
    """

    def __init__(
        self, action: str, target: str = "", cause: Optional[BaseException] = None
    ) -> None:
        self.action = action
        self.target = target
        self.cause = cause
        message = f"{action} failed"
        if target:
            message = f"{message} on {target}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
