"""Session context passed explicitly between intents.

The engine keeps no "is logged in" flag of its own: the login intent returns
a ``SessionContext`` and later intents receive it from the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class WelcomeMessage:
    """Parts of the home page greeting "Logged in as Super User (admin) at Inpatient Ward."."""

    user_info: str
    ward: str

    @classmethod
    def from_parts(cls, parts: Optional[dict[str, str]]) -> Optional["WelcomeMessage"]:
        if not parts:
            return None
        return cls(user_info=parts.get("user_info", ""), ward=parts.get("ward", ""))


@dataclass(frozen=True)
class SessionContext:
    username: str
    location: str
    authenticated: bool = False
    welcome: Optional[WelcomeMessage] = None

    def require_authenticated(self) -> None:
        """Raise AssertionError unless the session belongs to a logged-in user."""
        if not self.authenticated:
            raise AssertionError(
                f"User {self.username!r} is not logged in (location {self.location!r})"
            )
