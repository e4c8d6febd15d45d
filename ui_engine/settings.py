"""Engine timing settings and target environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from ui_engine.errors import SelectorConfigError


@dataclass(frozen=True)
class EngineSettings:
    """Timing knobs for the engine, all in seconds."""

    probe_timeout: float = 3.0
    poll_interval: float = 0.25
    convergence_timeout: float = 10.0
    max_attempts: int = 5
    attempt_delay: float = 2.0
    shape_timeout: float = 5.0

    @classmethod
    def from_config(cls, timing: Optional[dict[str, Any]]) -> "EngineSettings":
        """Build settings from the ``timing`` section of the selector YAML."""
        if not timing:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(timing) - known
        if unknown:
            raise SelectorConfigError(f"Unknown timing keys: {sorted(unknown)}")
        return cls(**timing)

    def override(self, **kwargs: Any) -> "EngineSettings":
        return replace(self, **{k: v for k, v in kwargs.items() if v is not None})


@dataclass(frozen=True)
class OpenmrsEnvironment:
    """Where the application lives and who logs in, read from the environment."""

    base_url: str = "http://localhost:8080/openmrs/"
    username: str = "admin"
    password: str = "Admin123"
    default_location: str = "random"
    ui_version: str = "default"
    headless: bool = True

    @classmethod
    def from_env(cls) -> "OpenmrsEnvironment":
        return cls(
            base_url=os.environ.get("BASE_URL", cls.base_url),
            username=os.environ.get("ADMIN_USER", cls.username),
            password=os.environ.get("ADMIN_PASS", cls.password),
            default_location=os.environ.get("DEFAULT_LOCATION", cls.default_location),
            ui_version=os.environ.get("OPENMRS_UI_VERSION", cls.ui_version),
            headless=os.environ.get("HEADLESS", "1").lower() not in ("0", "false", "no"),
        )

    def url(self, path: str) -> str:
        """Join ``path`` onto the base URL."""
        base = self.base_url if self.base_url.endswith("/") else f"{self.base_url}/"
        return f"{base}{path.lstrip('/')}"
