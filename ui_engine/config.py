"""Selector and timing configuration.

Selectors live in YAML so they can be updated when the OpenMRS markup drifts
without touching code. A version-specific file
(``openmrs_selectors_v{version}.yaml``) is preferred when present; otherwise
the default ``openmrs_selectors.yaml`` is used.

Every field is a list of locator entries tried in order::

    patient_detail:
      given_name:
        - {by: css, selector: .PersonName-givenName}
      birthdate:
        - {by: css, selector: "[class*='birthdate']", pattern: '(\\d{1,2}\\.\\w{3}\\.\\d{4})'}
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ui_engine.document import LocatorSpec
from ui_engine.errors import SelectorConfigError
from ui_engine.extractor import BUILTIN_COMPOUNDS, CompoundPattern, FieldProbe, Probe
from ui_engine.selector import ControlSpec
from ui_engine.settings import EngineSettings

SELECTORS_DIR = Path(__file__).parent / "selectors"
DEFAULT_SELECTORS_FILENAME = "openmrs_selectors.yaml"


def load_selector_config(version: str = "default", directory: Path = SELECTORS_DIR) -> dict:
    """Load the selector YAML for ``version``, falling back to the default file.

    Args:
        version: OpenMRS UI version (e.g. "2.12" or "default")
        directory: directory holding the YAML files

    Returns:
        Parsed configuration dictionary
    """
    version_file = directory / f"openmrs_selectors_v{version}.yaml"
    path = version_file if version_file.exists() else directory / DEFAULT_SELECTORS_FILENAME
    if not path.exists():
        raise SelectorConfigError(f"Selector configuration not found: {path}")
    with open(path, encoding="utf-8") as f:
        config = yaml.safe_load(f)
    if not isinstance(config, dict):
        raise SelectorConfigError(f"Selector configuration {path} is not a mapping")
    return config


class SelectorConfig:
    """Typed access to a loaded selector configuration.

    Example:
        config = SelectorConfig.load()
        config.locator("login.username")
        # LocatorSpec(by='css', selector='input[name="username"], #username')
        config.field_probe("patient_detail.birthdate")
        # FieldProbe(name='patient_detail.birthdate', probes=(...))
    """

    def __init__(self, raw: dict[str, Any]) -> None:
        self.raw = raw

    @classmethod
    def load(cls, version: str = "default", directory: Path = SELECTORS_DIR) -> "SelectorConfig":
        return cls(load_selector_config(version, directory))

    def settings(self, **overrides: Any) -> EngineSettings:
        return EngineSettings.from_config(self.raw.get("timing")).override(**overrides)

    def get(self, path: str) -> Any:
        """Navigate the nested configuration using dot notation."""
        value: Any = self.raw
        for part in path.split("."):
            if not isinstance(value, dict) or part not in value:
                raise SelectorConfigError(f"Selector path not configured: {path}")
            value = value[part]
        return value

    def _entries(self, path: str) -> list[dict[str, Any]]:
        value = self.get(path)
        entries = value if isinstance(value, list) else [value]
        if not entries or not all(isinstance(e, dict) for e in entries):
            raise SelectorConfigError(f"Selector path {path} must hold locator entries")
        return entries

    def locator(self, path: str, **kwargs: Any) -> LocatorSpec:
        """Return the first locator configured at ``path``, formatted with kwargs."""
        spec = LocatorSpec.from_config(self._entries(path)[0])
        return spec.format(**kwargs) if kwargs else spec

    def locators(self, path: str, **kwargs: Any) -> list[LocatorSpec]:
        """Return every locator configured at ``path``, in priority order."""
        specs = [LocatorSpec.from_config(e) for e in self._entries(path)]
        return [s.format(**kwargs) for s in specs] if kwargs else specs

    def field_probe(self, path: str) -> FieldProbe:
        probes = tuple(
            Probe(locator=LocatorSpec.from_config(e), pattern=e.get("pattern"))
            for e in self._entries(path)
        )
        return FieldProbe(name=path, probes=probes)

    def field_probes(self, path: str) -> dict[str, FieldProbe]:
        """Return one probe per key of the mapping at ``path``."""
        section = self.get(path)
        if not isinstance(section, dict):
            raise SelectorConfigError(f"Selector path {path} must be a mapping")
        return {name: self.field_probe(f"{path}.{name}") for name in section}

    def compound(self, name: str) -> CompoundPattern:
        """Return the compound pattern ``name``; YAML entries override the built-ins."""
        entry = self.raw.get("compound", {}).get(name)
        if entry is None:
            if name in BUILTIN_COMPOUNDS:
                return BUILTIN_COMPOUNDS[name]
            raise SelectorConfigError(f"Compound pattern not configured: {name}")
        try:
            return CompoundPattern(
                name=name,
                pattern=entry["pattern"],
                trim=entry.get("trim", ""),
            )
        except (KeyError, TypeError) as e:
            raise SelectorConfigError(f"Invalid compound pattern {name}: {e}") from e

    def labels(self, path: str) -> tuple[str, ...]:
        value = self.get(path)
        if not isinstance(value, list):
            raise SelectorConfigError(f"Label list expected at {path}")
        return tuple(str(v) for v in value)

    def control(self, path: str) -> ControlSpec:
        """Build the ControlSpec configured at ``path``.

        Expected keys: ``anchor`` (required), ``options``, ``items``,
        ``item_strategies``, ``fallback_labels``, ``placeholders``.
        """
        section = self.get(path)
        if not isinstance(section, dict) or "anchor" not in section:
            raise SelectorConfigError(f"Control {path} needs an anchor locator")

        def optional_locator(key: str) -> LocatorSpec | None:
            return self.locator(f"{path}.{key}") if key in section else None

        return ControlSpec(
            name=path,
            anchor=self.locator(f"{path}.anchor"),
            options=optional_locator("options"),
            items=optional_locator("items"),
            item_strategies=(
                tuple(self.locators(f"{path}.item_strategies"))
                if "item_strategies" in section else ()
            ),
            fallback_labels=(
                self.labels(f"{path}.fallback_labels") if "fallback_labels" in section else ()
            ),
            placeholders=(
                self.labels(f"{path}.placeholders") if "placeholders" in section else ()
            ),
        )
