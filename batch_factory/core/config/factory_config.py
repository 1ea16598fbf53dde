"""Top-level factory configuration.

Aggregates the script, planner and controller sections. Two JSON forms
are accepted:

- the structured form (``{"scripts": {...}, "planner": {...}, "controller": {...}}``)
- the legacy flat form used by existing ``config.json`` files
  (``weakenScriptName``, ``defaultMoneyThreshold``, ``homeRamBuffer``, ...)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from batch_factory.core.config.controller_config import ControllerConfig
from batch_factory.core.config.planner_config import PlannerConfig
from batch_factory.core.config.scripts_config import ScriptsConfig

# Legacy flat key -> (section, field)
_LEGACY_KEYS: dict[str, tuple[str, str]] = {
    "weakenScriptName": ("scripts", "weaken_script"),
    "growScriptName": ("scripts", "grow_script"),
    "hackScriptName": ("scripts", "hack_script"),
    "defaultMoneyThreshold": ("controller", "money_threshold"),
    "defaultSecurityThreshold": ("controller", "security_threshold"),
    "homeRamBuffer": ("controller", "primary_host_ram_reserve"),
}


class FactoryConfig(BaseModel):
    """Structured configuration for one factory process."""

    scripts: ScriptsConfig = Field(default_factory=ScriptsConfig)
    planner: PlannerConfig = Field(default_factory=PlannerConfig)
    controller: ControllerConfig = Field(default_factory=ControllerConfig)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, factory_obj: dict[str, Any]) -> FactoryConfig:
        """Create a FactoryConfig instance from a JSON-compatible object."""
        return cls.model_validate(factory_obj)

    @classmethod
    def from_legacy_json(cls, legacy_obj: dict[str, Any]) -> FactoryConfig:
        """Create a FactoryConfig from the legacy flat camelCase document.

        Unknown legacy keys (server database names, purchase settings, ...)
        belong to other tools and are ignored.
        """
        sections: dict[str, dict[str, Any]] = {
            "scripts": {},
            "planner": {},
            "controller": {},
        }
        for key, value in legacy_obj.items():
            target = _LEGACY_KEYS.get(key)
            if target is None:
                continue
            section, field_name = target
            sections[section][field_name] = value

        return cls.model_validate(sections)

    @classmethod
    def from_path(cls, path: str | Path) -> FactoryConfig:
        """Load either JSON form from a file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)

        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a JSON object")

        if any(key in data for key in _LEGACY_KEYS):
            return cls.from_legacy_json(data)
        return cls.from_json_obj(data)
