"""Executable identity configuration for the three operation kinds."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ScriptsConfig(BaseModel):
    """Script names launched for each operation kind.

    ``payload_files`` lists additional files that must be present on the
    executing host next to the scripts (copied by the dispatcher).
    """

    weaken_script: str = Field(default="weaken.js", min_length=1)
    grow_script: str = Field(default="grow.js", min_length=1)
    hack_script: str = Field(default="hack.js", min_length=1)

    payload_files: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, scripts_obj: dict[str, Any]) -> ScriptsConfig:
        """Create a ScriptsConfig instance from a JSON-compatible object."""
        return cls.model_validate(scripts_obj)

    @model_validator(mode="after")
    def validate_distinct_scripts(self) -> ScriptsConfig:
        """Each operation kind must map to its own script."""
        names = {self.weaken_script, self.grow_script, self.hack_script}
        if len(names) != 3:
            raise ValueError("weaken_script, grow_script and hack_script must be distinct")
        return self
