"""Operation catalog: the exhaustive dispatch table for operation kinds."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping

from batch_factory.core.domain.types import OperationKind

if TYPE_CHECKING:
    from batch_factory.core.config.scripts_config import ScriptsConfig


@dataclass(frozen=True, slots=True)
class OperationSpec:
    """Static description of one operation kind."""

    kind: OperationKind
    script: str


class OperationCatalog:
    """Maps every OperationKind to its executable identity.

    The catalog is exhaustive: construction fails if a kind is missing, so
    lookups never fall back to string matching.
    """

    def __init__(self, specs: Mapping[OperationKind, OperationSpec]) -> None:
        missing = [kind for kind in OperationKind if kind not in specs]
        if missing:
            raise ValueError(f"Operation catalog is missing kinds: {missing}")

        for kind, spec in specs.items():
            if spec.kind is not kind:
                raise ValueError(f"Spec for {kind.value} declares kind {spec.kind.value}")

        self._specs: dict[OperationKind, OperationSpec] = dict(specs)
        self._by_script: dict[str, OperationKind] = {
            spec.script: kind for kind, spec in self._specs.items()
        }
        if len(self._by_script) != len(self._specs):
            raise ValueError("Operation scripts must be distinct")

    @classmethod
    def from_scripts_config(cls, scripts: ScriptsConfig) -> OperationCatalog:
        return cls(
            {
                OperationKind.WEAKEN: OperationSpec(OperationKind.WEAKEN, scripts.weaken_script),
                OperationKind.GROW: OperationSpec(OperationKind.GROW, scripts.grow_script),
                OperationKind.HACK: OperationSpec(OperationKind.HACK, scripts.hack_script),
            }
        )

    def script_for(self, kind: OperationKind) -> str:
        return self._specs[kind].script

    def kind_for_script(self, script: str) -> OperationKind:
        """Reverse lookup used by backends that only see script names."""
        try:
            return self._by_script[script]
        except KeyError:
            raise KeyError(f"Unknown operation script: {script}") from None

    def scripts(self) -> list[str]:
        return [self._specs[kind].script for kind in OperationKind]
