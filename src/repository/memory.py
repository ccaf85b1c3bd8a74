"""Repository holding units registered programmatically."""
from __future__ import annotations

from typing import Iterable, List

from units.model import ArtifactDescriptor, Capability, InstallableUnit, Requirement

from .base import UnitSource


class MemoryUnitSource(UnitSource):
    """Units added with ``add_unit``; enumeration follows insertion order."""

    def __init__(self, name: str):
        super().__init__()
        self.name = name
        self._declared: List[InstallableUnit] = []

    def add_unit(
        self,
        unit_id: str,
        version,
        requirements: Iterable[Requirement] = (),
        provided: Iterable[Capability] = (),
        artifacts: Iterable[ArtifactDescriptor] = (),
    ) -> InstallableUnit:
        """Create a unit owned by this repository and register it."""
        unit = InstallableUnit(
            id=unit_id,
            version=version,
            requirements=tuple(requirements),
            provided=tuple(provided),
            source=self,
            artifacts=tuple(artifacts),
        )
        with self._lock:
            self._declared.append(unit)
            self._units = None
        return unit

    def _load_units(self) -> List[InstallableUnit]:
        return list(self._declared)

    def _identity(self) -> tuple:
        return (self.name,)

    def describe(self) -> str:
        return self.name
