"""Repository abstraction the resolver searches for installable units."""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from units.errors import ArtifactNotFound
from units.model import InstallableUnit, Requirement, ResolvedArtifacts
from units.version import Version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of searching one repository for a requirement.

    Exactly one of three states: ``unit`` is set (found), ``error`` is set
    (the repository could not be read), or neither (nothing matched).
    """
    source: "UnitSource"
    unit: Optional[InstallableUnit] = None
    error: Optional[ArtifactNotFound] = None

    @property
    def found(self) -> bool:
        return self.unit is not None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def reason(self) -> str:
        if self.error is not None:
            return str(self.error)
        if self.unit is None:
            return f"nothing in {self.source.describe()} provides it"
        return f"provided by {self.unit}"


class UnitSource(ABC):
    """Enumerable repository of installable units.

    Subclasses implement ``_load_units``; ``get_all_units`` memoizes the
    result under a lock so one source can serve concurrent resolution runs.
    Failed loads are not cached and will be retried on the next call.
    """

    def __init__(self):
        self._units: Optional[Tuple[InstallableUnit, ...]] = None
        self._lock = threading.Lock()

    @abstractmethod
    def _load_units(self) -> List[InstallableUnit]:
        """Read every unit of the repository; raise ArtifactNotFound on failure."""

    @abstractmethod
    def _identity(self) -> tuple:
        """Value that makes two instances denote the same repository."""

    @abstractmethod
    def describe(self) -> str:
        """Short human readable label used in diagnostics."""

    def get_all_units(self) -> Tuple[InstallableUnit, ...]:
        with self._lock:
            if self._units is None:
                units = self._load_units()
                self._units = tuple(units)
                if is_debug_enabled(logger):
                    logger.debug(
                        "Repository loaded",
                        extra=extra_context(
                            event="repository_loaded",
                            component="repository",
                            target=self.describe(),
                            count=len(self._units),
                        )
                    )
            return self._units

    def probe(self, requirement: Requirement) -> ProbeResult:
        """First unit, in enumeration order, providing a match for ``requirement``."""
        try:
            units = self.get_all_units()
        except ArtifactNotFound as exc:
            return ProbeResult(self, error=exc)
        for unit in units:
            for capability in unit.provided:
                if requirement.matches(capability):
                    return ProbeResult(self, unit=unit)
        return ProbeResult(self)

    def find_unit(self, unit_id: str, version=None) -> InstallableUnit:
        """Unit ``unit_id`` at ``version``, or its highest version when None.

        Raises:
            ArtifactNotFound: no such unit, or the repository cannot be read.
        """
        wanted = None if version is None else Version.parse(version)
        best = None
        for unit in self.get_all_units():
            if unit.id != unit_id:
                continue
            if wanted is not None:
                if unit.version == wanted:
                    return unit
                continue
            if best is None or unit.version > best.version:
                best = unit
        if best is None:
            label = unit_id if wanted is None else f"{unit_id}:{wanted}"
            raise ArtifactNotFound(f"can't find unit {label} in {self.describe()}")
        return best

    def resolve_artifacts(self, unit: InstallableUnit) -> ResolvedArtifacts:
        """Turn the declared artifacts of ``unit`` into located ones."""
        return ResolvedArtifacts.from_descriptors(unit.artifacts, lambda desc: desc.path)

    def __eq__(self, other) -> bool:
        if not isinstance(other, UnitSource):
            return NotImplemented
        return type(self) is type(other) and self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._identity()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.describe()})"
