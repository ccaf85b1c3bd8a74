"""Bookkeeping for a single resolution run."""

import logging
from typing import Dict, List, Set, Tuple

from .model import InstallableUnit, Requirement

logger = logging.getLogger(__name__)


class ResolutionState:
    """Visited units plus the terminal outcome of every requirement seen so far.

    Every operation is idempotent. A requirement is never both resolved and
    failed: once resolved it stays resolved, and a failed one is promoted when
    a later path resolves it.
    """

    def __init__(self):
        self._units: Dict[InstallableUnit, None] = {}
        self._resolved: Set[Tuple] = set()
        self._failed: Dict[Tuple, Requirement] = {}

    def contains_unit(self, unit: InstallableUnit) -> bool:
        return unit in self._units

    def add_unit(self, unit: InstallableUnit) -> bool:
        """Mark ``unit`` visited; False if it already was."""
        if unit in self._units:
            return False
        self._units[unit] = None
        for key, requirement in list(self._failed.items()):
            if any(requirement.matches(capability) for capability in unit.provided):
                logger.debug("Promoting %s, provided by %s", requirement, unit)
                del self._failed[key]
                self._resolved.add(key)
        return True

    def is_resolved(self, requirement: Requirement) -> bool:
        """True once ``requirement`` was resolved or a visited unit satisfies it."""
        if requirement.key in self._resolved:
            return True
        return any(
            requirement.matches(capability)
            for unit in self._units
            for capability in unit.provided
        )

    def is_failed(self, requirement: Requirement) -> bool:
        return requirement.key in self._failed

    def add_resolved(self, requirement: Requirement) -> None:
        self._failed.pop(requirement.key, None)
        self._resolved.add(requirement.key)

    def add_failed(self, requirement: Requirement) -> None:
        if self.is_resolved(requirement):
            logger.debug("Not marking %s as failed, it is already resolved", requirement)
            return
        self._failed.setdefault(requirement.key, requirement)

    @property
    def units(self) -> List[InstallableUnit]:
        return list(self._units)

    @property
    def failed_requirements(self) -> List[Requirement]:
        return list(self._failed.values())
