"""Exception types raised while reading repositories and resolving units."""

from typing import Optional


class UnitResolveError(Exception):
    """Base class for every error raised by the resolver and repositories."""


class MalformedSpec(UnitResolveError, ValueError):
    """A version, range, capability or requirement could not be constructed."""


class ArtifactNotFound(UnitResolveError):
    """A repository or unit could not produce the requested data."""


class UnresolvedRequirement(ArtifactNotFound):
    """No repository could satisfy a mandatory requirement.

    Args:
        path: breadcrumb from the requested unit to the unit owning the requirement.
        requirement: the requirement that could not be satisfied.
    """

    def __init__(self, path: str, requirement, message: Optional[str] = None):
        self.path = path
        self.requirement = requirement
        super().__init__(message or f"can't resolve {path} -> {requirement.id} -> ???")


class RepositoryUnavailable(ArtifactNotFound):
    """A repository could not be reached at all (network or file system)."""
