"""Installable unit model and resolver."""

from .errors import (
    ArtifactNotFound,
    MalformedSpec,
    RepositoryUnavailable,
    UnitResolveError,
    UnresolvedRequirement,
)
from .model import (
    ArtifactDescriptor,
    BundleArtifact,
    Capability,
    FeatureArtifact,
    IncludeMode,
    InstallableUnit,
    Requirement,
    ResolvedArtifacts,
)
from .resolver import ResolutionResult, UnitResolver, resolve
from .version import Version, VersionRange

__all__ = [
    "ArtifactDescriptor",
    "ArtifactNotFound",
    "BundleArtifact",
    "Capability",
    "FeatureArtifact",
    "IncludeMode",
    "InstallableUnit",
    "MalformedSpec",
    "RepositoryUnavailable",
    "Requirement",
    "ResolutionResult",
    "ResolvedArtifacts",
    "UnitResolveError",
    "UnitResolver",
    "UnresolvedRequirement",
    "Version",
    "VersionRange",
    "resolve",
]
