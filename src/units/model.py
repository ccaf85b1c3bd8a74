"""Data models for installable units, their capabilities and requirements."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Tuple

from constants import Classifiers, Constants

from .errors import MalformedSpec
from .version import ANY_VERSION, Version, VersionRange


class IncludeMode(Enum):
    """How strictly requirements are followed during resolution."""
    FULL = "full"
    SLICE = "slice"

    @classmethod
    def parse(cls, value) -> "IncludeMode":
        if isinstance(value, IncludeMode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise MalformedSpec(f"unknown include mode: {value!r}") from None


def _require_text(value, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise MalformedSpec(f"{what} must be a non-empty string, got {value!r}")
    return value.strip()


@dataclass(frozen=True)
class Capability:
    """Something a unit provides: a name and version inside a namespace."""
    namespace: str
    name: str
    version: Version = field(default_factory=Version)

    def __post_init__(self):
        object.__setattr__(self, "namespace", _require_text(self.namespace, "capability namespace"))
        object.__setattr__(self, "name", _require_text(self.name, "capability name"))
        object.__setattr__(self, "version", Version.parse(self.version))

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}/{self.version}"


@dataclass(frozen=True)
class Requirement:
    """A query for a capability.

    ``optional`` requirements never fail their unit; ``greedy`` ones are still
    searched for even when optional.
    """
    namespace: str
    name: str
    range: VersionRange = ANY_VERSION
    optional: bool = False
    greedy: bool = True

    def __post_init__(self):
        object.__setattr__(self, "namespace", _require_text(self.namespace, "requirement namespace"))
        object.__setattr__(self, "name", _require_text(self.name, "requirement name"))
        object.__setattr__(self, "range", VersionRange.parse(self.range))
        for flag in ("optional", "greedy"):
            if not isinstance(getattr(self, flag), bool):
                raise MalformedSpec(f"requirement {self.name}: {flag} must be a boolean")

    @property
    def id(self) -> str:
        return self.name

    @property
    def key(self) -> Tuple[str, str, VersionRange]:
        """Identity used to memoize outcomes across a resolution run."""
        return (self.namespace, self.name, self.range)

    def matches(self, capability: Capability) -> bool:
        return (
            capability.namespace == self.namespace
            and capability.name == self.name
            and self.range.includes(capability.version)
        )

    def __str__(self) -> str:
        flags = ""
        if self.optional:
            flags = " (optional)" if self.greedy else " (optional, non-greedy)"
        return f"{self.namespace}/{self.name}/{self.range}{flags}"


@dataclass(frozen=True)
class ArtifactDescriptor:
    """An artifact as declared in a repository, before it is located."""
    classifier: str
    id: str
    version: Version
    path: str
    fragment: bool = False
    singleton: bool = False

    def __post_init__(self):
        classifiers = [c.value for c in Classifiers]
        if self.classifier not in classifiers:
            raise MalformedSpec(
                f"artifact {self.id}: classifier must be one of {classifiers}, got {self.classifier!r}"
            )
        object.__setattr__(self, "id", _require_text(self.id, "artifact id"))
        object.__setattr__(self, "version", Version.parse(self.version))
        object.__setattr__(self, "path", _require_text(self.path, f"artifact {self.id} path"))


@dataclass(frozen=True)
class BundleArtifact:
    id: str
    version: Version
    location: str
    fragment: bool = False
    singleton: bool = False


@dataclass(frozen=True)
class FeatureArtifact:
    id: str
    version: Version
    location: str


@dataclass(frozen=True)
class ResolvedArtifacts:
    """The concrete bundles and features a unit turned into."""
    bundles: Tuple[BundleArtifact, ...] = ()
    features: Tuple[FeatureArtifact, ...] = ()

    @classmethod
    def from_descriptors(cls, descriptors, locate: Callable[[ArtifactDescriptor], str]) -> "ResolvedArtifacts":
        """Split descriptors by classifier, turning each path into a location."""
        bundles = []
        features = []
        for desc in descriptors:
            location = locate(desc)
            if desc.classifier == Classifiers.FEATURE.value:
                features.append(FeatureArtifact(desc.id, desc.version, location))
            else:
                bundles.append(BundleArtifact(desc.id, desc.version, location, desc.fragment, desc.singleton))
        return cls(tuple(bundles), tuple(features))


@dataclass(frozen=True, eq=False)
class InstallableUnit:
    """A versioned node of the dependency graph.

    Units compare equal by (id, version, source). Every unit provides its own
    identity in the installable-unit namespace in addition to ``provided``.
    """
    id: str
    version: Version
    requirements: Tuple[Requirement, ...] = ()
    provided: Tuple[Capability, ...] = ()
    source: Optional[object] = None
    artifacts: Tuple[ArtifactDescriptor, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "id", _require_text(self.id, "unit id"))
        object.__setattr__(self, "version", Version.parse(self.version))
        object.__setattr__(self, "requirements", tuple(self.requirements))
        object.__setattr__(self, "artifacts", tuple(self.artifacts))
        identity = Capability(Constants.IU_NAMESPACE, self.id, self.version)
        provided = tuple(self.provided)
        if identity not in provided:
            provided = (identity,) + provided
        object.__setattr__(self, "provided", provided)

    def resolve_artifacts(self) -> ResolvedArtifacts:
        """Materialize the bundles and features of this unit.

        Raises:
            ArtifactNotFound: the backing content cannot be located.
        """
        if self.source is None:
            return ResolvedArtifacts.from_descriptors(self.artifacts, lambda d: d.path)
        return self.source.resolve_artifacts(self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, InstallableUnit):
            return NotImplemented
        return (self.id, self.version, self.source) == (other.id, other.version, other.source)

    def __hash__(self) -> int:
        return hash((self.id, self.version, self.source))

    def __str__(self) -> str:
        return f"{self.id}:{self.version}"
