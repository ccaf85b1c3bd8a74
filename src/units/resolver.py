"""Transitive resolution of installable units across repositories.

The resolver walks the requirement graph depth first, in declaration order
for requirements, configured order for repositories and enumeration order for
units inside a repository. The first provider found wins; there is no
backtracking and no ranking of alternative providers.

A requirement is searched in the repository of the unit declaring it first.
When that repository has no answer the mode decides what happens: ``SLICE``
records the requirement as failed and moves on, a non-greedy optional
requirement is dropped, anything else falls back to the remaining
repositories. A mandatory requirement nobody provides raises
``UnresolvedRequirement`` and aborts the run.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from common.logging_utils import extra_context, is_debug_enabled, Timer

from .aggregator import ArtifactAggregator, BundleCollection, FeatureCollection, UnitCollection
from .errors import ArtifactNotFound, UnresolvedRequirement
from .model import IncludeMode, InstallableUnit, Requirement
from .state import ResolutionState

logger = logging.getLogger(__name__)


@dataclass
class ResolutionResult:
    """What a resolution run produced."""
    mode: IncludeMode
    bundles: BundleCollection
    features: FeatureCollection
    units: UnitCollection
    failed_requirements: Tuple[Requirement, ...] = ()


@dataclass
class _Frame:
    unit: InstallableUnit
    path: str
    pending: Iterator[Requirement] = field(repr=False)


def unit_to_path(unit: InstallableUnit) -> str:
    """Breadcrumb label of ``unit``: its id plus the repository it came from."""
    if unit.source is None:
        return unit.id
    return f"{unit.id}[{unit.source.describe()}]"


class UnitResolver:
    """Resolves units against an ordered list of repositories.

    One instance performs one run; its state and aggregator are never shared.
    """

    def __init__(self, repositories: Sequence, mode: IncludeMode = IncludeMode.FULL):
        self.repositories = list(repositories)
        self.mode = IncludeMode.parse(mode)
        self.state = ResolutionState()
        self.aggregator = ArtifactAggregator()

    def resolve(self, units: Iterable[InstallableUnit]) -> ResolutionResult:
        """Resolve every unit of ``units`` and their transitive requirements.

        Raises:
            UnresolvedRequirement: a mandatory requirement has no provider.
            ArtifactNotFound: a unit's artifacts could not be materialized
                (``FULL`` mode only).
        """
        with Timer() as timer:
            for unit in units:
                self.resolve_unit(unit, unit_to_path(unit))
        if is_debug_enabled(logger):
            logger.debug(
                "Resolution finished",
                extra=extra_context(
                    event="function_exit",
                    component="resolver",
                    action="resolve",
                    mode=self.mode.value,
                    units=len(self.aggregator.units),
                    bundles=len(self.aggregator.bundles),
                    features=len(self.aggregator.features),
                    failed=len(self.state.failed_requirements),
                    duration_ms=timer.duration_ms(),
                )
            )
        return ResolutionResult(
            mode=self.mode,
            bundles=self.aggregator.bundles,
            features=self.aggregator.features,
            units=self.aggregator.units,
            failed_requirements=tuple(self.state.failed_requirements),
        )

    def resolve_unit(self, unit: InstallableUnit, path: str) -> None:
        """Visit ``unit`` and everything it transitively requires."""
        stack: List[_Frame] = []
        self._enter(unit, path, stack)
        while stack:
            frame = stack[-1]
            requirement = next(frame.pending, None)
            if requirement is None:
                stack.pop()
                continue
            if self.state.is_resolved(requirement):
                logger.debug("Skip %s because it is already resolved...", requirement)
                continue
            if self.state.is_failed(requirement):
                logger.debug("Skip %s because it has already failed...", requirement)
                continue
            logger.debug("Try to resolve %s...", requirement)
            provider = self.resolve_requirement(requirement, frame.unit, frame.path)
            if provider is not None:
                self.state.add_resolved(requirement)
                self._enter(
                    provider,
                    f"{frame.path} -> {requirement.id} -> {unit_to_path(provider)}",
                    stack,
                )

    def _enter(self, unit: InstallableUnit, path: str, stack: List[_Frame]) -> None:
        if self.aggregator.contains_unit(unit) or self.state.contains_unit(unit):
            logger.debug("Skip resolving of %s, already resolved or resolving in progress...", unit)
            return
        self.state.add_unit(unit)
        self.aggregator.add_unit(unit)
        logger.info("Resolve %s...", unit)
        self._add_artifacts(unit)
        stack.append(_Frame(unit, path, iter(unit.requirements)))

    def resolve_requirement(
        self, requirement: Requirement, unit: InstallableUnit, path: str
    ) -> Optional[InstallableUnit]:
        """Find the provider of ``requirement`` declared by ``unit``.

        Returns None when the requirement is dropped (slice mode, optional).
        """
        primary = unit.source
        if primary is not None:
            result = primary.probe(requirement)
            if result.found:
                return result.unit
            if self.mode is IncludeMode.SLICE:
                logger.debug(
                    "Failed to resolve %s (%s), ignore because of slice mode...",
                    requirement, result.reason(),
                )
                self.state.add_failed(requirement)
                return None
            if requirement.optional and not requirement.greedy:
                logger.debug(
                    "Failed to resolve optional %s (%s), ignore because of non greedy...",
                    requirement, result.reason(),
                )
                return None
        for source in self.repositories:
            if source == primary:
                continue
            result = source.probe(requirement)
            if result.found:
                logger.debug("Resolved %s from fallback repository %s", requirement, source.describe())
                return result.unit
            if result.failed:
                logger.debug("Skip repository %s: %s", source.describe(), result.error)
        if requirement.optional:
            logger.debug("Ignore %s because it is optional and can't be resolved...", requirement)
            return None
        if self.mode is IncludeMode.SLICE:
            # Requested units without an owning repository land here
            logger.debug("Failed to resolve %s, ignore because of slice mode...", requirement)
            self.state.add_failed(requirement)
            return None
        raise UnresolvedRequirement(path, requirement)

    def _add_artifacts(self, unit: InstallableUnit) -> None:
        try:
            artifacts = unit.resolve_artifacts()
        except ArtifactNotFound as exc:
            if self.mode is not IncludeMode.SLICE:
                raise
            logger.warning("Skipping artifacts of %s: %s", unit, exc)
            return
        for bundle in artifacts.bundles:
            if self.aggregator.add_bundle(bundle):
                logger.debug("Resolve bundle %s:%s...", bundle.id, bundle.version)
        for feature in artifacts.features:
            if self.aggregator.add_feature(feature):
                logger.debug("Resolve feature %s:%s...", feature.id, feature.version)


def resolve(
    repositories: Sequence,
    mode: IncludeMode,
    requested_units: Iterable[InstallableUnit],
) -> ResolutionResult:
    """Resolve ``requested_units`` against ``repositories`` in one fresh run."""
    return UnitResolver(repositories, mode).resolve(requested_units)
