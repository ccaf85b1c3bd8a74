"""Deduplicated collections of resolved bundles, features and units."""

from typing import Dict, Generic, Iterator, Optional, Tuple, TypeVar

from .model import BundleArtifact, FeatureArtifact, InstallableUnit
from .version import Version, VersionRange

T = TypeVar("T")


class ArtifactCollection(Generic[T]):
    """Insertion-ordered set of items keyed by (id, version)."""

    def __init__(self):
        self._items: Dict[Tuple[str, Version], T] = {}

    def add(self, item: T) -> bool:
        """Add ``item``; returns False when an item with the same key is present."""
        key = (item.id, item.version)
        if key in self._items:
            return False
        self._items[key] = item
        return True

    def contains(self, item_id: str, version) -> bool:
        return (item_id, Version.parse(version)) in self._items

    def get(self, item_id: str, version) -> Optional[T]:
        return self._items.get((item_id, Version.parse(version)))

    def find(self, item_id: str, version_range=None) -> Optional[T]:
        """Highest version of ``item_id`` inside ``version_range`` (any when None)."""
        wanted = VersionRange.parse(version_range)
        best = None
        for (candidate_id, version), item in self._items.items():
            if candidate_id != item_id or not wanted.includes(version):
                continue
            if best is None or version > best[0]:
                best = (version, item)
        return best[1] if best else None

    def __contains__(self, item) -> bool:
        return (item.id, item.version) in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({[f'{i.id}:{i.version}' for i in self._items.values()]})"


class BundleCollection(ArtifactCollection[BundleArtifact]):
    pass


class FeatureCollection(ArtifactCollection[FeatureArtifact]):
    pass


class UnitCollection(ArtifactCollection[InstallableUnit]):
    """Units are keyed by (id, version) here, regardless of their source."""

    def contains_unit(self, unit: InstallableUnit) -> bool:
        return unit in self


class ArtifactAggregator:
    """Accumulates what every visited unit contributes to the result."""

    def __init__(self):
        self.bundles = BundleCollection()
        self.features = FeatureCollection()
        self.units = UnitCollection()

    def add_unit(self, unit: InstallableUnit) -> bool:
        return self.units.add(unit)

    def contains_unit(self, unit: InstallableUnit) -> bool:
        return self.units.contains_unit(unit)

    def add_bundle(self, bundle: BundleArtifact) -> bool:
        return self.bundles.add(bundle)

    def add_feature(self, feature: FeatureArtifact) -> bool:
        return self.features.add(feature)

