"""Repository read from a folder (or manifest file) on the local file system."""
from __future__ import annotations

import logging
import os
from typing import List

from constants import Constants
from units.errors import ArtifactNotFound, RepositoryUnavailable
from units.model import InstallableUnit, ResolvedArtifacts

from .base import UnitSource
from .manifest import load_document, parse_units

logger = logging.getLogger(__name__)


class LocalUnitSource(UnitSource):
    """Units listed in ``units.yaml``/``units.yml``/``units.json`` of a folder.

    Artifact paths are relative to the folder holding the manifest and must
    exist when a unit's artifacts are resolved.
    """

    def __init__(self, path: str, name: str = None):
        super().__init__()
        self.path = os.path.abspath(path)
        self.name = name

    @property
    def root(self) -> str:
        if os.path.isfile(self.path):
            return os.path.dirname(self.path)
        return self.path

    def manifest_path(self) -> str:
        if os.path.isfile(self.path):
            return self.path
        if not os.path.isdir(self.path):
            raise RepositoryUnavailable(f"repository folder {self.path} does not exist")
        for candidate in Constants.MANIFEST_FILES:
            manifest = os.path.join(self.path, candidate)
            if os.path.isfile(manifest):
                return manifest
        raise ArtifactNotFound(
            f"no repository manifest ({', '.join(Constants.MANIFEST_FILES)}) in {self.path}"
        )

    def _load_units(self) -> List[InstallableUnit]:
        manifest = self.manifest_path()
        logger.debug("Reading repository manifest %s", manifest)
        try:
            with open(manifest, encoding="utf-8") as file:
                text = file.read()
        except OSError as exc:
            raise ArtifactNotFound(f"can't read repository manifest {manifest}: {exc}") from exc
        document = load_document(text, manifest)
        if self.name is None and isinstance(document.get("name"), str):
            self.name = document["name"]
        return parse_units(document, self)

    def resolve_artifacts(self, unit: InstallableUnit) -> ResolvedArtifacts:
        root = self.root

        def locate(desc):
            location = os.path.normpath(os.path.join(root, desc.path))
            if not os.path.exists(location):
                raise ArtifactNotFound(
                    f"artifact {desc.id}:{desc.version} of unit {unit} not found at {location}"
                )
            return location

        return ResolvedArtifacts.from_descriptors(unit.artifacts, locate)

    def _identity(self) -> tuple:
        return (self.path,)

    def describe(self) -> str:
        if self.name:
            return f"{self.name}@{self.path}"
        return self.path
