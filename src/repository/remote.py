"""Repository whose manifest is served over HTTP(S)."""
from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import urljoin

from common import http_client
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from units.errors import ArtifactNotFound, RepositoryUnavailable
from units.model import InstallableUnit, ResolvedArtifacts

from .base import UnitSource
from .manifest import load_document, parse_units

logger = logging.getLogger(__name__)


class RemoteUnitSource(UnitSource):
    """Units listed in a manifest at ``url``.

    Artifact paths are resolved against the manifest URL; nothing is
    downloaded, so artifact resolution never touches the network.
    """

    def __init__(self, url: str, name: Optional[str] = None):
        super().__init__()
        self.url = url
        self.name = name

    def _load_units(self) -> List[InstallableUnit]:
        target = safe_url(self.url)
        logger.info("Loading repository %s...", target)
        with Timer() as timer:
            status, _, text = http_client.robust_get(
                self.url, headers={"Accept": "application/json, application/yaml, text/yaml"}
            )
        if is_debug_enabled(logger):
            logger.debug(
                "Repository manifest fetched",
                extra=extra_context(
                    event="repository_fetch",
                    component="remote_repository",
                    status_code=status,
                    duration_ms=timer.duration_ms(),
                    target=target,
                )
            )
        if status == 0:
            raise RepositoryUnavailable(f"repository {target} is unreachable: {text}")
        if status != 200:
            raise ArtifactNotFound(f"repository {target} answered with HTTP {status}")
        document = load_document(text, target)
        if self.name is None and isinstance(document.get("name"), str):
            self.name = document["name"]
        return parse_units(document, self)

    def resolve_artifacts(self, unit: InstallableUnit) -> ResolvedArtifacts:
        return ResolvedArtifacts.from_descriptors(
            unit.artifacts, lambda desc: urljoin(self.url, desc.path)
        )

    def _identity(self) -> tuple:
        return (self.url,)

    def describe(self) -> str:
        if self.name:
            return f"{self.name}@{safe_url(self.url)}"
        return safe_url(self.url)
