"""Repository manifest parsing.

A manifest is a YAML (or JSON) document with a ``units`` list; see
``parse_units`` for the accepted entry shape. Documents that cannot be read
at all make the repository unavailable (``ArtifactNotFound``); entries that
are present but invalid are reported as ``MalformedSpec``.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import yaml

from constants import Classifiers, Constants
from units.errors import ArtifactNotFound, MalformedSpec
from units.model import ArtifactDescriptor, Capability, InstallableUnit, Requirement

logger = logging.getLogger(__name__)

_FLOAT_TAG = "tag:yaml.org,2002:float"


class _ManifestLoader(yaml.SafeLoader):
    """SafeLoader that leaves ``1.10`` style scalars as strings."""


_ManifestLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _FLOAT_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _parse_json(text: str, origin: str) -> Any:
    try:
        return json.loads(text, parse_float=str)
    except json.JSONDecodeError as exc:
        raise ArtifactNotFound(f"can't parse repository manifest {origin}: {exc}") from exc


def load_document(text: str, origin: str) -> Dict[str, Any]:
    """Parse manifest text; ``origin`` only appears in error messages.

    ``.json`` manifests are read as JSON; anything else as YAML, falling back
    to JSON when YAML rejects the text (tab indentation, for one).
    """
    if origin.lower().endswith(".json"):
        data = _parse_json(text, origin)
    else:
        try:
            data = yaml.load(text, Loader=_ManifestLoader)
        except yaml.YAMLError as exc:
            logger.debug("YAML parsing of %s failed, trying JSON: %s", origin, exc)
            try:
                data = json.loads(text, parse_float=str)
            except json.JSONDecodeError:
                raise ArtifactNotFound(f"can't parse repository manifest {origin}: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("units", []), list):
        raise ArtifactNotFound(f"repository manifest {origin} has no 'units' list")
    return data


def _flag(entry: Dict[str, Any], key: str, default: bool, where: str) -> bool:
    value = entry.get(key, default)
    if not isinstance(value, bool):
        raise MalformedSpec(f"{where}: '{key}' must be true or false, got {value!r}")
    return value


def _text(value: Any) -> Optional[str]:
    # unquoted 1 is an int
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def parse_requirement(entry: Any, where: str) -> Requirement:
    if isinstance(entry, str):
        entry = {"name": entry}
    if not isinstance(entry, dict):
        raise MalformedSpec(f"{where}: requirement must be a mapping, got {entry!r}")
    return Requirement(
        namespace=entry.get("namespace", Constants.IU_NAMESPACE),
        name=entry.get("name"),
        range=_text(entry.get("range")),
        optional=_flag(entry, "optional", False, where),
        greedy=_flag(entry, "greedy", True, where),
    )


def parse_capability(entry: Any, where: str) -> Capability:
    if not isinstance(entry, dict):
        raise MalformedSpec(f"{where}: capability must be a mapping, got {entry!r}")
    return Capability(
        namespace=entry.get("namespace", Constants.IU_NAMESPACE),
        name=entry.get("name"),
        version=_text(entry.get("version")),
    )


def parse_artifact(entry: Any, where: str) -> ArtifactDescriptor:
    if not isinstance(entry, dict):
        raise MalformedSpec(f"{where}: artifact must be a mapping, got {entry!r}")
    return ArtifactDescriptor(
        classifier=entry.get("classifier", Classifiers.BUNDLE.value),
        id=entry.get("id"),
        version=_text(entry.get("version")),
        path=entry.get("path"),
        fragment=_flag(entry, "fragment", False, where),
        singleton=_flag(entry, "singleton", False, where),
    )


def parse_units(document: Dict[str, Any], source) -> List[InstallableUnit]:
    """Build the units of ``document``, owned by ``source``, in declaration order."""
    units = []
    for index, entry in enumerate(document.get("units") or []):
        where = f"{source.describe()} unit #{index}"
        if not isinstance(entry, dict):
            raise MalformedSpec(f"{where}: expected a mapping, got {entry!r}")
        if "id" not in entry or "version" not in entry:
            raise MalformedSpec(f"{where}: 'id' and 'version' are required")
        where = f"{source.describe()} unit {entry['id']}"
        units.append(InstallableUnit(
            id=entry["id"],
            version=_text(entry["version"]),
            requirements=tuple(parse_requirement(r, where) for r in entry.get("requires") or []),
            provided=tuple(parse_capability(c, where) for c in entry.get("provides") or []),
            source=source,
            artifacts=tuple(parse_artifact(a, where) for a in entry.get("artifacts") or []),
        ))
    logger.debug("Parsed %d units from %s", len(units), source.describe())
    return units
