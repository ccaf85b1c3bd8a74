"""Unit repositories: in-memory, local folder and remote manifest variants."""

from .base import ProbeResult, UnitSource
from .local import LocalUnitSource
from .memory import MemoryUnitSource
from .remote import RemoteUnitSource


def open_repository(location: str, name: str = None) -> UnitSource:
    """Repository for ``location``: remote for http(s) URLs, local otherwise."""
    if location.lower().startswith(("http://", "https://")):
        return RemoteUnitSource(location, name=name)
    return LocalUnitSource(location, name=name)


__all__ = [
    "LocalUnitSource",
    "MemoryUnitSource",
    "ProbeResult",
    "RemoteUnitSource",
    "UnitSource",
    "open_repository",
]
