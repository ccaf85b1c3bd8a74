"""OSGi style versions and version ranges.

A version is ``major[.minor[.micro[.qualifier]]]``. A range is either interval
notation (``[1.0,2.0)``, ``(1.0,2.0]`` ...) or a bare version meaning "that
version or higher"; an empty range accepts every version.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .errors import MalformedSpec

_QUALIFIER = re.compile(r"^[A-Za-z0-9_-]*$")


@dataclass(frozen=True, order=True)
class Version:
    """Comparable OSGi version."""
    major: int = 0
    minor: int = 0
    micro: int = 0
    qualifier: str = ""

    def __post_init__(self):
        for name in ("major", "minor", "micro"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise MalformedSpec(f"invalid {name} version component: {value!r}")
        if not _QUALIFIER.match(self.qualifier):
            raise MalformedSpec(f"invalid version qualifier: {self.qualifier!r}")

    @classmethod
    def parse(cls, text) -> "Version":
        """Parse ``text``; ``None`` and blank strings give ``0.0.0``."""
        if isinstance(text, Version):
            return text
        if text is None:
            return cls()
        if not isinstance(text, (str, int, float)):
            raise MalformedSpec(f"invalid version: {text!r}")
        raw = str(text).strip()
        if not raw:
            return cls()
        parts = raw.split(".", 3)
        numbers = []
        for part in parts[:3]:
            if not part.isdigit():
                raise MalformedSpec(f"invalid version: {raw!r}")
            numbers.append(int(part))
        while len(numbers) < 3:
            numbers.append(0)
        qualifier = parts[3] if len(parts) > 3 else ""
        if len(parts) > 3 and not qualifier:
            raise MalformedSpec(f"invalid version: {raw!r}")
        return cls(numbers[0], numbers[1], numbers[2], qualifier)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.micro}"
        return f"{base}.{self.qualifier}" if self.qualifier else base


EMPTY_VERSION = Version()


@dataclass(frozen=True)
class VersionRange:
    """Interval of versions; ``maximum`` of None means unbounded."""
    minimum: Version = EMPTY_VERSION
    include_minimum: bool = True
    maximum: Optional[Version] = None
    include_maximum: bool = False

    def __post_init__(self):
        if self.maximum is not None:
            if self.minimum > self.maximum:
                raise MalformedSpec(f"empty version range: {self}")
            if self.minimum == self.maximum and not (self.include_minimum and self.include_maximum):
                raise MalformedSpec(f"empty version range: {self}")

    @classmethod
    def parse(cls, text) -> "VersionRange":
        """Parse interval notation or a bare minimum version."""
        if isinstance(text, VersionRange):
            return text
        if text is None:
            return ANY_VERSION
        if not isinstance(text, (str, int, float)):
            raise MalformedSpec(f"invalid version range: {text!r}")
        raw = str(text).strip()
        if not raw:
            return ANY_VERSION
        if raw[0] not in "[(":
            return cls(minimum=Version.parse(raw))
        if raw[-1] not in "])" or "," not in raw:
            raise MalformedSpec(f"invalid version range: {raw!r}")
        lower, _, upper = raw[1:-1].partition(",")
        if "," in upper:
            raise MalformedSpec(f"invalid version range: {raw!r}")
        return cls(
            minimum=Version.parse(lower),
            include_minimum=raw[0] == "[",
            maximum=Version.parse(upper) if upper.strip() else None,
            include_maximum=raw[-1] == "]",
        )

    @classmethod
    def exact(cls, version) -> "VersionRange":
        """Range containing exactly ``version``."""
        v = Version.parse(version)
        return cls(minimum=v, include_minimum=True, maximum=v, include_maximum=True)

    def includes(self, version: Version) -> bool:
        if self.include_minimum:
            if version < self.minimum:
                return False
        elif version <= self.minimum:
            return False
        if self.maximum is None:
            return True
        if self.include_maximum:
            return version <= self.maximum
        return version < self.maximum

    def __str__(self) -> str:
        if self.maximum is None and self.include_minimum:
            return str(self.minimum)
        left = "[" if self.include_minimum else "("
        right = "]" if self.include_maximum else ")"
        upper = "" if self.maximum is None else str(self.maximum)
        return f"{left}{self.minimum},{upper}{right}"


ANY_VERSION = VersionRange()
