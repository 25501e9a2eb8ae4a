from __future__ import annotations

"""Engine version value type."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

_NUMERIC_CORE = re.compile(r"^\d+(?:\.\d+){0,2}$")


@dataclass(frozen=True, order=True)
class Version:
    """A parsed ``major.minor.patch`` version.

    Ordering and equality only look at the numeric triple; the pre-release tag
    is kept for display, so ``1.12.0-beta.1`` compares equal to ``1.12.0``.
    """

    major: int
    minor: int = 0
    patch: int = 0
    prerelease: Optional[str] = field(default=None, compare=False)

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["Version"]:
        """Parses a version string, returning None when it is not a version.

        Accepts one leading tag character (``v1.2.3``), one to three numeric
        components, a ``-<prerelease>`` suffix and ``+<build>`` metadata.
        """
        if not text:
            return None
        value = text.strip()
        if value and not value[0].isdigit():
            value = value[1:]
        if not value:
            return None

        value = value.split("+", 1)[0]
        core, _, prerelease = value.partition("-")
        if not _NUMERIC_CORE.match(core):
            return None

        parts = [int(p) for p in core.split(".")]
        parts.extend([0] * (3 - len(parts)))
        return cls(parts[0], parts[1], parts[2], prerelease or None)

    @property
    def triple(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.prerelease}" if self.prerelease else base


class VersionStatus(str, Enum):
    """Compatibility of an installed engine with the generated configuration."""

    UNKNOWN = "UNKNOWN"
    UNSUPPORTED = "UNSUPPORTED"
    SUPPORTED = "SUPPORTED"
    RECOMMENDED = "RECOMMENDED"
