from __future__ import annotations

"""Engine version comparison, detection and release lookup."""

import logging
import os
import re
import subprocess  # nosec B404
from typing import Any, Dict, Optional

import httpx

from ..config.exceptions import EngineError, ReleaseLookupError
from ..config.settings import (
    MIN_ENGINE_VERSION,
    RECOMMENDED_ENGINE_VERSION,
    RELEASE_LOOKUP_TIMEOUT,
)
from ..models.version import Version, VersionStatus

logger = logging.getLogger(__name__)

_ENGINE_VERSION_OUTPUT = re.compile(r"sing-box version (\d+\.\d+\.\d+(?:-[a-zA-Z0-9.]+)?)")
_RELEASE_TAG = re.compile(r"^v?\d+\.\d+\.\d+(?:-[a-zA-Z0-9.]+)?$")


def meets_minimum(current: Optional[str], minimum: Optional[str]) -> bool:
    """Returns True when `current` is at least `minimum`.

    Empty or unparsable input on either side is a failure (False), never an
    exception. A pre-release of X.Y.Z satisfies a minimum of X.Y.Z.
    """
    current_version = Version.parse(current)
    minimum_version = Version.parse(minimum)
    if current_version is None or minimum_version is None:
        return False
    return current_version >= minimum_version


def compare_versions(first: Optional[str], second: Optional[str]) -> Optional[int]:
    """Returns -1, 0 or 1 like a classic comparator, or None if either side is unparsable."""
    a, b = Version.parse(first), Version.parse(second)
    if a is None or b is None:
        return None
    return (a > b) - (a < b)


def lowest_version(first: str, second: str) -> Optional[str]:
    """Returns whichever input is the lower version (the first one on ties)."""
    order = compare_versions(first, second)
    if order is None:
        return None
    return second if order > 0 else first


def assess_engine_version(current: Optional[str]) -> VersionStatus:
    """Classifies an engine version against the minimum and recommended releases."""
    if Version.parse(current) is None:
        return VersionStatus.UNKNOWN
    if not meets_minimum(current, MIN_ENGINE_VERSION):
        return VersionStatus.UNSUPPORTED
    if not meets_minimum(current, RECOMMENDED_ENGINE_VERSION):
        return VersionStatus.SUPPORTED
    return VersionStatus.RECOMMENDED


def extract_engine_version(output: str) -> Optional[str]:
    """Pulls `X.Y.Z[-pre]` out of `sing-box version` output."""
    match = _ENGINE_VERSION_OUTPUT.search(output or "")
    return match.group(1) if match else None


class VersionMixin:
    """Engine version detection and release lookups."""

    def detect_engine_version(self) -> str:
        """Runs `sing-box version` and returns the reported version."""
        binary = self._which_singbox()
        try:
            completed = subprocess.run(  # nosec B603
                [binary, "version"],
                capture_output=True,
                text=True,
                timeout=10,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise EngineError(f"Failed to run '{binary} version': {exc}") from exc

        output = f"{completed.stdout}\n{completed.stderr}"
        version = extract_engine_version(output)
        if version is None:
            logger.debug("Unrecognized version output: %r", output[:200])
            raise EngineError(f"Could not parse the sing-box version from '{binary} version'.")
        return version

    def version_report(self, current: Optional[str]) -> Dict[str, Any]:
        """Summarizes how `current` relates to the supported engine releases."""
        status = assess_engine_version(current)
        parsed = Version.parse(current)
        return {
            "current": str(parsed) if parsed else "unknown",
            "minimum": MIN_ENGINE_VERSION,
            "recommended": RECOMMENDED_ENGINE_VERSION,
            "status": status,
        }

    async def _fetch_release_json(self, url: str) -> Any:
        headers = {"Accept": "application/vnd.github+json"}
        if token := os.environ.get("GITHUB_TOKEN"):
            headers["Authorization"] = f"token {token}"

        client = self.requests or httpx.AsyncClient()
        try:
            response = await client.get(url, headers=headers, timeout=RELEASE_LOOKUP_TIMEOUT)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            reason = str(exc).split("\n", 1)[0]
            raise ReleaseLookupError(f"Failed to fetch release information: {reason}") from exc
        except ValueError as exc:
            raise ReleaseLookupError("Release API returned invalid JSON.") from exc
        finally:
            if self.requests is None:
                await client.aclose()

    async def resolve_release_version(self, spec: str = "stable") -> str:
        """Resolves `stable`, `latest` or an explicit version to a `vX.Y.Z` tag."""
        value = (spec or "stable").strip()
        lowered = value.lower()
        base_url = self.releases_api_url.rstrip("/")

        if lowered == "stable":
            data = await self._fetch_release_json(f"{base_url}/latest")
            tag = data.get("tag_name") if isinstance(data, dict) else None
        elif lowered == "latest":
            data = await self._fetch_release_json(base_url)
            tag = data[0].get("tag_name") if isinstance(data, list) and data and isinstance(data[0], dict) else None
        elif _RELEASE_TAG.match(value):
            tag = value if value.startswith("v") else f"v{value}"
        else:
            raise ReleaseLookupError(
                f"Invalid version specifier: {value} "
                "(expected stable, latest, X.Y.Z or vX.Y.Z[-pre])"
            )

        if not isinstance(tag, str) or not _RELEASE_TAG.match(tag):
            raise ReleaseLookupError("Failed to parse version from API response.")
        return tag

    async def check_for_update(self, current: str, spec: str = "stable") -> Dict[str, Any]:
        """Compares the installed version with the resolved release."""
        target = await self.resolve_release_version(spec)
        return {
            "current": current,
            "available": target,
            "update_available": not meets_minimum(current, target),
        }
