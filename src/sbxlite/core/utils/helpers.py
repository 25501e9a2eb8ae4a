from __future__ import annotations

"""Utility functions shared between the manager mixins."""

import os
import shutil
from pathlib import Path
from typing import Any, Optional

from ..config.exceptions import EngineError


class UtilityMixin:
    """Helper routines that don't depend on complex state."""

    @staticmethod
    def _safe_int(value: Any) -> Optional[int]:
        """Safely converts a value to int, returning None on failure."""
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _shutil_which(cmd: str) -> Optional[str]:
        """Wrapper for shutil.which for compatibility and robustness."""
        return shutil.which(cmd)

    def _which_singbox(self) -> str:
        """Discovers the sing-box binary, prioritizing the SINGBOX_PATH environment variable."""
        if env_path := os.environ.get("SINGBOX_PATH"):
            if Path(env_path).is_file():
                return env_path

        if found := self._shutil_which("sing-box"):
            return found

        if self.engine_binary and Path(self.engine_binary).is_file():
            return self.engine_binary

        raise EngineError(
            "sing-box binary not found. "
            "Install sing-box or set the SINGBOX_PATH environment variable."
        )

    @staticmethod
    def _format_destination(host: Optional[str], port: Optional[int]) -> str:
        """Formats 'host:port' for user-friendly display."""
        if not host or host == "-":
            return "-"
        return f"{host}:{port}" if port else host
