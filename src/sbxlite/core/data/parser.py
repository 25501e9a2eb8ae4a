from __future__ import annotations

"""Safe parsing of client info files into allow-listed records."""

import logging
import os
import re
from pathlib import Path
from typing import FrozenSet, List, Optional, Tuple, Union

from ..config.settings import ALLOWED_CLIENT_INFO_KEYS
from ..models.client_info import ClientInfoRecord, LoadErrorCode, LoadResult

logger = logging.getLogger(__name__)

_ASSIGNMENT = re.compile(r"^(?P<key>[A-Z0-9_]+)=(?P<value>.*)$", re.DOTALL)
_QUOTED = re.compile(r'^"(?P<inner>[^"]*)"[ \t]*$')

# Command substitution, command chaining and anything that can break a line
_SUSPICIOUS = re.compile(r"`|\$\(|\$\{|[;|&]|[\x00-\x08\x0a-\x1f\x7f]")
_UNQUOTED_FORBIDDEN: FrozenSet[str] = frozenset("\"'`$();|&<>\\")


class SafeKeyValueLoader:
    """Parses `KEY=value` / `KEY="value"` files without evaluating them.

    The file is treated as text only: nothing read from it is ever handed to a
    shell, `eval`, a template engine or a format string. The first problem
    found ends the load; there is no partial result.
    """

    def __init__(self, allowed_keys: Optional[FrozenSet[str]] = None) -> None:
        self.allowed_keys = frozenset(allowed_keys) if allowed_keys is not None else ALLOWED_CLIENT_INFO_KEYS

    def load(self, path: Union[str, os.PathLike]) -> LoadResult:
        """Reads and parses the file at `path`."""
        path = Path(path)
        if not path.exists():
            return LoadResult.failure(
                LoadErrorCode.UNREADABLE, str(path), f"Client info not found: {path}"
            )
        if not path.is_file():
            return LoadResult.failure(
                LoadErrorCode.UNREADABLE, str(path), f"Client info is not a regular file: {path}"
            )
        try:
            raw = path.read_bytes()
        except OSError as exc:
            logger.debug("Reading %s failed: %s", path, exc)
            return LoadResult.failure(
                LoadErrorCode.UNREADABLE, str(path), f"Unable to read client info: {path}"
            )
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            return LoadResult.failure(
                LoadErrorCode.UNREADABLE, str(path), f"Client info is not valid UTF-8: {path}"
            )
        return self.parse_text(text)

    def parse_text(self, text: str) -> LoadResult:
        """Parses already-read client info content."""
        items: List[Tuple[str, str]] = []
        for number, line in enumerate(text.split("\n"), start=1):
            if line.endswith("\r"):
                line = line[:-1]
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue

            result = self._parse_line(line, number)
            if isinstance(result, LoadResult):
                logger.warning(
                    "Client info rejected at line %d (%s)", number, result.error.code.value
                )
                return result
            items.append(result)

        return LoadResult.success(ClientInfoRecord(tuple(items)))

    def _parse_line(self, line: str, number: int) -> Union[Tuple[str, str], LoadResult]:
        """Returns the `(key, value)` pair of one assignment line, or the failure."""
        match = _ASSIGNMENT.match(line)
        if not match:
            return self._invalid_format(line, number)

        key, raw_value = match.group("key"), match.group("value")
        quoted = raw_value.startswith('"')
        if quoted:
            quoted_match = _QUOTED.match(raw_value)
            if not quoted_match:
                return self._invalid_format(line, number)
            value = quoted_match.group("inner")
        else:
            value = raw_value.rstrip(" \t")

        if key not in self.allowed_keys:
            return LoadResult.failure(
                LoadErrorCode.UNEXPECTED_KEY,
                key,
                f"Unexpected key '{key}' in client info",
                number,
            )

        if _SUSPICIOUS.search(value):
            return LoadResult.failure(
                LoadErrorCode.SUSPICIOUS_VALUE,
                key,
                f"Suspicious characters in value for {key}",
                number,
            )

        if not quoted and any(ch.isspace() or ch in _UNQUOTED_FORBIDDEN for ch in value):
            return LoadResult.failure(
                LoadErrorCode.INVALID_ENTRY,
                line,
                f"Invalid client info entry: {line}",
                number,
            )

        return key, value

    @staticmethod
    def _invalid_format(line: str, number: int) -> LoadResult:
        return LoadResult.failure(
            LoadErrorCode.INVALID_FORMAT,
            line,
            f"Invalid client info format at line {number}: {line}",
            number,
        )


def load_client_info(path: Union[str, os.PathLike]) -> LoadResult:
    """Loads a client info file with the default allow-list."""
    return SafeKeyValueLoader().load(path)
