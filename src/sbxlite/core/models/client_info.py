from __future__ import annotations

"""Client info records and loader results."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from ..config.settings import REALITY_PORT_DEFAULT, SNI_DEFAULT


class LoadErrorCode(str, Enum):
    """Stable reason codes reported by the client info loader."""

    UNEXPECTED_KEY = "UnexpectedKey"
    SUSPICIOUS_VALUE = "SuspiciousValue"
    INVALID_FORMAT = "InvalidFormat"
    INVALID_ENTRY = "InvalidEntry"
    UNREADABLE = "Unreadable"


@dataclass(frozen=True)
class LoadError:
    """Why a client info file was rejected.

    `subject` is the offending key for key/value failures, the raw line for
    format failures and the path for unreadable files.
    """

    code: LoadErrorCode
    subject: str
    message: str
    line_number: Optional[int] = None

    def __str__(self) -> str:
        return self.message


class ClientInfoRecord(Mapping):
    """Immutable, ordered mapping of allow-listed client info keys to values."""

    __slots__ = ("_items",)

    def __init__(self, items: Tuple[Tuple[str, str], ...] = ()) -> None:
        merged: Dict[str, str] = {}
        for key, value in items:
            merged[key] = value
        self._items: Tuple[Tuple[str, str], ...] = tuple(merged.items())

    def __getitem__(self, key: str) -> str:
        for name, value in self._items:
            if name == key:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ClientInfoRecord):
            return self._items == other._items
        return super().__eq__(other)

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        # Secrets stay out of logs and tracebacks
        return f"ClientInfoRecord(keys={list(self)!r})"

    def with_defaults(self) -> "ClientInfoRecord":
        """Returns a copy with REALITY_PORT and SNI filled in when absent."""
        items = list(self._items)
        if "REALITY_PORT" not in self or not self["REALITY_PORT"]:
            items.append(("REALITY_PORT", REALITY_PORT_DEFAULT))
        if "SNI" not in self or not self["SNI"]:
            items.append(("SNI", SNI_DEFAULT))
        return ClientInfoRecord(tuple(items))

    def to_text(self) -> str:
        """Renders the canonical `KEY="value"` file body."""
        return "".join(f'{key}="{value}"\n' for key, value in self._items)


@dataclass(frozen=True)
class LoadResult:
    """Either a loaded record or the error that stopped the load."""

    record: Optional[ClientInfoRecord] = None
    error: Optional[LoadError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.record is not None

    @classmethod
    def success(cls, record: ClientInfoRecord) -> "LoadResult":
        return cls(record=record)

    @classmethod
    def failure(
        cls,
        code: LoadErrorCode,
        subject: str,
        message: str,
        line_number: Optional[int] = None,
    ) -> "LoadResult":
        return cls(error=LoadError(code, subject, message, line_number))
