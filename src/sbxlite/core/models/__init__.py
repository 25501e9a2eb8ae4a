"""
Data models for sbxlite.

This module contains all data model definitions including:
- Client info records and loader results
- Schema rules and validation outcomes
- Engine versions
"""

from .client_info import (
    ClientInfoRecord,
    LoadError,
    LoadErrorCode,
    LoadResult,
)
from .schema import (
    FieldKind,
    FieldSpec,
    SchemaRule,
    ValidationOutcome,
    ValidationReason,
)
from .version import Version, VersionStatus

__all__ = [
    "ClientInfoRecord",
    "LoadError",
    "LoadErrorCode",
    "LoadResult",
    "FieldKind",
    "FieldSpec",
    "SchemaRule",
    "ValidationOutcome",
    "ValidationReason",
    "Version",
    "VersionStatus",
]
