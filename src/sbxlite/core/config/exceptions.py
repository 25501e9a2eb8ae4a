"""Custom exception types for sbxlite for clearer error handling."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..models.client_info import LoadError
    from ..models.schema import ValidationOutcome


class SbxError(Exception):
    """Base exception for all custom errors in this application."""

    pass


class ClientInfoError(SbxError):
    """Raised when a client info file is rejected by the loader or by the file policy."""

    def __init__(self, message: str, load_error: Optional["LoadError"] = None) -> None:
        super().__init__(message)
        self.load_error = load_error


class ConfigValidationError(SbxError):
    """Raised when a sing-box configuration fails structural validation."""

    def __init__(self, message: str, outcome: Optional["ValidationOutcome"] = None) -> None:
        super().__init__(message)
        self.outcome = outcome


class EngineError(SbxError):
    """Raised when there's an issue with the sing-box binary or its version output."""

    pass


class ReleaseLookupError(SbxError):
    """Raised when release information cannot be fetched or understood."""

    pass
