"""
Configuration module for sbxlite.

This module contains all configuration-related functionality including:
- Application settings and themes
- Custom exceptions
- Schema rules for configuration sections
"""

from .exceptions import (
    SbxError,
    ClientInfoError,
    ConfigValidationError,
    EngineError,
    ReleaseLookupError,
)
from .settings import (
    ALLOWED_CLIENT_INFO_KEYS,
    CLIENT_INFO_KEYS,
    DEFAULT_RICH_THEME,
    MIN_ENGINE_VERSION,
    RECOMMENDED_ENGINE_VERSION,
    STATUS_STYLES,
)
from .schemas import SECTION_RULES

__all__ = [
    # Exceptions
    "SbxError",
    "ClientInfoError",
    "ConfigValidationError",
    "EngineError",
    "ReleaseLookupError",
    # Settings
    "ALLOWED_CLIENT_INFO_KEYS",
    "CLIENT_INFO_KEYS",
    "DEFAULT_RICH_THEME",
    "MIN_ENGINE_VERSION",
    "RECOMMENDED_ENGINE_VERSION",
    "STATUS_STYLES",
    # Schemas
    "SECTION_RULES",
]
