"""sbxlite: safe client info loading and configuration validation for sing-box."""

from .core import (
    ClientInfoError,
    ClientInfoRecord,
    ConfigValidationError,
    EngineError,
    LoadError,
    LoadErrorCode,
    LoadResult,
    ReleaseLookupError,
    SafeKeyValueLoader,
    SbxError,
    SchemaValidator,
    ValidationOutcome,
    ValidationReason,
    VersionStatus,
    assess_engine_version,
    compare_versions,
    load_client_info,
    meets_minimum,
    validate,
    validate_reality_structure,
)
from .manager import SingBox

__version__ = "0.1.0"

__all__ = [
    "SingBox",
    "SafeKeyValueLoader",
    "SchemaValidator",
    "load_client_info",
    "validate",
    "validate_reality_structure",
    "meets_minimum",
    "compare_versions",
    "assess_engine_version",
    "ClientInfoRecord",
    "LoadError",
    "LoadErrorCode",
    "LoadResult",
    "ValidationOutcome",
    "ValidationReason",
    "VersionStatus",
    "SbxError",
    "ClientInfoError",
    "ConfigValidationError",
    "EngineError",
    "ReleaseLookupError",
]
