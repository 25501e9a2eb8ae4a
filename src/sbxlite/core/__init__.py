from .config.exceptions import (
    ClientInfoError,
    ConfigValidationError,
    EngineError,
    ReleaseLookupError,
    SbxError,
)
from .data.loader import ClientInfoMixin
from .data.parser import SafeKeyValueLoader, load_client_info
from .models.client_info import ClientInfoRecord, LoadError, LoadErrorCode, LoadResult
from .models.schema import SchemaRule, ValidationOutcome, ValidationReason
from .models.version import Version, VersionStatus
from .services.config_validator import ValidationMixin
from .services.export import ExportMixin
from .services.schema_validator import SchemaValidator, validate, validate_reality_structure
from .services.versioning import (
    VersionMixin,
    assess_engine_version,
    compare_versions,
    meets_minimum,
)
from .utils.helpers import UtilityMixin

__all__ = [
    # Models
    "ClientInfoRecord",
    "LoadError",
    "LoadErrorCode",
    "LoadResult",
    "SchemaRule",
    "ValidationOutcome",
    "ValidationReason",
    "Version",
    "VersionStatus",
    # Core components
    "SafeKeyValueLoader",
    "SchemaValidator",
    "load_client_info",
    "validate",
    "validate_reality_structure",
    "meets_minimum",
    "compare_versions",
    "assess_engine_version",
    # Mixins
    "ClientInfoMixin",
    "ValidationMixin",
    "ExportMixin",
    "VersionMixin",
    "UtilityMixin",
    # Exceptions
    "SbxError",
    "ClientInfoError",
    "ConfigValidationError",
    "EngineError",
    "ReleaseLookupError",
]
