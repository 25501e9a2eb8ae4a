from __future__ import annotations

"""Validation of configuration files before they reach disk or the engine."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..config.exceptions import ConfigValidationError
from ..models.schema import ValidationOutcome

logger = logging.getLogger(__name__)


class ValidationMixin:
    """Runs the schema validator over fragments and files, raising on failure."""

    def check_fragment(
        self, section: str, value: Any, installed_version: Optional[str] = None
    ) -> ValidationOutcome:
        """Validates one fragment; raises ConfigValidationError when it is rejected."""
        outcome = self.validator.validate(section, value, installed_version or self.engine_version)
        if not outcome:
            raise ConfigValidationError(f"Invalid {section} configuration: {outcome.message}", outcome)
        return outcome

    def read_config(self, path: Union[str, os.PathLike, None] = None) -> Dict[str, Any]:
        """Reads a JSON configuration document without validating it."""
        config_path = Path(path) if path is not None else self.config_path
        try:
            with config_path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise ConfigValidationError(f"Configuration file not found: {config_path}") from e
        except json.JSONDecodeError as e:
            raise ConfigValidationError(
                f"Invalid JSON syntax in configuration file '{config_path}': {e}"
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigValidationError(f"Unable to read configuration file '{config_path}': {e}") from e

    def validate_config_file(
        self,
        path: Union[str, os.PathLike, None] = None,
        installed_version: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Reads and validates a whole configuration file, returning the document."""
        document = self.read_config(path)
        version = installed_version or self.engine_version
        outcome = self.validator.validate_document(document, version)
        if not outcome:
            raise ConfigValidationError(f"Configuration rejected: {outcome.message}", outcome)
        logger.debug("Configuration validated against sing-box %s", version or "(unknown)")
        return document

    def save_config(
        self,
        document: Dict[str, Any],
        path: Union[str, os.PathLike, None] = None,
        installed_version: Optional[str] = None,
    ) -> Path:
        """Validates a document and only then writes it atomically."""
        outcome = self.validator.validate_document(document, installed_version or self.engine_version)
        if not outcome:
            raise ConfigValidationError(f"Refusing to write invalid configuration: {outcome.message}", outcome)

        config_path = Path(path) if path is not None else self.config_path
        config_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=config_path.parent, prefix=".config-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
                f.write("\n")
            os.replace(tmp_name, config_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return config_path
