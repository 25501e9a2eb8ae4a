#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Library facade for inspecting and validating a local sing-box installation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Union

import httpx
from dotenv import load_dotenv

from .core import (
    ClientInfoMixin,
    ExportMixin,
    SafeKeyValueLoader,
    SchemaValidator,
    UtilityMixin,
    ValidationMixin,
    VersionMixin,
)
from .core.config.settings import (
    DEFAULT_CLIENT_INFO_PATH,
    DEFAULT_CONFIG_PATH,
    DEFAULT_ENGINE_BINARY,
    DEFAULT_RELEASES_API_URL,
)

load_dotenv()

__all__ = ["SingBox"]


class SingBox(
    UtilityMixin,
    ClientInfoMixin,
    ValidationMixin,
    ExportMixin,
    VersionMixin,
):
    """Manages the files of one sing-box installation: client info, config and engine binary."""

    def __init__(
        self,
        *,
        client_info_path: Optional[Union[str, os.PathLike]] = None,
        config_path: Optional[Union[str, os.PathLike]] = None,
        engine_binary: Optional[str] = None,
        engine_version: Optional[str] = None,
        releases_api_url: Optional[str] = None,
        requests_session: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Resolves paths from arguments, then environment, then the settings file."""
        self.client_info_path = Path(
            client_info_path
            or os.getenv("SBX_CLIENT_INFO")
            or DEFAULT_CLIENT_INFO_PATH
        )
        self.config_path = Path(config_path or os.getenv("SBX_CONFIG") or DEFAULT_CONFIG_PATH)
        self.engine_binary = engine_binary or DEFAULT_ENGINE_BINARY
        self.engine_version = engine_version
        if releases_api_url is None and (custom_api := os.getenv("CUSTOM_GITHUB_API")):
            releases_api_url = f"{custom_api.rstrip('/')}/repos/SagerNet/sing-box/releases"
        self.releases_api_url = releases_api_url or DEFAULT_RELEASES_API_URL
        self.requests = requests_session

        self.loader = SafeKeyValueLoader()
        self.validator = SchemaValidator()

    def resolve_engine_version(self) -> Optional[str]:
        """Returns the configured engine version, detecting it from the binary when unset."""
        if self.engine_version is None:
            self.engine_version = self.detect_engine_version()
        return self.engine_version

