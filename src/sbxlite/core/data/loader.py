from __future__ import annotations

"""Loading and saving of client info files under the installation's file policy."""

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Mapping, Union

from ..config.exceptions import ClientInfoError
from ..config.settings import CLIENT_INFO_FILE_MODE, CLIENT_INFO_KEYS
from ..models.client_info import ClientInfoRecord

logger = logging.getLogger(__name__)


class ClientInfoMixin:
    """Operations responsible for reading and writing client info files."""

    def _check_client_info_file(self, path: Path, enforce_permissions: bool) -> None:
        """Applies the installation's policy to the file before anything reads it."""
        if path.is_symlink():
            raise ClientInfoError(f"Refusing to load client info from symlink: {path}")
        if not path.is_file():
            raise ClientInfoError(f"Client info not found: {path}")

        info = path.stat()
        if enforce_permissions and os.name == "posix":
            mode = stat.S_IMODE(info.st_mode)
            if mode != CLIENT_INFO_FILE_MODE:
                raise ClientInfoError(f"Client info permissions must be 600 (found {mode:o})")
        if info.st_size == 0:
            raise ClientInfoError(f"Client info is empty: {path}")

    def load_client_info(
        self,
        path: Union[str, os.PathLike, None] = None,
        *,
        enforce_permissions: bool = True,
    ) -> ClientInfoRecord:
        """Loads the client info file, raising ClientInfoError on any rejection."""
        info_path = Path(path) if path is not None else self.client_info_path
        self._check_client_info_file(info_path, enforce_permissions)

        result = self.loader.load(info_path)
        if not result.ok:
            raise ClientInfoError(result.error.message, result.error)
        return result.record

    def save_client_info(
        self,
        values: Mapping[str, str],
        path: Union[str, os.PathLike, None] = None,
    ) -> ClientInfoRecord:
        """Writes client info with mode 600, after checking it loads back unchanged."""
        ordered = [(key, str(values[key])) for key in CLIENT_INFO_KEYS if key in values]
        unknown = sorted(set(values) - set(CLIENT_INFO_KEYS))
        if unknown:
            raise ClientInfoError(f"Unexpected key '{unknown[0]}' in client info")

        record = ClientInfoRecord(tuple(ordered))
        text = record.to_text()
        result = self.loader.parse_text(text)
        if not result.ok:
            raise ClientInfoError(result.error.message, result.error)

        info_path = Path(path) if path is not None else self.client_info_path
        info_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=info_path.parent, prefix=".client-info-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.chmod(tmp_name, CLIENT_INFO_FILE_MODE)
            os.replace(tmp_name, info_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Client info written to %s", info_path)
        return result.record

