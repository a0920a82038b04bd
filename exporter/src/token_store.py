"""
Token record persistence for the exporter.

Keeps the OAuth2 token pair in a single JSON file with three fields:
- access_token: Bearer token for data requests.
- expires_in: Access token lifetime in seconds, as issued.
- refresh_token: Token used to obtain the next pair.

The file is the only state that survives a restart. Writes go to a sibling
temporary file which then replaces the record, so a crash mid-write never
leaves a truncated record behind.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from exporter.src.errors import TokenStoreError
from exporter.src.models import Credentials

logger = logging.getLogger(__name__)


class TokenStore:
    """Loads and atomically overwrites the persisted token record.

    Args:
        path: Filesystem path for the token JSON file. Accepts str or Path.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> Credentials | None:
        """Read the token record.

        Returns:
            The stored credentials, or ``None`` when the record is missing
            or unreadable. A missing record is the normal first-run case.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No token record at %s, starting without tokens", self.path)
            return None
        except OSError:
            logger.warning("Failed to read token record %s", self.path, exc_info=True)
            return None

        try:
            return Credentials.model_validate_json(raw)
        except ValidationError:
            logger.warning("Ignoring malformed token record %s", self.path)
            return None

    def save(self, credentials: Credentials) -> None:
        """Overwrite the token record.

        Args:
            credentials: Token pair to persist.

        Raises:
            TokenStoreError: If the record cannot be written.
        """
        data = {
            "access_token": credentials.access_token,
            "expires_in": credentials.expires_in,
            "refresh_token": credentials.refresh_token,
        }
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(json.dumps(data), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise TokenStoreError(f"Unable to write token record {self.path}: {exc}") from exc
