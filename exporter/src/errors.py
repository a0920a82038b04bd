"""
Exception hierarchy for the tado° exporter.

Authentication failures abort a poll tick. Transport and deserialization
failures are raised by the low-level request helpers and caught at the API
client boundary, where they degrade to an empty result for one resource.
Token store failures are local I/O errors and are never absorbed.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations


class ExporterError(Exception):
    """Base exception for the exporter."""


class AuthError(ExporterError):
    """Authentication against the tado° login service failed.

    Attributes:
        status_code: HTTP status of the rejecting response, if any.
        url: URL of the rejecting request, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class AuthTimeoutError(AuthError):
    """The device-code flow was not approved before it expired."""


class TransportError(ExporterError):
    """Network failure or non-2xx status on a data request."""


class DeserializationError(ExporterError):
    """An upstream payload could not be decoded into its expected shape."""


class TokenStoreError(ExporterError):
    """The local token record could not be written."""
