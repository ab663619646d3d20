"""
Custom exceptions for the licensing service.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised at startup when required configuration is missing or invalid."""


class LicenseError(Exception):
    """Base exception for request failures.

    ``code`` is the stable machine-readable error kind, ``status_code`` the
    HTTP status the routes answer with.
    """

    code = "license_error"

    def __init__(self, message: str | None = None, status_code: int = 400) -> None:
        super().__init__(message or self.code)
        self.status_code = status_code


class InvalidRequest(LicenseError):
    """Missing or malformed input."""

    code = "invalid_request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, 400)


class InvalidKey(LicenseError):
    """Key does not have the expected shape or its checksum does not match."""

    code = "invalid_key"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, 422)


class MaxActivationsReached(LicenseError):
    """A new device was refused because the key is at capacity."""

    code = "max_activations_reached"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, 429)


class StoreUnavailable(LicenseError):
    """The activation store failed or timed out."""

    code = "store_unavailable"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, 503)


class ActivationUnavailable(LicenseError):
    """The client could not reach the activation service."""

    code = "activation_unavailable"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, 503)


class Forbidden(LicenseError):
    """Admin credentials missing or wrong."""

    code = "forbidden"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, 403)


ERRORS_BY_CODE: dict[str, type[LicenseError]] = {
    cls.code: cls
    for cls in (InvalidRequest, InvalidKey, MaxActivationsReached, StoreUnavailable, Forbidden)
}
