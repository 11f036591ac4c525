"""Exception hierarchy shared by the portal services."""

from __future__ import annotations


class PortalError(Exception):
    """Base class for errors raised by the portal services."""


class DuplicateAccountError(PortalError):
    """Raised when registering an email address that already has an account."""


class InvalidCredentialsError(PortalError):
    """Raised when a login attempt does not match a stored account.

    The same error covers unknown emails and wrong passwords so callers cannot
    tell whether an account exists.
    """


class StorageError(PortalError):
    """Raised when the document store cannot complete an operation."""


class UpstreamError(PortalError):
    """Raised when the prediction service is unreachable or returns an error."""


__all__ = [
    "PortalError",
    "DuplicateAccountError",
    "InvalidCredentialsError",
    "StorageError",
    "UpstreamError",
]
