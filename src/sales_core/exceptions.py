"""Domain-specific exceptions for Sales Analytics Core.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from SalesCoreError for easy catching.
"""

from __future__ import annotations


class SalesCoreError(Exception):
    """Base exception for all Sales Analytics Core errors.

    Users can catch this exception to handle any error raised by the package.
    """

    pass


class ConfigError(SalesCoreError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided
    - Environment variables cannot be parsed
    """

    pass


class DataQualityError(SalesCoreError):
    """Raised when a record from the data source is malformed.

    This exception is raised when:
    - Required fields are missing from an API payload
    - Values are out of range (e.g. quantity < 1, price <= 0)
    - A seller's goal flag contradicts its sales count
    """

    pass


class ApiError(SalesCoreError):
    """Raised when the sales API returns an error or cannot be reached.

    Attributes:
        status: HTTP status code, or 0 when the server could not be reached.
    """

    def __init__(self, message: str, status: int = 0) -> None:
        super().__init__(message)
        self.status = status


class AuthenticationError(ApiError):
    """Raised when login fails or the API rejects the session token."""

    pass


class FetchError(SalesCoreError):
    """Raised when a batched refresh fails.

    The original failure is available as ``__cause__``.
    """

    pass


class ExportError(SalesCoreError):
    """Raised when a report or CSV export cannot be produced."""

    pass


class EmptyExportError(ExportError):
    """Raised when an export is requested for an empty sale collection.

    This is a validation failure for the caller to surface, not a
    computation error. No file is written.
    """

    pass
