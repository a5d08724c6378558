"""Errors raised by the yr.no client."""


class YRError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(YRError, ValueError):
    """Request arguments are missing or malformed."""


class InvalidOperationError(YRError, LookupError):
    """The named operation has no endpoint."""

    def __init__(self, operation):
        super().__init__(f"Invalid type: {operation}")
        self.operation = operation


class NetworkError(YRError):
    """The HTTP request failed or returned a non-successful status."""

    def __init__(self, message, *, status_code=None):
        super().__init__(message)
        self.status_code = status_code
