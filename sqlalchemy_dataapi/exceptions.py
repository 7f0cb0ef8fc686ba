"""
DB-API 2.0 exceptions for the RDS Data API driver

The hierarchy follows PEP 249. Errors raised by the remote service are
translated at the boto3 boundary by ``translate_client_error`` so that
callers keep seeing the service's own message text.
"""

from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError


class Warning(Exception):
    """Exception raised for warnings."""
    pass


class Error(Exception):
    """Base exception for DB-API errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.original_error = original_error


class InterfaceError(Error):
    """Exception for interface errors."""
    pass


class DatabaseError(Error):
    """Exception for database errors."""
    pass


class DataError(DatabaseError):
    """Exception for data errors."""
    pass


class OperationalError(DatabaseError):
    """Exception for operational errors."""
    pass


class IntegrityError(DatabaseError):
    """Exception for integrity errors."""
    pass


class InternalError(DatabaseError):
    """Exception for internal errors."""
    pass


class ProgrammingError(DatabaseError):
    """Exception for programming errors."""
    pass


class NotSupportedError(DatabaseError):
    """Exception for unsupported operations."""
    pass


class ConnectionStringError(InterfaceError):
    """Raised when a connection string cannot be parsed."""
    pass


class LastInsertIdUnavailable(NotSupportedError):
    """The Data API has no auto-generated id channel for plain statements."""

    MESSAGE = "no LastInsertId available after the empty statement"

    def __init__(self):
        super().__init__(self.MESSAGE)


# Everything a boto3 client call can raise on its own.
CLIENT_ERRORS = (ClientError, BotoCoreError)


def translate_client_error(exc: Exception) -> Error:
    """
    Map a boto3 failure onto the DB-API hierarchy.

    ClientError carries the service's message, which is kept verbatim.
    Anything else coming out of botocore (endpoint, credentials, network)
    is operational.
    """
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        return DatabaseError(
            error.get("Message") or str(exc),
            code=error.get("Code"),
            original_error=exc,
        )
    return OperationalError(str(exc), original_error=exc)
