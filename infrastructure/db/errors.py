"""
Storage errors raised by the Supabase adapters.

Postgres unique violations (SQLSTATE 23505) on the guarded indexes are
translated to domain conflict errors by the repositories. Every other
PostgREST failure is wrapped in TrackingStorageError and propagated.
"""

from typing import Callable, NoReturn, Optional

from postgrest.exceptions import APIError

from domain.errors import TrackingDomainError

UNIQUE_VIOLATION = "23505"


class TrackingStorageError(Exception):
    """A Supabase call failed for a reason other than a guarded conflict."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


def is_unique_violation(error: Exception) -> bool:
    return isinstance(error, APIError) and error.code == UNIQUE_VIOLATION


def raise_storage_error(
    operation: str,
    error: Exception,
    on_unique_violation: Optional[Callable[[], TrackingDomainError]] = None,
) -> NoReturn:
    """
    Re-raise a failed Supabase call as a domain or storage error.

    Args:
        operation: Short description used in the message
        error: The exception raised by the client
        on_unique_violation: Builds the domain error for a 23505 failure
    """
    if on_unique_violation is not None and is_unique_violation(error):
        raise on_unique_violation() from error
    raise TrackingStorageError(operation, error) from error
