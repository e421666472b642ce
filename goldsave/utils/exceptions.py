"""
Exception handling utilities.

Defines the engine's error taxonomy and maps store exceptions onto it.
"""

import asyncio

from pydantic import ValidationError
from sqlalchemy.exc import (
    DataError,
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
)


class CommissionEngineError(Exception):
    """Base class for commission and bonus engine errors."""

    def __init__(self, message: str, job_id: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.job_id = job_id


class ClaimConflict(CommissionEngineError):
    """Another worker owns the job; expected race outcome, not an error."""


class TransientStoreError(CommissionEngineError):
    """Network failure or timeout talking to the store."""

    def __init__(
        self,
        message: str,
        job_id: int | None = None,
        timed_out: bool = False,
    ) -> None:
        super().__init__(message, job_id)
        self.timed_out = timed_out


class BusinessRuleFailure(CommissionEngineError):
    """Bad plan configuration, broken upline data or undecodable records."""


class FatalConfigurationError(CommissionEngineError):
    """Missing credentials or unreachable store; the whole cycle aborts."""


# Exception categories based on handling strategy

# Infrastructure trouble - the job itself is fine
TRANSIENT = (
    OperationalError,  # Connection dropped, server shutting down
    InterfaceError,    # Driver lost the connection
    ConnectionError,
    OSError,
)

# The data is wrong - needs external intervention
BUSINESS = (
    IntegrityError,    # Constraint violated (e.g. duplicate ledger row)
    DataError,         # Value does not fit the column
    ValidationError,   # Payload decode
    ValueError,
    LookupError,
)


def is_timeout(exc: BaseException) -> bool:
    """
    Check if exception is a timeout.

    Args:
        exc: Exception to check

    Returns:
        True for asyncio/builtin timeouts and timed-out transient errors
    """
    if isinstance(exc, TransientStoreError):
        return exc.timed_out
    return isinstance(exc, (TimeoutError, asyncio.TimeoutError))


def classify_store_error(
    exc: BaseException, job_id: int | None = None
) -> CommissionEngineError:
    """
    Map any exception raised while talking to the store onto the taxonomy.

    Args:
        exc: Exception to classify
        job_id: Job being handled, if any

    Returns:
        Engine error carrying a readable message
    """
    if isinstance(exc, CommissionEngineError):
        if exc.job_id is None:
            exc.job_id = job_id
        return exc

    if is_timeout(exc):
        return TransientStoreError(
            "store call timed out", job_id=job_id, timed_out=True
        )

    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return TransientStoreError(
            f"connection invalidated: {exc.orig}", job_id=job_id
        )

    if isinstance(exc, TRANSIENT):
        return TransientStoreError(_describe(exc), job_id=job_id)

    if isinstance(exc, BUSINESS):
        return BusinessRuleFailure(_describe(exc), job_id=job_id)

    # Unknown failures are treated as needing a human look
    return BusinessRuleFailure(_describe(exc), job_id=job_id)


def _describe(exc: BaseException) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return f"{type(exc).__name__}: {exc.orig}"
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__
