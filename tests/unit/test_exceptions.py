"""
Unit tests for store error classification.
"""

import asyncio

import pytest
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from goldsave.utils.exceptions import (
    BusinessRuleFailure,
    ClaimConflict,
    TransientStoreError,
    classify_store_error,
    is_timeout,
)


class _Strict(BaseModel):
    value: int


def _validation_error() -> ValidationError:
    try:
        _Strict.model_validate({"value": "not a number"})
    except ValidationError as e:
        return e
    raise AssertionError("validation should fail")


class TestClassifyStoreError:
    """Test mapping onto the engine's error taxonomy."""

    def test_timeout_is_transient_timed_out(self):
        error = classify_store_error(asyncio.TimeoutError(), job_id=3)

        assert isinstance(error, TransientStoreError)
        assert error.timed_out is True
        assert error.job_id == 3

    def test_builtin_timeout(self):
        error = classify_store_error(TimeoutError())
        assert isinstance(error, TransientStoreError)
        assert error.timed_out is True

    def test_operational_error_is_transient(self):
        exc = OperationalError("SELECT 1", {}, Exception("connection reset"))

        error = classify_store_error(exc)

        assert isinstance(error, TransientStoreError)
        assert error.timed_out is False
        assert "connection reset" in error.message

    def test_connection_refused_is_transient(self):
        error = classify_store_error(ConnectionRefusedError("refused"))
        assert isinstance(error, TransientStoreError)

    def test_invalidated_connection_is_transient(self):
        exc = DBAPIError(
            "UPDATE", {}, Exception("server closed"), connection_invalidated=True
        )
        assert isinstance(classify_store_error(exc), TransientStoreError)

    def test_integrity_error_is_business(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        error = classify_store_error(exc, job_id=9)

        assert isinstance(error, BusinessRuleFailure)
        assert "UNIQUE constraint failed" in error.message
        assert error.job_id == 9

    def test_validation_error_is_business(self):
        error = classify_store_error(_validation_error())
        assert isinstance(error, BusinessRuleFailure)

    def test_unknown_error_is_business(self):
        error = classify_store_error(RuntimeError("boom"))

        assert isinstance(error, BusinessRuleFailure)
        assert error.message == "RuntimeError: boom"

    def test_engine_errors_pass_through(self):
        original = ClaimConflict("taken")

        error = classify_store_error(original, job_id=4)

        assert error is original
        assert error.job_id == 4

    def test_existing_job_id_kept(self):
        original = BusinessRuleFailure("bad plan", job_id=1)
        assert classify_store_error(original, job_id=2).job_id == 1


class TestIsTimeout:
    """Test timeout detection."""

    @pytest.mark.parametrize(
        "exc,expected",
        [
            (asyncio.TimeoutError(), True),
            (TransientStoreError("slow", timed_out=True), True),
            (TransientStoreError("gone"), False),
            (ValueError("x"), False),
        ],
    )
    def test_is_timeout(self, exc, expected):
        assert is_timeout(exc) is expected
