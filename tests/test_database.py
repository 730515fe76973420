"""Tests for transaction retries and error mapping."""

import pytest
from sqlalchemy.exc import OperationalError

from app.database import is_retryable_error, run_in_transaction
from app.exceptions import InternalError, NotFoundError
from app.models import PropertyType


class FakeDriverError(Exception):
    def __init__(self, message, pgcode=None):
        super().__init__(message)
        self.pgcode = pgcode


def _db_error(message, pgcode=None):
    return OperationalError("UPDATE promotions", {}, FakeDriverError(message, pgcode))


def test_retryable_errors():
    assert is_retryable_error(_db_error("could not serialize access", "40001"))
    assert is_retryable_error(_db_error("deadlock detected", "40P01"))
    assert is_retryable_error(_db_error("database is locked"))
    assert not is_retryable_error(_db_error("disk I/O error"))


def test_serialization_failure_is_retried_once(app_db):
    calls = []

    def work(db):
        calls.append(1)
        if len(calls) == 1:
            raise _db_error("could not serialize access", "40001")
        db.add(PropertyType(name="Loft"))
        db.flush()
        return "done"

    assert run_in_transaction(app_db, work) == "done"
    assert len(calls) == 2
    assert app_db.query(PropertyType).count() == 1


def test_persistent_conflict_becomes_internal_error(app_db):
    calls = []

    def work(db):
        calls.append(1)
        raise _db_error("could not serialize access", "40001")

    with pytest.raises(InternalError):
        run_in_transaction(app_db, work)
    assert len(calls) == 2


def test_other_database_errors_are_not_retried(app_db):
    calls = []

    def work(db):
        calls.append(1)
        raise _db_error("disk I/O error")

    with pytest.raises(InternalError):
        run_in_transaction(app_db, work)
    assert len(calls) == 1


def test_domain_errors_roll_back_and_propagate(app_db):
    def work(db):
        db.add(PropertyType(name="Chalet"))
        db.flush()
        raise NotFoundError("Promotion not found")

    with pytest.raises(NotFoundError):
        run_in_transaction(app_db, work)
    assert app_db.query(PropertyType).count() == 0
