"""
Tests for the store retry wrapper
"""

import pytest
from google.api_core import exceptions as google_exceptions
from sqlalchemy.exc import OperationalError

from app.core.errors import SeatTakenError
from app.utils.retry import with_retry

def transient():
    return OperationalError("UPDATE guests", {}, Exception("database is locked"))

class Flaky:
    """Callable failing a fixed number of times before succeeding"""

    def __init__(self, failures, error_factory=transient):
        self.failures = failures
        self.error_factory = error_factory
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error_factory()
        return "ok"

def test_returns_first_success():
    delays = []
    op = Flaky(failures=0)
    assert with_retry(op, sleep=delays.append) == "ok"
    assert op.calls == 1
    assert delays == []

def test_retries_with_exponential_backoff():
    delays = []
    op = Flaky(failures=2)

    assert with_retry(op, attempts=3, backoff=0.5, timeout=30, sleep=delays.append) == "ok"
    assert op.calls == 3
    assert delays == [0.5, 1.0]

def test_reraises_last_error_when_attempts_run_out():
    delays = []
    op = Flaky(failures=5)

    with pytest.raises(OperationalError):
        with_retry(op, attempts=3, backoff=0.5, timeout=30, sleep=delays.append)
    assert op.calls == 3
    assert delays == [0.5, 1.0]

def test_stops_at_deadline():
    delays = []
    op = Flaky(failures=5)

    with pytest.raises(OperationalError):
        with_retry(op, attempts=5, backoff=1.0, timeout=2.5, sleep=delays.append)
    # the fake sleep does not advance the clock, so only the 4s wait overshoots
    assert delays == [1.0, 2.0]
    assert op.calls == 3

def test_retries_firestore_unavailable():
    op = Flaky(failures=1, error_factory=lambda: google_exceptions.ServiceUnavailable("try later"))
    assert with_retry(op, attempts=2, backoff=0, sleep=lambda _: None) == "ok"

def test_domain_errors_are_not_retried():
    op = Flaky(failures=1, error_factory=lambda: SeatTakenError("t1", 0))

    with pytest.raises(SeatTakenError):
        with_retry(op, attempts=3, backoff=0, sleep=lambda _: None)
    assert op.calls == 1
