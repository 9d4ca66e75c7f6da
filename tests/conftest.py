"""Shared fixtures: a controllable clock and in-memory wiring."""

from datetime import datetime
from uuid import uuid4

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.orchestrator import ExpenseTracker
from expense_tracker.repositories import ExpenseRepository, UserRepository
from expense_tracker.services.storage import (
    InMemoryAuditStorage,
    InMemoryExpenseStorage,
    InMemoryUserStorage,
)
from expense_tracker.validation import ExpenseValidator


NOW = datetime(2026, 10, 19, 12, 0, 0)


class MutableClock:
    """Clock whose current time tests can move."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def owner_id():
    return uuid4()


@pytest.fixture
def other_owner_id():
    return uuid4()


@pytest.fixture
def expense_storage():
    return InMemoryExpenseStorage()


@pytest.fixture
def user_storage():
    return InMemoryUserStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def repository(expense_storage, clock):
    return ExpenseRepository(expense_storage, ExpenseValidator(clock=clock), clock)


@pytest.fixture
def users(user_storage):
    return UserRepository(user_storage)


@pytest.fixture
def tracker(expense_storage, user_storage, audit_storage, clock):
    return ExpenseTracker(
        expense_storage=expense_storage,
        user_storage=user_storage,
        audit_logger=AuditLogger(audit_storage),
        clock=clock,
    )
