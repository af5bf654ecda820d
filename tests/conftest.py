"""Shared test fixtures for all test groups."""

from datetime import UTC, datetime, timedelta

import pytest

from resolve.db.slots import MemorySlot
from resolve.services.decision_log_store import DecisionLogStore


class FakeClock:
    """Deterministic clock. Each call returns the current time, then steps forward."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def clock():
    """Clock starting 2030-06-15 10:30 UTC, one second per call."""
    return FakeClock(datetime(2030, 6, 15, 10, 30, 0, tzinfo=UTC))


@pytest.fixture
def slot():
    """Empty in-memory durable slot."""
    return MemorySlot()


@pytest.fixture
def store(slot, clock):
    """DecisionLogStore over an empty in-memory slot with a fixed clock."""
    return DecisionLogStore(slot, clock=clock)


@pytest.fixture
def job_offer():
    """Create input for the canonical "Job offer" decision."""
    return {
        "title": "Job offer",
        "pros": ["pay"],
        "cons": ["commute"],
        "gutFeeling": 70,
        "keyFactors": ["Career"],
        "status": "Pending",
    }


@pytest.fixture
def make_input():
    """Factory for minimal valid create input."""

    def _make(title: str, status: str = "Pending") -> dict:
        return {
            "title": title,
            "pros": ["upside"],
            "cons": ["downside"],
            "gutFeeling": 50,
            "keyFactors": ["Personal Growth"],
            "status": status,
        }

    return _make
