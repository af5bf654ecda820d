"""API-specific test fixtures."""

from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from resolve.integrations.notifications import LocalNotificationScheduler
from resolve.main import create_app
from resolve.services.reminder_service import ReminderService

REMINDER_NOW = datetime(2030, 6, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def reminder_now():
    """Fixed "now" used by the reminder service."""
    return REMINDER_NOW


@pytest.fixture
def scheduler():
    return LocalNotificationScheduler()


@pytest.fixture
def api_client(store, scheduler):
    """FastAPI test client wired to the in-memory store.

    The lifespan is not entered, so no Redis connection is made; the store
    and reminder service are placed on app.state directly.
    """
    app = create_app()
    app.state.store = store
    app.state.reminders = ReminderService(scheduler, clock=lambda: REMINDER_NOW)
    return TestClient(app)
