"""ReminderService — schedules a review reminder for pending decisions.

Reminders are best effort. A failing or unavailable notification scheduler
is logged and reported to the caller as "not scheduled"; it never reaches
the decision-log store.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import structlog

from resolve.domain.decision_logs import DecisionStatus
from resolve.integrations.notifications import CapabilityStatus, NotificationScheduler
from resolve.schemas.decision_logs import DecisionLog

logger = structlog.get_logger(__name__)

REMINDER_TITLE = "Decision Reminder"
DEFAULT_REMINDER_DELAY_DAYS = 7


def reminder_body(title: str) -> str:
    return f"Don't forget to review your decision: {title}"


class ReminderService:
    """Hands pending decisions to a notification scheduler."""

    def __init__(
        self,
        scheduler: NotificationScheduler,
        delay_days: int = DEFAULT_REMINDER_DELAY_DAYS,
        clock: Callable[[], datetime] | None = None,
    ):
        self.scheduler = scheduler
        self.delay_days = delay_days
        self._clock = clock or (lambda: datetime.now(UTC))

    def schedule_review(self, log: DecisionLog) -> datetime | None:
        """Schedule a reminder ``delay_days`` from now for a pending decision.

        Args:
            log: The decision to remind about

        Returns:
            Fire time if a reminder was scheduled, None otherwise
        """
        if log.status is not DecisionStatus.PENDING:
            logger.info("decision_reminder_skipped", log_id=log.id, reason="not_pending", status=log.status.value)
            return None

        fire_at = self._clock() + timedelta(days=self.delay_days)
        try:
            if self.scheduler.status is not CapabilityStatus.AVAILABLE:
                self.scheduler.request_permission()
            self.scheduler.schedule(REMINDER_TITLE, reminder_body(log.title), fire_at)
        except Exception as e:
            logger.warning(
                "decision_reminder_failed",
                log_id=log.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        logger.info("decision_reminder_scheduled", log_id=log.id, fire_at=fire_at.isoformat())
        return fire_at
