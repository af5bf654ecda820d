"""Local notification capability.

Device capabilities are injected into the presentation layer, never into
the store. Each capability reports one of three states; only an
``AVAILABLE`` scheduler accepts notifications.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol, runtime_checkable

import structlog

from resolve.core.exceptions import ResolveError

logger = structlog.get_logger(__name__)


class CapabilityStatus(str, Enum):
    """Whether a device capability can be used right now."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"  # not a native platform / no backend
    PERMISSION_DENIED = "permission_denied"


class CapabilityUnavailableError(ResolveError):
    """Raised when a capability is used while unavailable or denied."""

    def __init__(self, capability: str, status: CapabilityStatus):
        self.capability = capability
        self.status = status
        super().__init__(f"{capability} capability is {status.value}")


@runtime_checkable
class NotificationScheduler(Protocol):
    """Schedules a one-shot local notification."""

    @property
    def status(self) -> CapabilityStatus:
        ...

    def request_permission(self) -> CapabilityStatus:
        """Ask for permission if not yet granted. Returns the resulting status."""
        ...

    def schedule(self, title: str, body: str, fire_at: datetime) -> None:
        """Schedule a notification.

        Raises:
            CapabilityUnavailableError: Scheduler is unavailable or denied
        """
        ...


@dataclass
class ScheduledNotification:
    """A notification accepted by the scheduler."""

    title: str
    body: str
    fire_at: datetime
    kind: str = "decision_reminder"


@dataclass
class LocalNotificationScheduler:
    """In-process scheduler that records and logs notifications.

    Nothing is delivered to a device: accepted notifications are only kept
    in ``scheduled`` (the newest ``max_recorded``) and logged, so a front end
    that owns real delivery can pick them up.

    The ``status`` field selects the variant: ``AVAILABLE`` accepts
    notifications, ``UNAVAILABLE`` and ``PERMISSION_DENIED`` reject them.
    ``grant_on_request`` controls whether :meth:`request_permission`
    upgrades a denied scheduler.
    """

    status: CapabilityStatus = CapabilityStatus.AVAILABLE
    grant_on_request: bool = False
    max_recorded: int = 100
    scheduled: list[ScheduledNotification] = field(default_factory=list)

    def request_permission(self) -> CapabilityStatus:
        if self.status is CapabilityStatus.PERMISSION_DENIED and self.grant_on_request:
            self.status = CapabilityStatus.AVAILABLE
            logger.info("notification_permission_granted")
        return self.status

    def schedule(self, title: str, body: str, fire_at: datetime) -> None:
        if self.status is not CapabilityStatus.AVAILABLE:
            raise CapabilityUnavailableError("notifications", self.status)

        notification = ScheduledNotification(title=title, body=body, fire_at=fire_at)
        self.scheduled.append(notification)
        del self.scheduled[:-self.max_recorded]
        logger.info(
            "notification_recorded",
            title=title,
            fire_at=fire_at.isoformat(),
            kind=notification.kind,
            delivered=False,
        )
