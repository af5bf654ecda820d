"""DecisionLogStore — sole owner of the decision-log collection.

The store keeps an ordered in-memory list of logs mirrored in one durable
slot. Every mutation builds the next list, writes it wholesale to the slot,
and only then swaps it in, so a failed write never changes in-memory state.

Quota: logs whose status is not "Reviewing Outcome" are active. Creating a
log is refused once the active count reaches the free-tier limit; updates
and deletes are never gated.
"""

import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from resolve.core.exceptions import (
    DeserializationError,
    PersistenceError,
    QuotaExceededError,
    ResolveError,
)
from resolve.db.slots import DurableSlot
from resolve.domain.decision_logs import FREE_TIER_LIMIT, count_active, quota_reached
from resolve.schemas.decision_logs import DecisionLog, DecisionLogCreate, DecisionLogUpdate

logger = structlog.get_logger(__name__)

_LOGS_ADAPTER = TypeAdapter(list[DecisionLog])

# Native errors a slot may raise on read/write
_SLOT_ERRORS = (RedisError, OSError)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def generate_log_id(now: datetime) -> str:
    """Epoch milliseconds followed by a random suffix."""
    return f"{int(now.timestamp() * 1000)}{uuid.uuid4().hex[:9]}"


def serialize_logs(logs: list[DecisionLog]) -> str:
    """Encode the collection as one JSON array of camelCase documents.

    Unset optional fields (reflection, outcome) are omitted.
    """
    return _LOGS_ADAPTER.dump_json(logs, by_alias=True, exclude_none=True).decode("utf-8")


def deserialize_logs(raw: str) -> list[DecisionLog]:
    """Decode a stored JSON array back into decision logs, preserving order.

    Raises:
        DeserializationError: Document is not valid JSON or not a list of logs
    """
    try:
        return _LOGS_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise DeserializationError(f"Stored decision logs are malformed: {exc.error_count()} error(s)") from exc


class DecisionLogStore:
    """Canonical collection of decision logs with quota enforcement.

    Construction never fails: a missing slot starts empty, and an unreadable
    or malformed slot starts empty with the problem recorded in
    :attr:`last_error`.
    """

    def __init__(
        self,
        slot: DurableSlot,
        *,
        free_tier_limit: int = FREE_TIER_LIMIT,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[datetime], str] | None = None,
    ):
        """Initialize with dependency injection.

        Args:
            slot: Durable key-value slot holding the serialized collection
            free_tier_limit: Maximum active logs allowed when creating
            clock: Returns the current time (for deterministic testing)
            id_factory: Builds a new log id from the current time
        """
        self.slot = slot
        self._free_tier_limit = free_tier_limit
        self._clock = clock or _utcnow
        self._id_factory = id_factory or generate_log_id
        self._logs: list[DecisionLog] = []
        self._last_error: ResolveError | None = None
        self._load()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def free_tier_limit(self) -> int:
        return self._free_tier_limit

    @property
    def last_error(self) -> ResolveError | None:
        """Most recent error raised or recovered from; cleared by a successful write."""
        return self._last_error

    @property
    def logs(self) -> list[DecisionLog]:
        """Snapshot of all logs in insertion order."""
        return list(self._logs)

    def list_logs(self) -> list[DecisionLog]:
        return list(self._logs)

    def get(self, log_id: str) -> DecisionLog | None:
        index = self._index_of(log_id)
        return self._logs[index] if index is not None else None

    def active_count(self) -> int:
        """Number of logs not yet in "Reviewing Outcome"."""
        return count_active(log.status for log in self._logs)

    def is_quota_reached(self) -> bool:
        return quota_reached(self.active_count(), self._free_tier_limit)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, data: DecisionLogCreate | Mapping[str, Any]) -> DecisionLog:
        """Create a decision log, assigning id and timestamps.

        Args:
            data: Validated create input, or a mapping validated into one

        Returns:
            The stored DecisionLog

        Raises:
            pydantic.ValidationError: Mapping input has an invalid shape
            QuotaExceededError: Active logs already at the free-tier limit
            PersistenceError: Slot write failed (nothing was changed)
        """
        if isinstance(data, Mapping):
            data = DecisionLogCreate.model_validate(data)

        active = self.active_count()
        if quota_reached(active, self._free_tier_limit):
            error = QuotaExceededError(self._free_tier_limit)
            self._last_error = error
            logger.info("decision_log_quota_exceeded", active_count=active, limit=self._free_tier_limit)
            raise error

        now = self._clock()
        log = DecisionLog(
            id=self._new_id(now),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )

        self._commit([*self._logs, log], action="create", log_id=log.id)
        logger.info("decision_log_created", log_id=log.id, status=log.status.value, active_count=self.active_count())
        return log

    def update(self, log_id: str, partial: DecisionLogUpdate | Mapping[str, Any]) -> None:
        """Merge explicitly set fields over an existing log and refresh ``updated_at``.

        Unknown ids are a silent no-op: nothing is written. No quota check
        is applied, so pre-existing logs stay editable above the limit.

        Raises:
            pydantic.ValidationError: Partial or merged record is invalid
            PersistenceError: Slot write failed (nothing was changed)
        """
        if isinstance(partial, Mapping):
            partial = DecisionLogUpdate.model_validate(partial)

        index = self._index_of(log_id)
        if index is None:
            logger.debug("decision_log_update_skipped", log_id=log_id, reason="not_found")
            return

        changes = partial.model_dump(exclude_unset=True)
        current = self._logs[index]
        updated = DecisionLog.model_validate(
            {**current.model_dump(), **changes, "updated_at": self._clock()}
        )

        new_logs = list(self._logs)
        new_logs[index] = updated
        self._commit(new_logs, action="update", log_id=log_id)
        logger.info("decision_log_updated", log_id=log_id, fields=sorted(changes))

    def delete(self, log_id: str) -> None:
        """Remove a log. Unknown ids are a silent no-op.

        Raises:
            PersistenceError: Slot write failed (nothing was changed)
        """
        if self._index_of(log_id) is None:
            logger.debug("decision_log_delete_skipped", log_id=log_id, reason="not_found")
            return

        self._commit([log for log in self._logs if log.id != log_id], action="delete", log_id=log_id)
        logger.info("decision_log_deleted", log_id=log_id)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        try:
            raw = self.slot.read()
        except UnicodeDecodeError as exc:
            # Stored bytes are not text at all; same recovery as malformed JSON
            self._last_error = DeserializationError(f"Stored decision logs are not valid UTF-8: {exc.reason}")
            logger.warning("decision_log_slot_malformed", error=str(exc))
            return
        except _SLOT_ERRORS as exc:
            self._last_error = PersistenceError(f"Failed to load decision logs: {exc}")
            logger.error("decision_log_load_failed", error=str(exc), error_type=type(exc).__name__)
            return

        if raw is None:
            logger.debug("decision_log_slot_empty")
            return

        try:
            self._logs = deserialize_logs(raw)
        except DeserializationError as exc:
            self._last_error = exc
            logger.warning("decision_log_slot_malformed", error=str(exc))
            return

        logger.info("decision_logs_loaded", count=len(self._logs))

    def _commit(self, new_logs: list[DecisionLog], *, action: str, log_id: str) -> None:
        """Persist ``new_logs`` and adopt them only if the write succeeded."""
        try:
            self.slot.write(serialize_logs(new_logs))
        except _SLOT_ERRORS as exc:
            error = PersistenceError(f"Failed to save decision logs: {exc}")
            self._last_error = error
            logger.error(
                "decision_log_persist_failed",
                action=action,
                log_id=log_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise error from exc

        self._logs = new_logs
        self._last_error = None

    def _index_of(self, log_id: str) -> int | None:
        for index, log in enumerate(self._logs):
            if log.id == log_id:
                return index
        return None

    def _new_id(self, now: datetime) -> str:
        existing = {log.id for log in self._logs}
        candidate = self._id_factory(now)
        while candidate in existing:
            candidate = self._id_factory(now)
        return candidate
