"""Decision log API routes.

Thin adapter over DecisionLogStore. Store errors propagate to the exception
handlers registered in ``resolve.main``.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from resolve.schemas.decision_logs import (
    DecisionLog,
    DecisionLogCreate,
    DecisionLogForm,
    DecisionLogUpdate,
    QuotaStatus,
    ReminderResponse,
)
from resolve.services.decision_log_store import DecisionLogStore
from resolve.services.reminder_service import ReminderService

router = APIRouter()


def get_store(request: Request) -> DecisionLogStore:
    """Dependency that provides the application's DecisionLogStore.

    Override this dependency in tests via app.dependency_overrides.
    """
    return request.app.state.store


def get_reminder_service(request: Request) -> ReminderService:
    """Dependency that provides the ReminderService.

    Override this dependency in tests via app.dependency_overrides.
    """
    return request.app.state.reminders


@router.get("", response_model=list[DecisionLog], response_model_exclude_none=True)
async def list_decision_logs(store: DecisionLogStore = Depends(get_store)):
    """List all decision logs in creation order."""
    return store.list_logs()


@router.get("/quota", response_model=QuotaStatus)
async def get_quota(store: DecisionLogStore = Depends(get_store)):
    """Report free-tier usage so the front end can gate the create button."""
    return QuotaStatus(
        active_count=store.active_count(),
        free_tier_limit=store.free_tier_limit,
        quota_reached=store.is_quota_reached(),
    )


@router.post("", response_model=DecisionLog, response_model_exclude_none=True, status_code=201)
async def create_decision_log(
    request: DecisionLogCreate,
    store: DecisionLogStore = Depends(get_store),
):
    """Create a decision log from already-split, validated input.

    Raises:
        QuotaExceededError -> 409: Active logs at the free-tier limit
        PersistenceError -> 503: Storage write failed
    """
    return store.create(request)


@router.post("/form", response_model=DecisionLog, response_model_exclude_none=True, status_code=201)
async def create_decision_log_from_form(
    form: DecisionLogForm,
    store: DecisionLogStore = Depends(get_store),
):
    """Create a decision log from raw form input (newline-delimited pros/cons).

    Raises:
        FormValidationError -> 422: Missing title, pros/cons or key factors
        QuotaExceededError -> 409: Active logs at the free-tier limit
    """
    return store.create(form.to_create())


@router.get("/{log_id}", response_model=DecisionLog, response_model_exclude_none=True)
async def get_decision_log(log_id: str, store: DecisionLogStore = Depends(get_store)):
    """Get a single decision log.

    Raises:
        HTTPException(404): Log not found
    """
    log = store.get(log_id)
    if log is None:
        raise HTTPException(status_code=404, detail="Decision log not found")
    return log


@router.patch("/{log_id}", status_code=204)
async def update_decision_log(
    log_id: str,
    request: DecisionLogUpdate,
    store: DecisionLogStore = Depends(get_store),
):
    """Apply a partial update. Unknown ids are accepted and ignored."""
    store.update(log_id, request)
    return Response(status_code=204)


@router.put("/{log_id}/form", status_code=204)
async def update_decision_log_from_form(
    log_id: str,
    form: DecisionLogForm,
    store: DecisionLogStore = Depends(get_store),
):
    """Replace editable fields from raw edit-form input."""
    store.update(log_id, form.to_update())
    return Response(status_code=204)


@router.delete("/{log_id}", status_code=204)
async def delete_decision_log(log_id: str, store: DecisionLogStore = Depends(get_store)):
    """Delete a decision log. Unknown ids are accepted and ignored."""
    store.delete(log_id)
    return Response(status_code=204)


@router.post("/{log_id}/reminder", response_model=ReminderResponse)
async def schedule_reminder(
    log_id: str,
    store: DecisionLogStore = Depends(get_store),
    reminders: ReminderService = Depends(get_reminder_service),
):
    """Schedule a review reminder for a pending decision.

    Raises:
        HTTPException(404): Log not found
    """
    log = store.get(log_id)
    if log is None:
        raise HTTPException(status_code=404, detail="Decision log not found")
    fire_at = reminders.schedule_review(log)
    return ReminderResponse(scheduled=fire_at is not None, fire_at=fire_at)
