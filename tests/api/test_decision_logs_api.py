"""Integration tests for decision log API endpoints.

Tests cover:
- Create from JSON and from raw form input
- Quota enforcement surfaced as 409 with the limit
- Partial updates, deletes and missing-id no-ops
- Storage failures surfaced as 503
- Review reminders for pending decisions
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

pytestmark = pytest.mark.integration

BASE = "/api/decision-logs"


def _create(api_client: TestClient, title: str, status: str = "Pending") -> dict:
    response = api_client.post(
        BASE,
        json={
            "title": title,
            "pros": ["upside"],
            "cons": ["downside"],
            "gutFeeling": 60,
            "keyFactors": ["Career"],
            "status": status,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================================
# Create
# ============================================================================


def test_create_returns_camel_case_log(api_client, job_offer):
    response = api_client.post(BASE, json=job_offer)

    assert response.status_code == 201
    body = response.json()
    assert body["id"]
    assert body["title"] == "Job offer"
    assert body["gutFeeling"] == 70
    assert body["keyFactors"] == ["Career"]
    assert body["status"] == "Pending"
    assert body["createdAt"] == body["updatedAt"]
    assert "reflection" not in body


def test_create_rejects_missing_key_factors(api_client, job_offer):
    response = api_client.post(BASE, json={**job_offer, "keyFactors": []})

    assert response.status_code == 422


def test_list_returns_logs_in_creation_order(api_client):
    for title in ["first", "second", "third"]:
        _create(api_client, title)

    response = api_client.get(BASE)

    assert response.status_code == 200
    assert [log["title"] for log in response.json()] == ["first", "second", "third"]


def test_get_single_log(api_client):
    created = _create(api_client, "Job offer")

    response = api_client.get(f"{BASE}/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_missing_log_returns_404(api_client):
    response = api_client.get(f"{BASE}/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Decision log not found"
    assert "debug_id" in response.json()


# ============================================================================
# Form input
# ============================================================================


def test_create_from_form_splits_pros_and_cons(api_client):
    response = api_client.post(
        f"{BASE}/form",
        json={
            "title": "  Move to Lisbon  ",
            "pros": "Lower rent\n\n  Better weather \n",
            "cons": "Far from family",
            "keyFactors": ["Finance", "Family"],
        },
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["title"] == "Move to Lisbon"
    assert body["pros"] == ["Lower rent", "Better weather"]
    assert body["cons"] == ["Far from family"]
    assert body["gutFeeling"] == 50
    assert body["status"] == "Pending"


def test_create_from_invalid_form_returns_field_errors(api_client, store):
    response = api_client.post(f"{BASE}/form", json={"title": " ", "pros": "", "cons": "", "keyFactors": []})

    assert response.status_code == 422
    assert response.json()["errors"] == {
        "title": "Decision title is required",
        "proscons": "Please add at least one pro or con",
        "keyFactors": "Please select at least one key factor",
    }
    assert store.logs == []


def test_update_from_edit_form(api_client):
    created = _create(api_client, "Job offer")

    response = api_client.put(
        f"{BASE}/{created['id']}/form",
        json={
            "title": "Job offer",
            "pros": "pay\nteam",
            "cons": "commute",
            "gutFeeling": 80,
            "keyFactors": ["Career"],
            "status": "Decision Made",
            "reflection": " Accepted ",
        },
    )

    assert response.status_code == 204
    body = api_client.get(f"{BASE}/{created['id']}").json()
    assert body["pros"] == ["pay", "team"]
    assert body["status"] == "Decision Made"
    assert body["reflection"] == "Accepted"


# ============================================================================
# Quota
# ============================================================================


def test_quota_endpoint(api_client):
    _create(api_client, "active")
    _create(api_client, "reviewed", "Reviewing Outcome")

    response = api_client.get(f"{BASE}/quota")

    assert response.status_code == 200
    assert response.json() == {"activeCount": 1, "freeTierLimit": 3, "quotaReached": False}


def test_fourth_active_log_returns_409(api_client, store):
    for i in range(3):
        _create(api_client, f"decision {i}")

    response = api_client.post(
        BASE,
        json={"title": "one too many", "pros": ["x"], "keyFactors": ["Health"]},
    )

    assert response.status_code == 409
    body = response.json()
    assert body["limit"] == 3
    assert "3 active decision logs" in body["detail"]
    assert "Resolve+" in body["detail"]
    assert len(store.logs) == 3
    assert api_client.get(f"{BASE}/quota").json()["quotaReached"] is True


def test_reviewing_a_log_reopens_quota(api_client):
    created = [_create(api_client, f"decision {i}") for i in range(3)]

    response = api_client.patch(f"{BASE}/{created[0]['id']}", json={"status": "Reviewing Outcome"})
    assert response.status_code == 204

    _create(api_client, "fourth")
    assert api_client.get(f"{BASE}/quota").json()["activeCount"] == 3


# ============================================================================
# Update / delete
# ============================================================================


def test_patch_merges_fields(api_client):
    created = _create(api_client, "Job offer")

    response = api_client.patch(
        f"{BASE}/{created['id']}",
        json={"status": "Reviewing Outcome", "outcome": "Great team", "id": "ignored"},
    )

    assert response.status_code == 204
    body = api_client.get(f"{BASE}/{created['id']}").json()
    assert body["id"] == created["id"]
    assert body["outcome"] == "Great team"
    assert body["title"] == "Job offer"
    assert body["createdAt"] == created["createdAt"]
    assert body["updatedAt"] != created["updatedAt"]


def test_patch_missing_id_is_accepted(api_client, slot):
    _create(api_client, "Job offer")
    before_document = slot.value

    response = api_client.patch(f"{BASE}/missing", json={"title": "ghost"})

    assert response.status_code == 204
    assert slot.value == before_document


def test_patch_null_title_returns_422(api_client):
    created = _create(api_client, "Job offer")

    response = api_client.patch(f"{BASE}/{created['id']}", json={"title": None})

    assert response.status_code == 422
    assert api_client.get(f"{BASE}/{created['id']}").json()["title"] == "Job offer"


def test_delete_log(api_client):
    created = _create(api_client, "Job offer")

    response = api_client.delete(f"{BASE}/{created['id']}")

    assert response.status_code == 204
    assert api_client.get(f"{BASE}/{created['id']}").status_code == 404


def test_delete_missing_id_is_accepted(api_client):
    response = api_client.delete(f"{BASE}/missing")

    assert response.status_code == 204


# ============================================================================
# Storage failures
# ============================================================================


def test_storage_failure_returns_503_and_keeps_state(api_client, slot, store):
    _create(api_client, "saved")
    slot.fail_writes = True

    response = api_client.post(
        BASE,
        json={"title": "lost", "pros": ["x"], "keyFactors": ["Health"]},
    )

    assert response.status_code == 503
    assert response.json()["detail"] == "Failed to save decision logs"
    assert [log.title for log in store.logs] == ["saved"]


# ============================================================================
# Reminders
# ============================================================================


def test_reminder_for_pending_log(api_client, scheduler, reminder_now):
    created = _create(api_client, "Job offer")

    response = api_client.post(f"{BASE}/{created['id']}/reminder")

    assert response.status_code == 200
    body = response.json()
    assert body["scheduled"] is True
    assert body["fireAt"].startswith((reminder_now + timedelta(days=7)).date().isoformat())
    assert scheduler.scheduled[0].body == "Don't forget to review your decision: Job offer"


def test_reminder_skipped_for_decided_log(api_client, scheduler):
    created = _create(api_client, "Job offer", "Decision Made")

    response = api_client.post(f"{BASE}/{created['id']}/reminder")

    assert response.status_code == 200
    assert response.json() == {"scheduled": False, "fireAt": None}
    assert scheduler.scheduled == []


def test_reminder_for_missing_log_returns_404(api_client):
    response = api_client.post(f"{BASE}/missing/reminder")

    assert response.status_code == 404
