import pytest
from datetime import timedelta
from fastapi import status

from app.core.time_utils import utc_today


def _create(client, employee_id, start, end, leave_type="vacation", **extra):
    return client.post("/api/leave-requests", json={
        "employee_id": employee_id,
        "leave_type": leave_type,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        **extra,
    })


def test_create_leave_request(client, employee, next_monday):
    response = _create(client, employee.id, next_monday, next_monday + timedelta(days=4), reason="Family trip")

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["status"] == "pending"
    assert data["days_requested"] == 5
    assert data["leave_type"] == "vacation"
    assert data["employee_name"] == "Alice Martin"
    assert data["reason"] == "Family trip"


def test_overlapping_request_returns_conflict(client, employee, next_monday):
    _create(client, employee.id, next_monday, next_monday + timedelta(days=4))
    response = _create(client, employee.id, next_monday + timedelta(days=2), next_monday + timedelta(days=7), "sick")

    assert response.status_code == status.HTTP_409_CONFLICT
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["code"] == "CONFLICTING_LEAVE_REQUEST"


def test_end_before_start_reports_field(client, employee, next_monday):
    response = _create(client, employee.id, next_monday, next_monday - timedelta(days=1))
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["field"] == "end_date"


def test_past_start_reports_field(client, employee):
    past = utc_today() - timedelta(days=3)
    response = _create(client, employee.id, past, past + timedelta(days=1))
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["field"] == "start_date"


def test_unknown_leave_type_is_rejected(client, employee, next_monday):
    response = _create(client, employee.id, next_monday, next_monday, leave_type="sabbatical")
    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == "leave_type"


def test_unknown_employee(client, db_session, next_monday):
    response = _create(client, 4242, next_monday, next_monday)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["errors"][0]["code"] == "EMPLOYEE_NOT_FOUND"


def test_approve_and_reapprove(client, employee, next_monday):
    request_id = _create(client, employee.id, next_monday, next_monday + timedelta(days=4)).json()["id"]

    response = client.put(
        f"/api/leave-requests/{request_id}/status",
        headers={"X-Actor": "manager-7"},
        json={"status": "approved", "manager_comments": "Enjoy"},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["success"] is True

    fetched = client.get(f"/api/leave-requests/{request_id}").json()
    assert fetched["status"] == "approved"
    assert fetched["manager_comments"] == "Enjoy"
    assert fetched["reviewed_by"] == "manager-7"

    response = client.put(f"/api/leave-requests/{request_id}/status", json={"status": "rejected"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    error = response.json()["errors"][0]
    assert error["code"] == "INVALID_STATUS_TRANSITION"
    assert error["details"] == {"current_status": "approved", "attempted_status": "rejected"}


def test_get_missing_request(client, db_session):
    response = client.get("/api/leave-requests/999")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["errors"][0]["code"] == "LEAVE_REQUEST_NOT_FOUND"


def test_listings(client, make_employee, next_monday):
    alice, bob = make_employee("Alice"), make_employee("Bob")
    first = _create(client, alice.id, next_monday, next_monday + timedelta(days=1)).json()["id"]
    second = _create(client, bob.id, next_monday, next_monday + timedelta(days=1)).json()["id"]
    client.put(f"/api/leave-requests/{first}/status", json={"status": "cancelled"})

    pending = client.get("/api/leave-requests/pending").json()
    assert [r["id"] for r in pending] == [second]

    cancelled = client.get("/api/leave-requests/status/cancelled").json()
    assert [r["id"] for r in cancelled] == [first]

    mine = client.get(f"/api/leave-requests/employee/{alice.id}").json()
    assert [r["id"] for r in mine] == [first]


def test_remaining_days(client, employee, next_monday):
    request_id = _create(client, employee.id, next_monday, next_monday + timedelta(days=2)).json()["id"]
    client.put(f"/api/leave-requests/{request_id}/status", json={"status": "approved"})

    response = client.get(f"/api/leave-requests/employee/{employee.id}/remaining/{next_monday.year}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["remaining_days"] == 19


def test_conflict_check(client, employee, next_monday):
    request_id = _create(client, employee.id, next_monday, next_monday + timedelta(days=4)).json()["id"]
    url = f"/api/leave-requests/employee/{employee.id}/conflicts"
    params = {"start_date": next_monday.isoformat(), "end_date": next_monday.isoformat()}

    assert client.get(url, params=params).json()["has_conflict"] is True
    excluded = client.get(url, params={**params, "exclude_request_id": request_id})
    assert excluded.json()["has_conflict"] is False
