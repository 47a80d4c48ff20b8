from __future__ import annotations

from datetime import date, time

import pytest

from src.class_attendance.class_attendance.main import create_app
from src.class_attendance.class_attendance.roster.model import Staff

from tests.fakes import build, ist, make_students, schedule_on

DAY = date(2024, 3, 1)
DURING = ist(2024, 3, 1, 9, 30)

PKG = "src.class_attendance.class_attendance"


@pytest.fixture
def container():
    c = build(
        students=make_students(
            ("Asha", {"gender": "Female", "year": "2", "class_section": "BSc", "rank": "CPL"}),
            ("Bala", {"gender": "Male", "year": "3", "class_section": "BSc", "rank": "SUO"}),
        ),
        staff=[Staff(10, "Staff One", "one", "1111"), Staff(20, "Staff Two", "two", "2222")],
    )
    c.schedules_repo.add(schedule_on(5, DAY, time(9, 0), time(10, 0)))
    return c


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    for module in ("attendance.service", "schedules.sweeper", "common.datetime_utils"):
        monkeypatch.setattr(f"{PKG}.{module}.now_utc", lambda: DURING)
    app = create_app(container=container)
    return app.test_client()


def _bulk(client, **overrides):
    body = {"staffId": 10, "scheduleId": 5, "pin": "1111", "presentStudentIds": [1]}
    body.update(overrides)
    return client.post("/api/attendance/bulk", json=body)


def test_bulk_submission_then_duplicate(client):
    resp = _bulk(client)
    assert resp.status_code == 200
    assert resp.get_json()["present"] == 1
    assert resp.get_json()["absent"] == 1
    assert resp.get_json()["scheduleClosed"] is False

    resp = _bulk(client)
    assert resp.status_code == 400
    assert resp.get_json() == {"message": "You have already submitted."}


@pytest.mark.parametrize(
    "overrides, status, message",
    [
        ({"pin": "0000"}, 401, "Invalid PIN."),
        ({"staffId": 99}, 404, "Staff not found."),
        ({"scheduleId": 77}, 404, "Invalid or expired class schedule."),
        ({"staffId": "abc"}, 400, "staffId is not a valid id"),
        ({"presentStudentIds": "1,2"}, 400, "presentStudentIds must be a list"),
    ],
)
def test_bulk_submission_errors(client, overrides, status, message):
    resp = _bulk(client, **overrides)
    assert resp.status_code == status
    assert resp.get_json()["message"] == message


def test_last_staff_closes_schedule(client, container):
    _bulk(client)
    resp = _bulk(client, staffId=20, pin="2222")

    assert resp.get_json()["scheduleClosed"] is True
    assert container.schedules_repo.get_by_id(5) is None


def test_single_update_staff_and_admin(client, container):
    resp = client.patch(
        "/api/attendance/update",
        json={"staffId": 10, "scheduleId": 5, "studentId": 2, "status": "present", "pin": "1111"},
    )
    assert resp.status_code == 200
    assert container.attendance_repo.for_staff(10, 5) == {2: "Present"}

    resp = client.patch(
        "/api/attendance/update",
        json={"studentId": 2, "status": "Absent", "pin": "1945", "classDate": "2024-03-01"},
    )
    assert resp.status_code == 200
    assert container.attendance_repo.for_staff(10, 5) == {2: "Absent"}


def test_single_update_rejects_bad_status(client):
    resp = client.patch(
        "/api/attendance/update",
        json={"studentId": 2, "status": "Late", "pin": "1945", "classDate": "2024-03-01"},
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Status must be Present or Absent"


def test_open_schedules_for_staff(client):
    assert [s["id"] for s in client.get("/api/attendance/schedule?staffId=10").get_json()] == [5]
    _bulk(client)
    assert client.get("/api/attendance/schedule?staffId=10").get_json() == []


def test_present_list_and_dates(client):
    _bulk(client, presentStudentIds=[1, 2])

    present = client.get("/api/attendance/present/2024-03-01").get_json()
    assert [s["name"] for s in present] == ["Asha", "Bala"]
    assert client.get("/api/attendance/all").get_json() == ["2024-03-01"]

    resp = client.get("/api/attendance/present/01-03-2024")
    assert resp.status_code == 400


def test_matrix_and_summary(client):
    _bulk(client)

    matrix = client.get("/api/attendance?classSection=all").get_json()
    assert matrix["allDates"] == ["2024-03-01"]
    assert [r["percentage"] for r in matrix["records"]] == ["100.0", "0.0"]

    summary = client.get("/api/attendance/summary/2024-03-01").get_json()
    assert summary["summary"]["totals"] == {"Boys": 0, "Girls": 1, "Total": 1}
    assert "Asha" in summary["report"]


def test_report_when_empty(client):
    resp = client.get("/api/attendance/report")
    assert resp.get_json()["report"] == "No attendance records found."


def test_schedule_create_duplicate_and_cancel(client):
    body = {"date": "2024-03-02", "startTime": "09:00", "endTime": "10:00", "staffIds": [10]}

    resp = client.post("/api/schedule", json=body)
    assert resp.status_code == 201
    schedule_id = resp.get_json()["schedule"]["id"]

    resp = client.post("/api/schedule", json=body)
    assert resp.status_code == 400

    resp = client.post("/api/schedule", json={**body, "startTime": "11:00", "endTime": "10:00"})
    assert resp.get_json()["message"] == "End time must be after start time"

    assert client.delete(f"/api/schedule/{schedule_id}").status_code == 200
    assert client.delete(f"/api/schedule/{schedule_id}").status_code == 404


def test_schedule_listing(client):
    assert [s["id"] for s in client.get("/api/schedule").get_json()["schedules"]] == [5]
    assert client.get("/api/schedule/2024-03-01").status_code == 200
    resp = client.get("/api/schedule/2024-03-09")
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "No class scheduled for this date"


def test_history_after_expiry_sweep(client, container, monkeypatch):
    _bulk(client)
    monkeypatch.setattr(f"{PKG}.schedules.sweeper.now_utc", lambda: ist(2024, 3, 1, 11, 0))

    history = client.get("/api/schedule/history").get_json()["history"]

    assert container.schedules_repo.get_by_id(5) is None
    [group] = history
    assert (group["classDate"], group["startTime"], group["endTime"]) == ("2024-03-01", "09:00", "10:00")
    by_staff = {row["staffId"]: row for row in group["staff"]}
    assert by_staff[10]["attendanceTaken"] is True
    assert by_staff[20]["attendanceTaken"] is False

    mine = client.get("/api/attendance/schedule/history?staffId=20").get_json()["history"]
    assert [g["staffId"] for g in mine] == [20]
