import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from acadsched.api.deps import get_room_pool
from acadsched.main import app

ACTOR = {"X-Actor": "Registrar  Office"}

SUBJECTS = [
    {"name": "DB SYSTEMS (LEC)", "lec": 2, "lab": 1, "comp_lab": "Yes"},
    {"name": "DB SYSTEMS (LAB)", "lec": 2, "lab": 1, "comp_lab": "Yes"},
    {"name": "NETWORKS (LEC)", "lec": 2, "lab": 0, "comp_lab": "No"},
    {"name": "P.E 1", "lec": 2, "lab": 0, "comp_lab": "No"},
]


@pytest.fixture()
def api(client, room_pool):
    app.dependency_overrides[get_room_pool] = lambda: room_pool
    return client


def _create_faculty(api, name, code, course_name, **extra):
    payload = {
        "professor_name": name,
        "qualified_courses": [{"course_code": code, "course_name": course_name, "units": 3}],
        **extra,
    }
    response = api.post("/api/faculty", json=payload, headers=ACTOR)
    assert response.status_code == 201, response.text
    return response.json()


def _create_schedule(api, section_id="BT1101", semester="1st Semester"):
    response = api.post(
        "/api/schedules",
        json={
            "section_id": section_id,
            "section_name": section_id,
            "program": "BSIT",
            "semester": semester,
            "year_level": "1st Year",
            "year": "2026",
            "subjects": SUBJECTS,
        },
        headers=ACTOR,
    )
    assert response.status_code == 201, response.text
    return response.json()


def _edit(api, schedule_id, *operations):
    return api.post(f"/api/schedules/{schedule_id}/edits", json={"operations": list(operations)}, headers=ACTOR)


def _entry(schedule, key):
    return next(item for item in schedule["entries"] if item["key"] == key)


def test_schedule_lifecycle_with_assignment_and_substitute(api):
    for name, code, course_name in [
        ("Ana Cruz", "NET", "Networks"),
        ("Ben Uy", "NET", "Networks"),
        ("Cara Diaz", "DB", "Database Systems"),
    ]:
        _create_faculty(api, name, code, course_name)

    created = _create_schedule(api)
    assert created["id"] == "BT1101_1st"
    assert created["status"] == "draft"
    assert created["unplaced_subjects"] == [subject["name"] for subject in SUBJECTS]
    assert api.post(
        "/api/schedules",
        json={"section_id": "BT1101", "section_name": "BT1101", "semester": "1st Semester"},
    ).status_code == 409

    edited = _edit(
        api,
        "BT1101_1st",
        {"op": "place", "key": "Tuesday_1:00PM", "subject": "NETWORKS (LEC)"},
        {"op": "set_room", "key": "Tuesday_1:00PM", "room": "ROOM 301"},
    )
    assert edited.status_code == 200, edited.text
    entry = _entry(edited.json(), "Tuesday_1:00PM")
    assert (entry["duration_slots"], entry["end_time"], entry["room"]) == (4, "3:00PM", "ROOM 301")
    assert "NETWORKS (LEC)" not in edited.json()["unplaced_subjects"]

    covered = _edit(api, "BT1101_1st", {"op": "place", "key": "Tuesday_1:30PM", "subject": "P.E 1"})
    assert covered.status_code == 409
    assert covered.json()["details"]["reason"] == "covered"
    assert _edit(api, "BT1101_1st", {"op": "remove", "key": "Sunday_7:00AM"}).status_code == 422

    rooms = api.get("/api/schedules/BT1101_1st/cells/Tuesday_1:00PM/rooms").json()
    assert rooms["status"] == "available"
    assert rooms["candidates"] == ["ROOM 301", "ROOM 302", "ROOM 303"]
    empty_cell = api.get("/api/schedules/BT1101_1st/cells/Monday_7:00AM/rooms").json()
    assert empty_cell["status"] == "no-subject"

    professors = api.get("/api/schedules/BT1101_1st/cells/Tuesday_1:00PM/professors").json()
    assert professors["candidates"] == ["Ana Cruz", "Ben Uy"]

    assigned = api.put(
        "/api/schedules/BT1101_1st/professor-assignments",
        json={"assignments": {"Tuesday_1:00PM": "Ana  Cruz"}},
        headers=ACTOR,
    )
    assert assigned.status_code == 200, assigned.text
    assert _entry(assigned.json(), "Tuesday_1:00PM")["assigned_professor"] == "Ana Cruz"
    assert assigned.json()["unassigned_keys"] == []
    unchanged = api.put(
        "/api/schedules/BT1101_1st/professor-assignments",
        json={"assignments": {"Tuesday_1:00PM": "Ana Cruz"}},
    )
    assert unchanged.status_code == 422

    submitted = api.post("/api/schedules/BT1101_1st/submit", headers=ACTOR)
    assert submitted.status_code == 200, submitted.text
    assert submitted.json()["status"] == "submitted"
    locked = _edit(api, "BT1101_1st", {"op": "remove", "key": "Tuesday_1:00PM"})
    assert locked.status_code == 409
    assert locked.json()["details"]["reason"] == "locked"

    substitutes = api.get("/api/schedules/BT1101_1st/cells/Tuesday_1:00PM/substitutes").json()
    assert substitutes["candidates"] == ["Ben Uy"]
    same = api.put("/api/schedules/BT1101_1st/cells/Tuesday_1:00PM/substitute", json={"substitute_teacher": "Ana Cruz"})
    assert same.status_code == 409
    assert same.json()["details"]["reason"] == "same-professor"
    substituted = api.put(
        "/api/schedules/BT1101_1st/cells/Tuesday_1:00PM/substitute",
        json={"substitute_teacher": "Ben Uy"},
        headers=ACTOR,
    )
    assert substituted.status_code == 200, substituted.text
    entry = _entry(substituted.json(), "Tuesday_1:00PM")
    assert (entry["assigned_professor"], entry["substitute_teacher"]) == ("Ana Cruz", "Ben Uy")

    professor_view = api.get("/api/views/professors").json()
    assert [item["resource"] for item in professor_view] == ["Ben Uy"]
    room_view = api.get("/api/views/rooms", params={"semester": "1st Semester"}).json()
    assert room_view[0]["resource"] == "ROOM 301"
    assert room_view[0]["entries"][0]["section"] == "BT1101"

    classes = api.get("/api/faculty/Ana Cruz/classes").json()
    assert [(item["key"], item["substitute_teacher"]) for item in classes] == [("Tuesday_1:00PM", "Ben Uy")]

    archived = api.post("/api/schedules/BT1101_1st/cells/Tuesday_1:00PM/substitute/archive", headers=ACTOR)
    assert archived.status_code == 200, archived.text
    record = archived.json()
    assert (record["original_professor"], record["substitute_teacher"]) == ("Ana Cruz", "Ben Uy")
    assert (record["day"], record["start_time"], record["end_time"]) == ("Tuesday", "1:00PM", "3:00PM")

    current = api.get("/api/schedules/BT1101_1st").json()
    entry = _entry(current, "Tuesday_1:00PM")
    assert (entry["assigned_professor"], entry["substitute_teacher"]) == ("Ana Cruz", "")
    again = api.post("/api/schedules/BT1101_1st/cells/Tuesday_1:00PM/substitute/archive")
    assert again.json()["details"]["reason"] == "no-substitute"

    history = api.get("/api/substitute-history", params={"professor": "Ben Uy"}).json()
    assert len(history) == 1
    assert history[0]["schedule_id"] == "BT1101_1st"

    logs = api.get("/api/activity/logs", params={"entity_id": "BT1101_1st"}).json()
    actions = {item["action"] for item in logs}
    assert {"schedule.create", "schedule.edit", "schedule.submit", "substitute.archive"} <= actions
    assert all(item["actor"] == "Registrar Office" for item in logs if item["action"] == "schedule.submit")

    assert api.get("/api/conflicts").json() == {"conflicts": [], "suggested_resolutions": []}


def test_batch_substitutes_report_each_item(api):
    _create_faculty(api, "Ana Cruz", "NET", "Networks")
    _create_faculty(api, "Ben Uy", "NET", "Networks")
    _create_schedule(api)
    _edit(api, "BT1101_1st", {"op": "place", "key": "Monday_9:00AM", "subject": "NETWORKS (LEC)"})
    api.put(
        "/api/schedules/BT1101_1st/professor-assignments",
        json={"assignments": {"Monday_9:00AM": "Ana Cruz"}},
    )

    response = api.put(
        "/api/substitutes",
        json={
            "items": [
                {"schedule_id": "BT1101_1st", "key": "Monday_9:00AM", "substitute_teacher": "Ben Uy"},
                {"schedule_id": "BT1101_1st", "key": "Wednesday_9:00AM", "substitute_teacher": "Ben Uy"},
                {"schedule_id": "NOPE_1st", "key": "Monday_9:00AM", "substitute_teacher": "Ben Uy"},
                {"schedule_id": "BT1101_1st", "key": "Sunday_7:00AM", "substitute_teacher": "Ben Uy"},
            ]
        },
    )
    assert response.status_code == 200, response.text
    results = response.json()
    assert [item["saved"] for item in results] == [True, False, False, False]
    assert [item["reason"] for item in results] == [None, "missing", "missing-schedule", "invalid-key"]

    cleared = api.post("/api/faculty/Ana Cruz/substitutes/archive")
    assert cleared.status_code == 200
    assert [item["doc_key"] for item in cleared.json()] == ["Monday_9:00AM"]


def test_assignments_need_qualified_professors_in_every_slot(api):
    _create_faculty(api, "Ana Cruz", "NET", "Networks")
    _create_schedule(api)
    _edit(
        api,
        "BT1101_1st",
        {"op": "place", "key": "Monday_9:00AM", "subject": "NETWORKS (LEC)"},
        {"op": "place", "key": "Tuesday_9:00AM", "subject": "DB SYSTEMS (LEC)"},
    )

    response = api.put(
        "/api/schedules/BT1101_1st/professor-assignments",
        json={"assignments": {"Monday_9:00AM": "Ana Cruz"}},
    )
    assert response.status_code == 422
    assert [issue["key"] for issue in response.json()["details"]["issues"]] == ["Tuesday_9:00AM"]

    response = api.put(
        "/api/schedules/BT1101_1st/professor-assignments",
        json={"assignments": {"Monday_9:00AM": "Ana Cruz", "Tuesday_9:00AM": "Ana Cruz"}},
    )
    assert response.status_code == 422
    assert "not qualified" in response.json()["details"]["issues"][0]["message"]

    response = api.put(
        "/api/schedules/BT1101_1st/professor-assignments",
        json={"assignments": {"Wednesday_9:00AM": "Ana Cruz"}},
    )
    assert response.status_code == 422

    submit = api.post("/api/schedules/BT1101_1st/submit")
    assert submit.status_code == 422
    assert len(submit.json()["details"]["issues"]) == 2


def test_faculty_non_teaching_and_workload(api):
    _create_faculty(api, "Ana Cruz", "NET", "Networks", shift="PART-TIME")
    assert api.post("/api/faculty", json={"professor_name": "Ana  Cruz"}).status_code == 409
    _create_schedule(api)
    _edit(api, "BT1101_1st", {"op": "place", "key": "Tuesday_1:00PM", "subject": "NETWORKS (LEC)"})
    api.put(
        "/api/schedules/BT1101_1st/professor-assignments",
        json={"assignments": {"Tuesday_1:00PM": "Ana Cruz"}},
    )

    blocks = {
        "assignments": [
            {"day": "Tuesday", "time": "1:30PM", "type": "Consultation", "hours": 1},
            {"day": "Wednesday", "time": "9:00AM", "type": "Consultation", "hours": 2},
        ]
    }
    check = api.post("/api/faculty/Ana Cruz/non-teaching/check", json=blocks).json()
    assert [row["conflict"] for row in check["rows"]] == [True, False]
    assert check["has_conflict"] is True
    assert api.put("/api/faculty/Ana Cruz/non-teaching", json=blocks).status_code == 422

    late = {"assignments": [{"day": "Monday", "time": "7:00PM", "type": "Administrative", "hours": 1}]}
    assert api.put("/api/faculty/Ana Cruz/non-teaching", json=late).status_code == 422

    saved = api.put("/api/faculty/Ana Cruz/non-teaching", json={"assignments": blocks["assignments"][1:]})
    assert saved.status_code == 200, saved.text

    workload = api.get("/api/faculty/Ana Cruz/workload").json()
    assert workload["units"] == 3
    assert workload["unit_cap"] == 15
    assert workload["overloaded"] is False
    assert workload["teaching_hours"] == 2
    assert workload["consultation_hours"] == 2

    view = api.get("/api/views/professors").json()
    kinds = [entry["kind"] for entry in view[0]["entries"]]
    assert kinds == ["class", "non-teaching"]

    assert api.post("/api/faculty/Ana Cruz/archive").status_code == 200
    assert api.get("/api/faculty").json() == []
    assert len(api.get("/api/faculty", params={"include_archived": True}).json()) == 1


def test_missing_resources_return_404(api):
    response = api.get("/api/schedules/NOPE_1st")
    assert response.status_code == 404
    assert "NOPE_1st" in response.json()["message"]
    assert api.get("/api/faculty/Nobody/workload").status_code == 404


def test_semester_spellings_share_one_term(api):
    _create_faculty(api, "Ana Cruz", "NET", "Networks")
    assert _create_schedule(api, "BT1101", "1st Semester")["id"] == "BT1101_1st"
    assert _create_schedule(api, "BT1102", "1st Sem")["id"] == "BT1102_1st"
    for schedule_id in ("BT1101_1st", "BT1102_1st"):
        placed = _edit(api, schedule_id, {"op": "place", "key": "Monday_9:00AM", "subject": "NETWORKS (LEC)"})
        assert placed.status_code == 200, placed.text
    assigned = api.put(
        "/api/schedules/BT1101_1st/professor-assignments",
        json={"assignments": {"Monday_9:00AM": "Ana Cruz"}},
    )
    assert assigned.status_code == 200, assigned.text

    professors = api.get("/api/schedules/BT1102_1st/cells/Monday_9:00AM/professors").json()
    assert professors["status"] == "no-qualified-candidate"
    assert professors["candidates"] == []

    response = api.put(
        "/api/schedules/BT1102_1st/professor-assignments",
        json={"assignments": {"Monday_9:00AM": "Ana Cruz"}},
    )
    assert response.status_code == 422
    assert "busy" in response.json()["details"]["issues"][0]["message"]


def test_candidates_follow_the_schedule_program(api):
    _create_faculty(
        api,
        "Ana Cruz",
        "NET",
        "Networks",
        qualified_courses=[{"course_code": "NET", "course_name": "Networks", "units": 3, "program": "BSCS"}],
    )
    _create_faculty(api, "Ben Uy", "NET", "Networks")
    _create_schedule(api)
    _edit(api, "BT1101_1st", {"op": "place", "key": "Monday_9:00AM", "subject": "NETWORKS (LEC)"})

    professors = api.get("/api/schedules/BT1101_1st/cells/Monday_9:00AM/professors").json()
    assert professors["candidates"] == ["Ben Uy"]
    response = api.put(
        "/api/schedules/BT1101_1st/professor-assignments",
        json={"assignments": {"Monday_9:00AM": "Ana Cruz"}},
    )
    assert response.status_code == 422


def test_failed_commit_returns_503_and_can_be_retried(api, monkeypatch):
    _create_schedule(api)

    def locked(self):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(Session, "commit", locked)
    failed = _edit(api, "BT1101_1st", {"op": "place", "key": "Monday_9:00AM", "subject": "NETWORKS (LEC)"})
    assert failed.status_code == 503
    assert set(failed.json()) == {"message", "details"}
    assert failed.json()["details"] == {}

    monkeypatch.undo()
    assert api.get("/api/schedules/BT1101_1st").json()["entries"] == []
    retried = _edit(api, "BT1101_1st", {"op": "place", "key": "Monday_9:00AM", "subject": "NETWORKS (LEC)"})
    assert retried.status_code == 200, retried.text
    assert _entry(retried.json(), "Monday_9:00AM")["subject"] == "NETWORKS (LEC)"


def test_batch_substitutes_keep_earlier_documents_when_a_later_commit_fails(api, monkeypatch):
    _create_faculty(api, "Ana Cruz", "NET", "Networks")
    _create_faculty(api, "Ben Uy", "NET", "Networks")
    for section_id, key in (("BT1101", "Monday_9:00AM"), ("BT1102", "Tuesday_9:00AM")):
        _create_schedule(api, section_id)
        _edit(api, f"{section_id}_1st", {"op": "place", "key": key, "subject": "NETWORKS (LEC)"})
        assigned = api.put(
            f"/api/schedules/{section_id}_1st/professor-assignments",
            json={"assignments": {key: "Ana Cruz"}},
        )
        assert assigned.status_code == 200, assigned.text

    original_commit = Session.commit
    calls = []

    def second_commit_fails(self):
        calls.append(1)
        if len(calls) == 2:
            raise SQLAlchemyError("database is locked")
        return original_commit(self)

    monkeypatch.setattr(Session, "commit", second_commit_fails)
    response = api.put(
        "/api/substitutes",
        json={
            "items": [
                {"schedule_id": "BT1101_1st", "key": "Monday_9:00AM", "substitute_teacher": "Ben Uy"},
                {"schedule_id": "BT1102_1st", "key": "Tuesday_9:00AM", "substitute_teacher": "Ben Uy"},
            ]
        },
    )
    monkeypatch.undo()
    assert response.status_code == 200, response.text
    results = response.json()
    assert [item["saved"] for item in results] == [True, False]
    assert results[1]["reason"] == "persistence"

    first = api.get("/api/schedules/BT1101_1st").json()
    second = api.get("/api/schedules/BT1102_1st").json()
    assert _entry(first, "Monday_9:00AM")["substitute_teacher"] == "Ben Uy"
    assert _entry(second, "Tuesday_9:00AM")["substitute_teacher"] == ""
