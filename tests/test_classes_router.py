# /tests/test_classes_router.py

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services import database_service, report_service

SUBJECTS = [{"name": n, "maxScore": 100} for n in ("Mathematics", "English", "Physics")]


def student_payload(name, scores):
    return {
        "name": name,
        "subjectScores": [{"subjectName": s["name"], "score": v} for s, v in zip(SUBJECTS, scores)],
    }


@pytest.fixture
def override_dependencies(session_factory):
    """Points every request and background job at the test database."""
    def _db_service():
        session = session_factory()
        try:
            yield database_service.DatabaseService(session)
        finally:
            session.close()

    app.dependency_overrides[database_service.get_db_service] = _db_service
    app.dependency_overrides[database_service.get_session_factory] = lambda: session_factory
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_dependencies):
    with TestClient(app) as test_client:
        yield test_client


def create_class_with_students(client, students):
    response = client.post("/api/classes", json={"name": "SS 2 Gold", "subjects": SUBJECTS})
    assert response.status_code == 201
    class_id = response.json()["id"]
    student_ids = []
    for name, scores in students:
        response = client.post(f"/api/classes/{class_id}/students", json=student_payload(name, scores))
        assert response.status_code == 201
        student_ids.append(response.json()["id"])
    return class_id, student_ids


def test_health_check(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "SCOMP Backend is running!"


def test_create_class_validation_errors(client):
    response = client.post("/api/classes", json={"name": "Tiny", "subjects": SUBJECTS[:1]})
    assert response.status_code == 422
    assert "3 class subjects are required" in response.json()["detail"]

    client.post("/api/classes", json={"name": "Taken", "subjects": SUBJECTS})
    response = client.post("/api/classes", json={"name": "Taken", "subjects": SUBJECTS})
    assert response.status_code == 409


def test_add_student_errors(client):
    class_id, _ = create_class_with_students(client, [])

    response = client.post(f"/api/classes/{class_id}/students", json=student_payload("Ada", [150, 1, 1]))
    assert response.status_code == 422
    assert "exceeds the maximum score" in response.json()["detail"]

    response = client.post("/api/classes/cls_missing/students", json=student_payload("Ada", [1, 1, 1]))
    assert response.status_code == 404


def test_report_needs_two_students(client):
    class_id, _ = create_class_with_students(client, [("Ada Obi", [10, 10, 10])])

    response = client.post(f"/api/classes/{class_id}/report")
    assert response.status_code == 422
    assert response.json()["detail"] == "a minimum of 2 students is required to generate a report for this class"


def test_generate_report_end_to_end(override_dependencies):
    with TestClient(app) as client:
        class_id, (ada, bola, chidi) = create_class_with_students(client, [
            ("Ada Obi", [90, 80, 70]),
            ("Bola Ade", [90, 80, 70]),
            ("Chidi Eze", [50, 50, 50]),
        ])
        response = client.post(f"/api/classes/{class_id}/report")
        assert response.status_code == 202
        assert response.json()["classId"] == class_id
    # Leaving the client runs the shutdown hook, which waits for the report task.

    with TestClient(app) as client:
        details = client.get(f"/api/classes/{class_id}").json()
        assert details["report"]["totalStudents"] == 3
        assert details["report"]["highestStudentScore"] == 240
        assert details["report"]["lowestStudentScoreAsPercentage"] == 50.0

        student = client.get(f"/api/classes/{class_id}/students/{bola}").json()
        assert student["report"]["classPosition"] == 2
        assert student["report"]["classGrade"] == "Excellent"
        assert [s["subjectPosition"] for s in student["report"]["subjectReports"]] == [2, 2, 2]

        response = client.post(f"/api/classes/{class_id}/report")
        assert response.status_code == 409

        response = client.get("/api/classes", params={"hasReport": "true"})
        assert [c["id"] for c in response.json()] == [class_id]

        summary = client.get("/api/dashboard/summary").json()
        assert summary == {"classCount": 1, "studentCount": 3, "reportCount": 1}

        response = client.get(f"/api/classes/{class_id}/report/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "report_ss_2_gold.csv" in response.headers["content-disposition"]
        assert "Chidi Eze" in response.text


def test_unexpected_errors_are_not_leaked(client, mocker):
    mocker.patch.object(report_service, "request_class_report", side_effect=RuntimeError("connection string leaked"))

    response = client.post("/api/classes/cls_any/report")

    assert response.status_code == 500
    assert response.json()["detail"] == "An unexpected server error occurred."
    assert "leaked" not in response.text


def test_unknown_class_and_student(client):
    assert client.get("/api/classes/cls_missing").status_code == 404
    assert client.get("/api/classes/cls_missing/students/stu_missing").status_code == 404
    assert client.get("/api/classes/cls_missing/report/export").status_code == 404
