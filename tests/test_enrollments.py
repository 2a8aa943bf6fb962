from academia.models.enrollment import Enrollment

from tests.conftest import auth_header, login


def enroll(client, headers, course_id):
    return client.post("/api/courses/enroll", json={"courseId": course_id}, headers=headers)


def test_enroll_creates_pending_enrollment(client, seed, student_headers):
    r = enroll(client, student_headers, seed.course)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "pending"
    assert body["courseId"] == seed.course
    assert body["studentId"] == seed.student


def test_enrolling_twice_keeps_one_row(client, seed, database, student_headers):
    assert enroll(client, student_headers, seed.course).status_code == 201

    r = enroll(client, student_headers, seed.course)
    assert r.status_code == 400
    assert r.json() == {"message": "Already enrolled in this course"}

    with database.session() as db:
        rows = (
            db.query(Enrollment)
            .filter(Enrollment.course_id == seed.course, Enrollment.student_id == seed.student)
            .count()
        )
    assert rows == 1


def test_enroll_unknown_course_is_404(client, student_headers):
    r = enroll(client, student_headers, 9999)
    assert r.status_code == 404


def test_only_students_enroll(client, seed, database, lecturer_headers):
    r = enroll(client, lecturer_headers, seed.course)
    assert r.status_code == 403

    with database.session() as db:
        assert db.query(Enrollment).count() == 0


def test_status_update_overwrites_without_guard(client, seed, student_headers, admin_headers):
    enrollment_id = enroll(client, student_headers, seed.course).json()["id"]

    for status in ("approved", "rejected", "approved"):
        r = client.put(
            f"/api/enrollments/{enrollment_id}/status",
            json={"status": status},
            headers=admin_headers,
        )
        assert r.status_code == 200, r.text
        assert r.json()["status"] == status


def test_status_update_rejects_pending_and_unknown_values(client, seed, student_headers, admin_headers):
    enrollment_id = enroll(client, student_headers, seed.course).json()["id"]

    for status in ("pending", "dropped"):
        r = client.put(
            f"/api/enrollments/{enrollment_id}/status",
            json={"status": status},
            headers=admin_headers,
        )
        assert r.status_code == 400


def test_status_update_unknown_enrollment_is_404(client, admin_headers):
    r = client.put("/api/enrollments/9999/status", json={"status": "approved"}, headers=admin_headers)
    assert r.status_code == 404
    assert r.json() == {"message": "Enrollment not found"}


def test_non_admin_cannot_change_status(client, seed, database, student_headers, lecturer_headers):
    enrollment_id = enroll(client, student_headers, seed.course).json()["id"]

    for headers in (student_headers, lecturer_headers):
        r = client.put(
            f"/api/enrollments/{enrollment_id}/status",
            json={"status": "approved"},
            headers=headers,
        )
        assert r.status_code == 403

    with database.session() as db:
        assert db.get(Enrollment, enrollment_id).status == "pending"


def test_pending_list_and_role_shaped_listing(client, seed, student_headers, admin_headers):
    enroll(client, student_headers, seed.course)
    math_id = enroll(client, student_headers, seed.math_course).json()["id"]
    client.put(f"/api/enrollments/{math_id}/status", json={"status": "approved"}, headers=admin_headers)

    r = client.get("/api/enrollments/pending", headers=admin_headers)
    assert r.status_code == 200
    assert [e["courseId"] for e in r.json()] == [seed.course]

    r = client.get("/api/enrollments/pending", headers=student_headers)
    assert r.status_code == 403

    r = client.get("/api/enrollments", headers=admin_headers)
    assert [e["status"] for e in r.json()] == ["pending"]

    r = client.get("/api/enrollments", headers=student_headers)
    assert len(r.json()) == 2


def test_student_cannot_read_another_students_enrollments(client, seed, other_student_headers, admin_headers):
    r = client.get(f"/api/enrollments/student/{seed.student}", headers=other_student_headers)
    assert r.status_code == 403

    r = client.get(f"/api/enrollments/student/{seed.student}", headers=admin_headers)
    assert r.status_code == 200


def test_register_enroll_approve_list(client, seed, admin_headers):
    r = client.post(
        "/api/register",
        json={
            "username": "freshman",
            "email": "freshman@example.com",
            "password": "freshman-pass",
            "role": "student",
            "firstName": "Fresh",
            "lastName": "Man",
        },
    )
    assert r.status_code == 201
    student_id = r.json()["id"]
    headers = auth_header(login(client, "freshman", "freshman-pass"))

    r = enroll(client, headers, seed.course)
    assert r.status_code == 201
    assert r.json()["status"] == "pending"
    enrollment_id = r.json()["id"]

    r = client.put(
        f"/api/enrollments/{enrollment_id}/status",
        json={"status": "approved"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.json()["status"] == "approved"

    r = client.get(f"/api/enrollments/student/{student_id}", headers=headers)
    assert r.status_code == 200
    assert any(e["id"] == enrollment_id and e["status"] == "approved" for e in r.json())
