from academia.models.course import Course


def course_payload(**overrides):
    payload = {
        "title": "Data Structures",
        "code": "CS201",
        "credits": 4,
        "department": "Computer Science",
    }
    payload.update(overrides)
    return payload


def test_list_courses(client, seed):
    r = client.get("/api/courses")
    assert r.status_code == 200
    codes = {c["code"] for c in r.json()}
    assert codes == {"CS101", "CS499", "MATH101"}


def test_department_filter_returns_only_active_courses_in_department(client):
    for department in ("Computer Science", "Mathematics", "History"):
        r = client.get("/api/courses", params={"department": department})
        assert r.status_code == 200
        for course in r.json():
            assert course["department"] == department
            assert course["isActive"] is True

    r = client.get("/api/courses", params={"department": "Computer Science"})
    assert [c["code"] for c in r.json()] == ["CS101"]


def test_get_course_and_not_found(client, seed):
    r = client.get(f"/api/courses/{seed.course}")
    assert r.status_code == 200
    assert r.json()["lecturerId"] == seed.lecturer

    r = client.get("/api/courses/9999")
    assert r.status_code == 404
    assert r.json() == {"message": "Course not found"}


def test_lecturer_creates_course_owned_by_self(client, seed, lecturer_headers):
    r = client.post("/api/courses", json=course_payload(), headers=lecturer_headers)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["code"] == "CS201"
    assert body["lecturerId"] == seed.lecturer
    assert body["isActive"] is True


def test_admin_creates_course_for_lecturer(client, seed, admin_headers):
    r = client.post(
        "/api/courses",
        json=course_payload(lecturerId=seed.lecturer),
        headers=admin_headers,
    )
    assert r.status_code == 201
    assert r.json()["lecturerId"] == seed.lecturer

    r = client.post(
        "/api/courses",
        json=course_payload(code="CS202", lecturerId=seed.student),
        headers=admin_headers,
    )
    assert r.status_code == 400


def test_student_cannot_create_course_and_nothing_is_written(client, database, student_headers):
    with database.session() as db:
        before = db.query(Course).count()

    r = client.post("/api/courses", json=course_payload(), headers=student_headers)
    assert r.status_code == 403
    assert r.json() == {"message": "Insufficient permissions"}

    with database.session() as db:
        assert db.query(Course).count() == before


def test_create_course_requires_authentication(client):
    r = client.post("/api/courses", json=course_payload())
    assert r.status_code == 401


def test_create_course_invalid_and_duplicate(client, lecturer_headers):
    r = client.post("/api/courses", json={"title": "No code"}, headers=lecturer_headers)
    assert r.status_code == 400
    assert r.json() == {"message": "Invalid request data"}

    r = client.post("/api/courses", json=course_payload(code="CS101"), headers=lecturer_headers)
    assert r.status_code == 400
    assert r.json() == {"message": "Course code already exists"}


def test_update_course_partial(client, seed, lecturer_headers):
    r = client.put(
        f"/api/courses/{seed.course}",
        json={"isActive": False, "credits": 5},
        headers=lecturer_headers,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["isActive"] is False
    assert body["credits"] == 5
    assert body["title"] == "Introduction to Programming"

    r = client.put("/api/courses/9999", json={"credits": 2}, headers=lecturer_headers)
    assert r.status_code == 404


def test_course_enrollments_for_staff_only(client, seed, student_headers, lecturer_headers):
    client.post("/api/courses/enroll", json={"courseId": seed.course}, headers=student_headers)

    r = client.get(f"/api/courses/{seed.course}/enrollments", headers=lecturer_headers)
    assert r.status_code == 200
    assert [e["studentId"] for e in r.json()] == [seed.student]

    r = client.get(f"/api/courses/{seed.course}/enrollments", headers=student_headers)
    assert r.status_code == 403


def test_update_course_rejects_null_for_required_fields(client, seed, database, lecturer_headers):
    for field in ("credits", "title", "code", "department", "isActive"):
        r = client.put(f"/api/courses/{seed.course}", json={field: None}, headers=lecturer_headers)
        assert r.status_code == 400, field
        assert r.json() == {"message": "Invalid request data"}

    r = client.put(
        f"/api/courses/{seed.course}",
        json={"description": None, "syllabusUrl": None},
        headers=lecturer_headers,
    )
    assert r.status_code == 200
    assert r.json()["description"] is None

    with database.session() as db:
        course = db.get(Course, seed.course)
        assert course.credits == 3
        assert course.code == "CS101"
