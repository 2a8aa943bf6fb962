from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from academia.core.config import Settings
from academia.core.security import hash_password
from academia.db.database import Database
from academia.main import create_app
from academia.models.assignment import Assignment
from academia.models.course import Course
from academia.models.user import User
from academia.services.ai import AIService

PASSWORD = "password123"


class FakeCompletions:
    """Stands in for ``client.chat.completions``; returns ``content`` or raises ``error``."""

    def __init__(self):
        self.content = None
        self.error = None
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self):
        self.chat = SimpleNamespace(completions=FakeCompletions())


def login(client, username: str, password: str = PASSWORD) -> str:
    r = client.post("/api/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["accessToken"]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        DATABASE_TYPE=None,
        SECRET_KEY="test-secret-key",
        BCRYPT_ROUNDS=4,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_LEVEL="WARNING",
        OPENAI_API_KEY=None,
    )


@pytest.fixture()
def database(settings):
    db = Database.from_settings(settings)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture()
def fake_openai():
    return FakeOpenAI()


@pytest.fixture()
def seed(database):
    """Seed a clean minimal dataset for each test."""
    hashed = hash_password(PASSWORD, rounds=4)
    with database.transaction() as db:
        student = User(username="student1", email="student1@example.com", role="student",
                       first_name="Student", last_name="One", hashed_password=hashed)
        other_student = User(username="student2", email="student2@example.com", role="student",
                             first_name="Student", last_name="Two", hashed_password=hashed)
        lecturer = User(username="lecturer1", email="lecturer1@example.com", role="lecturer",
                        first_name="Lecturer", last_name="One", hashed_password=hashed)
        admin = User(username="admin1", email="admin1@example.com", role="admin",
                     first_name="Admin", last_name="One", hashed_password=hashed)
        db.add_all([student, other_student, lecturer, admin])
        db.flush()

        cs101 = Course(title="Introduction to Programming", code="CS101", credits=3,
                       department="Computer Science", lecturer_id=lecturer.id, is_active=True)
        cs499 = Course(title="Retired Seminar", code="CS499", credits=1,
                       department="Computer Science", lecturer_id=lecturer.id, is_active=False)
        math101 = Course(title="Calculus I", code="MATH101", credits=4,
                         department="Mathematics", is_active=True)
        db.add_all([cs101, cs499, math101])
        db.flush()

        due = datetime.now(timezone.utc) + timedelta(days=7)
        hw1 = Assignment(course_id=cs101.id, title="HW1", due_date=due, weight=10, max_points=100)
        project = Assignment(course_id=cs101.id, title="Project", due_date=due, weight=30,
                             max_points=50, file_required=True)
        db.add_all([hw1, project])
        db.flush()

        ids = SimpleNamespace(
            student=student.id,
            other_student=other_student.id,
            lecturer=lecturer.id,
            admin=admin.id,
            course=cs101.id,
            inactive_course=cs499.id,
            math_course=math101.id,
            assignment=hw1.id,
            file_assignment=project.id,
        )
    return ids


@pytest.fixture()
def app(settings, database, fake_openai):
    return create_app(settings, database=database, ai_service=AIService(fake_openai, "gpt-4o"))


@pytest.fixture()
def client(app, seed):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def student_headers(client):
    return auth_header(login(client, "student1"))


@pytest.fixture()
def other_student_headers(client):
    return auth_header(login(client, "student2"))


@pytest.fixture()
def lecturer_headers(client):
    return auth_header(login(client, "lecturer1"))


@pytest.fixture()
def admin_headers(client):
    return auth_header(login(client, "admin1"))
