from academia.models.password_reset import PasswordReset
from academia.models.user import User

from tests.conftest import PASSWORD, auth_header, login


def register_payload(**overrides):
    payload = {
        "username": "newstudent",
        "email": "newstudent@example.com",
        "password": "supersecret1",
        "role": "student",
        "firstName": "New",
        "lastName": "Student",
    }
    payload.update(overrides)
    return payload


def test_register_returns_user_without_password(client):
    r = client.post("/api/register", json=register_payload())
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["username"] == "newstudent"
    assert body["role"] == "student"
    assert body["firstName"] == "New"
    assert "password" not in body
    assert "hashedPassword" not in body


def test_register_duplicate_username_is_400(client):
    r = client.post("/api/register", json=register_payload(username="student1"))
    assert r.status_code == 400
    assert r.json() == {"message": "Username or email already registered"}


def test_register_invalid_role_is_400_with_generic_message(client):
    r = client.post("/api/register", json=register_payload(role="dean"))
    assert r.status_code == 400
    assert r.json() == {"message": "Invalid request data"}


def test_login_by_username_and_email(client):
    assert login(client, "student1")
    assert login(client, "student1@example.com")


def test_login_wrong_password_is_401(client):
    r = client.post("/api/login", json={"username": "student1", "password": "nope-nope"})
    assert r.status_code == 401
    assert r.json() == {"message": "Invalid username or password"}


def test_current_user_requires_token(client):
    r = client.get("/api/user")
    assert r.status_code == 401
    assert r.json() == {"message": "Authentication required"}
    assert r.headers["www-authenticate"] == "Bearer"

    r = client.get("/api/user", headers=auth_header("not-a-jwt"))
    assert r.status_code == 401


def test_current_user_returns_logged_in_user(client, lecturer_headers):
    r = client.get("/api/user", headers=lecturer_headers)
    assert r.status_code == 200
    assert r.json()["username"] == "lecturer1"
    assert r.json()["role"] == "lecturer"


def test_logout(client, student_headers):
    r = client.post("/api/logout", headers=student_headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Logged out successfully"


def test_password_recovery_flow(client):
    r = client.post("/api/password-recovery/request", json={"identifier": "student1@example.com"})
    assert r.status_code == 200
    token = r.json()["resetToken"]

    r = client.get(f"/api/password-recovery/verify/{token}")
    assert r.status_code == 200
    assert r.json()["message"] == "Token is valid"

    r = client.post(
        "/api/password-recovery/reset",
        json={"token": token, "newPassword": "brand-new-pass"},
    )
    assert r.status_code == 200

    assert login(client, "student1", "brand-new-pass")
    r = client.post("/api/login", json={"username": "student1", "password": PASSWORD})
    assert r.status_code == 401

    # tokens are single use
    r = client.post(
        "/api/password-recovery/reset",
        json={"token": token, "newPassword": "another-pass1"},
    )
    assert r.status_code == 400
    assert r.json() == {"message": "Invalid or expired reset token"}


def test_password_recovery_unknown_identifier_reveals_nothing(client, database):
    r = client.post("/api/password-recovery/request", json={"identifier": "ghost@example.com"})
    assert r.status_code == 200
    assert r.json()["resetToken"] is None

    with database.session() as db:
        assert db.query(PasswordReset).count() == 0


def test_password_recovery_invalid_token(client):
    r = client.get("/api/password-recovery/verify/does-not-exist")
    assert r.status_code == 400


def test_register_email_differing_only_in_case_is_400(client, database):
    r = client.post(
        "/api/register",
        json=register_payload(username="mallory", email="Student1@Example.com"),
    )
    assert r.status_code == 400
    assert r.json() == {"message": "Username or email already registered"}

    with database.session() as db:
        assert db.query(User).filter(User.username == "mallory").count() == 0


def test_email_is_stored_lowercase_and_resolves_to_its_owner(client):
    r = client.post("/api/register", json=register_payload(email="New.Student@Example.com"))
    assert r.status_code == 201, r.text
    assert r.json()["email"] == "new.student@example.com"
    user_id = r.json()["id"]

    assert login(client, "New.Student@Example.com", "supersecret1")

    r = client.post("/api/password-recovery/request", json={"identifier": "NEW.STUDENT@example.com"})
    token = r.json()["resetToken"]
    r = client.get(f"/api/password-recovery/verify/{token}")
    assert r.status_code == 200
    assert r.json()["userId"] == user_id
