"""User and authentication API tests."""

from unittest.mock import patch

from contactbook.models.user import User
from contactbook.services.auth import get_token_service
from contactbook.services.user_service import UserService

TEST_PASSWORD = "testpass123"


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_signup(client):
    """Test user registration."""
    response = client.post(
        "/api/v1/users/signup",
        json={"email": "a@x.com", "password": "secret1"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "a@x.com"
    assert isinstance(data["id"], int)
    assert "password" not in data


def test_signup_duplicate_email(client, auth_headers):
    """Test registration with duplicate email fails."""
    response = client.post(
        "/api/v1/users/signup",
        json={"email": auth_headers.email, "password": "password123"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


def test_signup_invalid_email(client):
    response = client.post(
        "/api/v1/users/signup", json={"email": "not-an-email", "password": "secret1"}
    )
    assert response.status_code == 400


def test_password_stored_hashed(client, db):
    client.post("/api/v1/users/signup", json={"email": "hash@x.com", "password": "secret1"})
    user = db.query(User).filter(User.email == "hash@x.com").one()
    assert user.password_hash != "secret1"
    assert user.login_method == "local"


def test_distinct_signups_can_each_log_in(client):
    """Every signup with a distinct email can log in with its own password only."""
    accounts = [(f"user{i}@example.com", f"password-{i}") for i in range(3)]
    for email, password in accounts:
        response = client.post(
            "/api/v1/users/signup", json={"email": email, "password": password}
        )
        assert response.status_code == 201

    for email, password in accounts:
        ok = client.post("/api/v1/users/login", json={"email": email, "password": password})
        assert ok.status_code == 200
        for _, other_password in accounts:
            if other_password == password:
                continue
            bad = client.post(
                "/api/v1/users/login", json={"email": email, "password": other_password}
            )
            assert bad.status_code == 400


def test_login(client, auth_headers):
    """Test user login returns a token and user info."""
    response = client.post(
        "/api/v1/users/login", json={"email": auth_headers.email, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["user"] == {
        "id": auth_headers.user_id,
        "email": auth_headers.email,
        "name": "Test User",
        "picture": None,
    }


def test_login_errors_are_identical(client, auth_headers):
    """Unknown email and wrong password look the same to the client."""
    wrong_password = client.post(
        "/api/v1/users/login", json={"email": auth_headers.email, "password": "wrongpass"}
    )
    unknown_email = client.post(
        "/api/v1/users/login", json={"email": "nobody@example.com", "password": "wrongpass"}
    )
    assert wrong_password.status_code == 400
    assert unknown_email.status_code == 400
    assert wrong_password.json() == unknown_email.json()


def test_password_whitespace_is_significant(client):
    """Surrounding spaces are part of the password, not trimmed away."""
    signup = client.post(
        "/api/v1/users/signup", json={"email": "spaces@x.com", "password": "  secret1  "}
    )
    assert signup.status_code == 201

    trimmed = client.post(
        "/api/v1/users/login", json={"email": "spaces@x.com", "password": "secret1"}
    )
    exact = client.post(
        "/api/v1/users/login", json={"email": "spaces@x.com", "password": "  secret1  "}
    )
    assert trimmed.status_code == 400
    assert exact.status_code == 200


def test_get_me(client, auth_headers):
    response = client.get("/api/v1/users/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == auth_headers.email


def test_unauthenticated_requests_rejected(client):
    """Missing and malformed tokens both get a 401 with the same message."""
    missing = client.get("/api/v1/users/me")
    malformed = client.get("/api/v1/users/me", headers={"Authorization": "Bearer garbage"})
    assert missing.status_code == 401
    assert malformed.status_code == 401
    assert missing.json() == malformed.json()
    assert missing.headers["www-authenticate"] == "Bearer"


def test_reset_token_cannot_be_used_as_session(client, auth_headers):
    token = get_token_service().issue_reset_token(auth_headers.user_id)
    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_token_for_deleted_user_rejected(client, db):
    token = get_token_service().issue(999999)
    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_update_profile_name(client, auth_headers):
    response = client.put(
        "/api/v1/users/profile", headers=auth_headers, data={"name": "Renamed"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Profile updated successfully."
    assert data["user"]["name"] == "Renamed"


def test_update_profile_does_not_rehash_password(client, auth_headers, db):
    before = db.query(User).filter(User.id == auth_headers.user_id).one().password_hash

    client.put("/api/v1/users/profile", headers=auth_headers, data={"name": "Renamed"})

    db.expire_all()
    after = db.query(User).filter(User.id == auth_headers.user_id).one().password_hash
    assert after == before


def test_update_profile_ignores_password_field(client, auth_headers, db):
    UserService(db).update_profile(auth_headers.user_id, {"password_hash": "x", "name": "N"})
    db.expire_all()
    user = db.query(User).filter(User.id == auth_headers.user_id).one()
    assert user.name == "N"
    assert user.password_hash != "x"


def test_update_profile_avatar(client, auth_headers):
    response = client.put(
        "/api/v1/users/profile",
        headers=auth_headers,
        files={"avatar": ("me.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
    )
    assert response.status_code == 200
    picture = response.json()["user"]["picture"]
    assert picture.endswith("-me.png")


def test_update_profile_rejects_non_image(client, auth_headers):
    response = client.put(
        "/api/v1/users/profile",
        headers=auth_headers,
        files={"avatar": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Only image files are allowed"


def test_update_profile_rejects_large_avatar(client, auth_headers):
    too_big = b"0" * (2 * 1024 * 1024 + 1)
    response = client.put(
        "/api/v1/users/profile",
        headers=auth_headers,
        files={"avatar": ("big.png", too_big, "image/png")},
    )
    assert response.status_code == 400
    assert "too large" in response.json()["detail"]


def test_update_profile_requires_auth(client):
    response = client.put("/api/v1/users/profile", data={"name": "x"})
    assert response.status_code == 401


def test_change_password(client, auth_headers):
    response = client.put(
        "/api/v1/users/password",
        headers=auth_headers,
        json={"currentPassword": TEST_PASSWORD, "newPassword": "brand-new-pass"},
    )
    assert response.status_code == 200

    old = client.post(
        "/api/v1/users/login", json={"email": auth_headers.email, "password": TEST_PASSWORD}
    )
    new = client.post(
        "/api/v1/users/login", json={"email": auth_headers.email, "password": "brand-new-pass"}
    )
    assert old.status_code == 400
    assert new.status_code == 200


def test_change_password_wrong_current(client, auth_headers):
    response = client.put(
        "/api/v1/users/password",
        headers=auth_headers,
        json={"currentPassword": "not-it", "newPassword": "brand-new-pass"},
    )
    assert response.status_code == 400


def test_forgot_password_does_not_return_token(client, auth_headers):
    """The reset token is queued for email and never returned."""
    with patch("contactbook.tasks.password_reset.send_password_reset_email.delay") as mock_task:
        response = client.post(
            "/api/v1/users/forgot-password", json={"email": auth_headers.email}
        )

    assert response.status_code == 200
    assert response.json() == {"message": "Password reset email sent"}
    mock_task.assert_called_once()
    email, token = mock_task.call_args.args
    assert email == auth_headers.email
    assert token not in response.text


def test_forgot_password_unknown_email(client):
    with patch("contactbook.tasks.password_reset.send_password_reset_email.delay") as mock_task:
        response = client.post(
            "/api/v1/users/forgot-password", json={"email": "nobody@example.com"}
        )
    assert response.status_code == 404
    mock_task.assert_not_called()


def test_reset_password_flow(client, auth_headers):
    with patch("contactbook.tasks.password_reset.send_password_reset_email.delay") as mock_task:
        client.post("/api/v1/users/forgot-password", json={"email": auth_headers.email})
    _, token = mock_task.call_args.args

    response = client.post(
        "/api/v1/users/reset-password", json={"token": token, "newPassword": "reset-pass-1"}
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Password reset successful"

    login = client.post(
        "/api/v1/users/login", json={"email": auth_headers.email, "password": "reset-pass-1"}
    )
    assert login.status_code == 200


def test_reset_password_rejects_session_token(client, auth_headers):
    session_token = auth_headers["Authorization"].removeprefix("Bearer ")
    response = client.post(
        "/api/v1/users/reset-password",
        json={"token": session_token, "newPassword": "reset-pass-1"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or expired token"


def test_reset_password_invalid_token(client):
    response = client.post(
        "/api/v1/users/reset-password", json={"token": "garbage", "newPassword": "reset-pass-1"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or expired token"


def test_second_user_gets_own_identity(client, auth_headers, register):
    other = register("second@example.com")
    me = client.get("/api/v1/users/me", headers=other).json()
    assert me["id"] == other.user_id
    assert me["id"] != auth_headers.user_id
