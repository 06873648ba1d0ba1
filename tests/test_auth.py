from schoolportal.core.security import create_access_token
from schoolportal.schemas.enums import UserRole

from tests.conftest import PASSWORD, auth_headers, make_user


async def test_login_sets_cookie_and_returns_session(client, school_a):
    response = await client.post(
        "/api/auth/login",
        json={"email": school_a.teacher.email, "password": PASSWORD}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["userId"] == school_a.teacher.id
    assert body["user"]["role"] == "TEACHER"
    assert body["user"]["schoolId"] == school_a.id
    assert "access_token" in response.cookies


async def test_session_resolves_from_cookie(client, school_a):
    await client.post(
        "/api/auth/login",
        json={"email": school_a.student_users[0].email, "password": PASSWORD}
    )

    response = await client.get("/api/auth/session")

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["role"] == "STUDENT"
    assert user["studentId"] == school_a.students[0].id


async def test_login_email_is_case_insensitive(client, school_a):
    response = await client.post(
        "/api/auth/login",
        json={"email": school_a.admin.email.upper(), "password": PASSWORD}
    )
    assert response.status_code == 200


async def test_wrong_password_is_401(client, school_a):
    response = await client.post(
        "/api/auth/login",
        json={"email": school_a.teacher.email, "password": "not-the-password"}
    )

    assert response.status_code == 401
    assert response.json()["error_code"] == "INVALID_CREDENTIALS"
    assert "message" in response.json()


async def test_inactive_user_cannot_log_in(client, db, school_a):
    user = await make_user(
        db, "Gone", "gone@alpha.example.com", UserRole.TEACHER, school_a.id, is_active=False
    )
    await db.commit()

    response = await client.post(
        "/api/auth/login",
        json={"email": user.email, "password": PASSWORD}
    )
    assert response.status_code == 401


async def test_missing_token_is_401(client):
    response = await client.get("/api/auth/session")

    assert response.status_code == 401
    assert response.json() == {"message": "Unauthorized", "error_code": "AUTH_ERROR"}


async def test_garbage_token_is_401(client):
    response = await client.get(
        "/api/auth/session", headers={"Authorization": "Bearer not.a.jwt"}
    )
    assert response.status_code == 401


async def test_token_for_deleted_user_is_401(client):
    token = create_access_token(99999, UserRole.TEACHER, 1)
    response = await client.get(
        "/api/auth/session", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401


async def test_logout_revokes_token(client, school_a):
    headers = auth_headers(school_a.teacher)

    assert (await client.get("/api/auth/session", headers=headers)).status_code == 200
    response = await client.post("/api/auth/logout", headers=headers)
    assert response.status_code == 200

    assert (await client.get("/api/auth/session", headers=headers)).status_code == 401


async def test_health(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "x-request-id" in response.headers
