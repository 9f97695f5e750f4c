from deeplove.auth.deps import SESSION_COOKIE_NAME
from deeplove.auth.security import create_access_token

BEARER = {"X-Auth-Mode": "bearer"}


def test_signup_bearer_mode_returns_token(client):
    res = client.post("/api/auth/signup", json={"email": "  Sam@Example.com ", "password": "hunter22"}, headers=BEARER)
    assert res.status_code == 201
    body = res.json()
    assert body["user"]["email"] == "sam@example.com"
    assert body["token_type"] == "bearer"
    assert SESSION_COOKIE_NAME not in res.cookies

    me = client.get("/api/auth/user", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["user"] == body["user"]


def test_cookie_session_login_and_logout(client):
    assert client.post("/api/auth/signup", json={"email": "sam@example.com", "password": "hunter22"}).status_code == 201
    client.cookies.clear()

    res = client.post("/api/auth/login", json={"email": "sam@example.com", "password": "hunter22"})
    assert res.status_code == 200
    assert "access_token" not in res.json()
    assert SESSION_COOKIE_NAME in res.cookies
    assert client.get("/api/auth/user").json()["user"]["email"] == "sam@example.com"

    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/user").status_code == 401


def test_signup_validation(client, signup):
    signup("taken@example.com")
    dup = client.post("/api/auth/signup", json={"email": "taken@example.com", "password": "hunter22"}, headers=BEARER)
    assert dup.status_code == 409
    short = client.post("/api/auth/signup", json={"email": "new@example.com", "password": "abc"}, headers=BEARER)
    assert short.status_code == 400
    bad_email = client.post("/api/auth/signup", json={"email": "not-an-email", "password": "hunter22"}, headers=BEARER)
    assert bad_email.status_code == 400


def test_login_rejects_bad_credentials(client, signup):
    signup("sam@example.com")
    wrong = client.post("/api/auth/login", json={"email": "sam@example.com", "password": "nope-nope"}, headers=BEARER)
    assert wrong.status_code == 401
    unknown = client.post("/api/auth/login", json={"email": "who@example.com", "password": "hunter22"}, headers=BEARER)
    assert unknown.status_code == 401


def test_protected_routes_require_a_valid_token(client, signup):
    uid, _ = signup("sam@example.com")
    assert client.get("/api/matches").status_code == 401
    assert client.get("/api/auth/user", headers={"Authorization": "Token abc"}).status_code == 401
    assert client.get("/api/auth/user", headers={"Authorization": "Bearer garbage"}).status_code == 401

    expired = create_access_token(uid, "sam@example.com", ttl_minutes=-5)
    res = client.get("/api/auth/user", headers={"Authorization": f"Bearer {expired}"})
    assert res.status_code == 401
    assert "trace_id" in res.json()["detail"]


def test_token_for_deleted_user_is_rejected(client, signup, fake_repo):
    uid, headers = signup("sam@example.com")
    del fake_repo.users[uid]
    assert client.get("/api/auth/user", headers=headers).status_code == 401
