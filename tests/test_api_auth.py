"""
HTTP tests for login, verification, session refresh, profile and username.
"""

from campuschat.core.config import COOKIE_NAME
from campuschat.services import auth_service
from campuschat.services.verification_service import challenge_store
from tests.conftest import balance_of, run


def login_and_verify(client, sent_emails, email="jane@mit.edu"):
    resp = client.post("/api/auth/login", json={"email": email})
    assert resp.status_code == 200
    _, code = sent_emails[-1]
    return client.post("/api/auth/verify", json={"email": email, "code": code})


class TestLogin:

    def test_login_sends_code(self, client, sent_emails):
        resp = client.post("/api/auth/login", json={"email": "Jane@MIT.edu "})

        assert resp.status_code == 200
        assert resp.json() == {"message": "Verification code sent to your email"}
        assert sent_emails[0][0] == "jane@mit.edu"

    def test_non_school_email_rejected(self, client, sent_emails):
        resp = client.post("/api/auth/login", json={"email": "jane@gmail.com"})

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Must use a school email address"
        assert sent_emails == []

    def test_email_failure_is_503_and_drops_code(self, client, monkeypatch):
        from campuschat.core.errors import DependencyUnavailable
        from campuschat.services import email_service

        async def broken(email, code):
            raise DependencyUnavailable("Failed to send email")

        monkeypatch.setattr(email_service, "send_verification_email", broken)

        resp = client.post("/api/auth/login", json={"email": "jane@mit.edu"})

        assert resp.status_code == 503
        assert len(challenge_store) == 0


class TestVerify:

    def test_first_verify_creates_user_and_sets_cookie(self, client, sent_emails):
        resp = login_and_verify(client, sent_emails)

        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["email"] == "jane@mit.edu"
        assert body["user"]["school_domain"] == "mit.edu"
        assert body["user"]["username"].startswith("jane")
        assert body["user"]["coins"] == 10
        assert auth_service.decode_token(body["token"]) == body["user"]["id"]

        cookie = resp.headers["set-cookie"].lower()
        assert f"{COOKIE_NAME}=" in cookie
        assert "httponly" in cookie
        assert "samesite=strict" in cookie

    def test_second_login_reuses_user(self, client, sent_emails):
        first = login_and_verify(client, sent_emails).json()
        second = login_and_verify(client, sent_emails).json()

        assert first["user"]["id"] == second["user"]["id"]

    def test_wrong_code(self, client, sent_emails):
        client.post("/api/auth/login", json={"email": "jane@mit.edu"})
        _, code = sent_emails[-1]
        wrong = "000000" if code != "000000" else "111111"

        resp = client.post("/api/auth/verify", json={"email": "jane@mit.edu", "code": wrong})

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid verification code"

    def test_guessing_is_limited(self, client, sent_emails):
        client.post("/api/auth/login", json={"email": "jane@mit.edu"})
        _, code = sent_emails[-1]
        wrong = "000000" if code != "000000" else "111111"

        for _ in range(challenge_store.max_attempts):
            resp = client.post("/api/auth/verify", json={"email": "jane@mit.edu", "code": wrong})
            assert resp.status_code == 400
        assert resp.json()["detail"] == "Too many failed attempts. Request a new code"

        resp = client.post("/api/auth/verify", json={"email": "jane@mit.edu", "code": code})
        assert resp.status_code == 400

    def test_no_pending_code(self, client):
        resp = client.post("/api/auth/verify", json={"email": "jane@mit.edu", "code": "123456"})

        assert resp.status_code == 400


class TestSession:

    def test_profile_with_bearer_token(self, client, make_user, auth_headers):
        user = make_user(email="bob@ox.ac.uk", username="bob", coins=5)

        resp = client.get("/api/auth/profile", headers=auth_headers(user))

        assert resp.status_code == 200
        assert resp.json()["username"] == "bob"
        assert resp.json()["coins"] == 5

    def test_profile_with_cookie(self, client, make_user):
        user = make_user()
        client.cookies.set(COOKIE_NAME, auth_service.create_token(user.id))

        resp = client.get("/api/auth/profile")

        assert resp.status_code == 200
        assert resp.json()["id"] == user.id

    def test_profile_requires_credential(self, client):
        resp = client.get("/api/auth/profile")
        assert resp.status_code == 401

    def test_profile_rejects_garbage_token(self, client):
        resp = client.get("/api/auth/profile", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    def test_verify_token_rotates(self, client, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(user)

        resp = client.post("/api/auth/verify-token", headers=headers)

        assert resp.status_code == 200
        new_token = resp.json()["token"]
        assert new_token != headers["Authorization"].split(" ", 1)[1]
        assert auth_service.decode_token(new_token) == user.id
        assert COOKIE_NAME in resp.cookies

    def test_verify_token_invalid_clears_cookie(self, client):
        client.cookies.set(COOKIE_NAME, "garbage")

        resp = client.post("/api/auth/verify-token")

        assert resp.status_code == 401
        assert "max-age=0" in resp.headers["set-cookie"].lower()

    def test_logout_clears_cookie(self, client, make_user, auth_headers):
        user = make_user()

        resp = client.post("/api/auth/logout", headers=auth_headers(user))

        assert resp.status_code == 200
        assert "max-age=0" in resp.headers["set-cookie"].lower()


class TestUsername:

    def test_change_costs_seventy_coins(self, client, make_user, auth_headers):
        user = make_user(coins=100)

        resp = client.put("/api/auth/username", json={"username": "  newname "}, headers=auth_headers(user))

        assert resp.status_code == 200
        assert resp.json()["username"] == "newname"
        assert resp.json()["coins"] == 30
        assert run(balance_of(user.id)) == 30

    def test_insufficient_coins(self, client, make_user, auth_headers):
        user = make_user(coins=69)

        resp = client.put("/api/auth/username", json={"username": "newname"}, headers=auth_headers(user))

        assert resp.status_code == 402
        assert "70" in resp.json()["detail"]
        assert run(balance_of(user.id)) == 69

    def test_too_short(self, client, make_user, auth_headers):
        user = make_user(coins=100)

        resp = client.put("/api/auth/username", json={"username": " ab "}, headers=auth_headers(user))

        assert resp.status_code == 400
        assert run(balance_of(user.id)) == 100
