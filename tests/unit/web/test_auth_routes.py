"""End-to-end tests for login, the route gate and server-side session checks."""

from urllib.parse import parse_qs, urlsplit

from starlette.responses import Response

from dashgate.app import App
from dashgate.config import Config
from dashgate.web.cookies import SessionCookieManager

COOKIE = "dashgate_session"


def _login(client, **payload):
    return client.post("/api/v1/auth/login", json=payload)


def _rotate_default(client, new_password="longenough1"):
    return _login(client, username="admin", password="admin", newPassword=new_password, confirmPassword=new_password)


def _alter(token: str) -> str:
    return token[:-1] + ("A" if token[-1] != "A" else "B")


def _cookie_attributes(set_cookie: str) -> set[str]:
    return {part.strip().lower() for part in set_cookie.split(";")[1:]}


class TestLoginEndpoint:
    def test_fresh_deployment_requires_password_change(self, client):
        response = _login(client, username="admin", password="admin")

        assert response.status_code == 409
        assert response.json()["type"] == "password_change_required"
        assert COOKIE not in response.cookies

    def test_rotation_sets_cookie(self, client):
        response = _rotate_default(client)

        assert response.status_code == 200
        assert response.json() == {"success": True, "username": "admin", "redirect_to": "/dashboard"}
        assert response.headers["set-cookie"].startswith(f"{COOKIE}=")
        attributes = _cookie_attributes(response.headers["set-cookie"])
        assert {"httponly", "samesite=lax", "path=/", "max-age=2592000"} <= attributes
        assert "secure" not in attributes

    def test_old_password_rejected_new_accepted(self, client):
        _rotate_default(client)

        assert _login(client, username="admin", password="admin").status_code == 401
        assert _login(client, username="admin", password="longenough1").status_code == 200

    def test_short_new_password(self, client):
        response = _rotate_default(client, new_password="short6")

        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"
        assert COOKIE not in response.cookies

    def test_unknown_user_indistinguishable_from_wrong_password(self, client):
        unknown = _login(client, username="nobody", password="whatever")
        wrong = _login(client, username="admin", password="not-the-password")

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json() == {"message": "Invalid credentials", "type": "authentication_error"}

    def test_redirect_target_sanitized(self, client):
        _rotate_default(client)
        local = _login(client, username="admin", password="longenough1", redirectTo="/dashboard/acme?tab=1")
        foreign = _login(client, username="admin", password="longenough1", redirectTo="//evil.example")
        tabbed = _login(client, username="admin", password="longenough1", redirectTo="/\t/evil.example")

        assert local.json()["redirect_to"] == "/dashboard/acme?tab=1"
        assert foreign.json()["redirect_to"] == "/dashboard"
        assert tabbed.json()["redirect_to"] == "/dashboard"

    def test_missing_fields(self, client):
        assert _login(client, username="admin").status_code == 422

    def test_incomplete_stored_record_is_401(self, client, users_collection):
        users_collection.documents["maria"] = {"_id": "maria", "username": "maria"}
        response = _login(client, username="maria", password="longenough1")

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid credentials", "type": "authentication_error"}


class TestRouteGate:
    def test_valid_cookie_passes_tampered_cookie_redirects(self, client):
        token = _rotate_default(client).cookies[COOKIE]
        client.cookies.clear()

        allowed = client.get("/dashboard", headers={"Cookie": f"{COOKIE}={token}"}, follow_redirects=False)
        blocked = client.get(
            "/dashboard?tab=leads", headers={"Cookie": f"{COOKIE}={_alter(token)}"}, follow_redirects=False
        )

        assert allowed.status_code == 200
        assert allowed.json()["username"] == "admin"
        assert blocked.status_code == 307
        location = urlsplit(blocked.headers["location"])
        assert location.path == "/dashboard/login"
        assert parse_qs(location.query) == {"redirectTo": ["/dashboard?tab=leads"]}

    def test_no_cookie_redirects(self, client):
        response = client.get("/dashboard/acme", follow_redirects=False)

        assert response.status_code == 307
        assert parse_qs(urlsplit(response.headers["location"]).query) == {"redirectTo": ["/dashboard/acme"]}

    def test_login_page_is_not_gated(self, client):
        response = client.get("/dashboard/login", params={"redirectTo": "/dashboard/acme"}, follow_redirects=False)

        assert response.status_code == 200
        assert response.json()["redirect_to"] == "/dashboard/acme"

    def test_login_page_drops_control_character_redirect(self, client):
        response = client.get("/dashboard/login", params={"redirectTo": "/\n/evil.example"}, follow_redirects=False)

        assert response.status_code == 200
        assert response.json()["redirect_to"] == "/dashboard"

    def test_public_paths_bypass_gate(self, client):
        assert client.get("/health", follow_redirects=False).status_code == 200

    def test_cookie_from_login_is_sent_back(self, client):
        _rotate_default(client)
        assert client.get("/dashboard", follow_redirects=False).status_code == 200


class TestServerSideRevalidation:
    def test_gate_and_handler_agree(self, client):
        """Test that the gate and the API dependency accept and reject the same cookies."""
        token = _rotate_default(client).cookies[COOKIE]
        client.cookies.clear()

        for cookie, accepted in [(token, True), (_alter(token), False), ("garbage", False)]:
            headers = {"Cookie": f"{COOKIE}={cookie}"}
            gate = client.get("/dashboard", headers=headers, follow_redirects=False)
            api = client.get("/api/v1/auth/session", headers=headers)
            assert (gate.status_code == 200) is accepted
            assert (api.status_code == 200) is accepted

    def test_session_endpoint(self, client):
        _rotate_default(client)
        response = client.get("/api/v1/auth/session")

        assert response.status_code == 200
        assert response.json()["username"] == "admin"

    def test_session_endpoint_requires_cookie(self, client):
        response = client.get("/api/v1/auth/session")

        assert response.status_code == 401
        assert response.json()["type"] == "authentication_error"


class TestLogout:
    def test_logout_clears_cookie(self, client):
        _rotate_default(client)
        response = client.post("/api/v1/auth/logout")

        assert response.status_code == 204
        assert "max-age=0" in _cookie_attributes(response.headers["set-cookie"])
        assert client.get("/dashboard", follow_redirects=False).status_code == 307


class TestSessionCookieManager:
    def test_secure_outside_debug(self, database):
        config = Config(database_url="mongodb://localhost:27017/dashgate_test", session_secret="s", debug=False)
        manager = SessionCookieManager(App(config, database))
        response = Response()

        manager.issue(response, "admin")

        assert "secure" in _cookie_attributes(response.headers["set-cookie"])

    def test_read_round_trip(self, app):
        manager = SessionCookieManager(app)
        response = Response()
        manager.issue(response, "admin")
        token = response.headers["set-cookie"].split(";")[0].split("=", 1)[1]

        claims = manager.read({COOKIE: token})

        assert claims is not None
        assert claims.username == "admin"
        assert manager.read({}) is None
        assert manager.read({COOKIE: _alter(token)}) is None
