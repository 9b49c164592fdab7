"""Tests for sign-in, sign-out and the admin gate on HTML pages."""

from vip_admin.auth.session import ADMIN_SESSION_COOKIE, session_manager

ADMIN = "admin@numbersguru.test"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root_redirects_to_dashboard(client):
    response = client.get("/", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/admin/"


def test_signed_out_pages_redirect_to_login_with_next(client):
    response = client.get("/admin/vip-numbers", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/auth/login?next=%2Fadmin%2Fvip-numbers"


def test_login_page_renders(client):
    response = client.get("/auth/login")

    assert response.status_code == 200
    assert 'name="password"' in response.text
    assert "Access Denied" not in response.text


def test_role_error_is_shown_on_login_page(client):
    response = client.get("/auth/login?error=role")

    assert "Access Denied" in response.text


def test_admin_login_sets_cookie_and_redirects(client):
    response = client.post(
        "/auth/login",
        data={"email": ADMIN, "password": "correct-horse", "next": "/admin/orders"},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/admin/orders"
    token = response.cookies.get(ADMIN_SESSION_COOKIE)
    assert session_manager.resolve(token).email == ADMIN


def test_login_ignores_offsite_next(client):
    response = client.post(
        "/auth/login",
        data={"email": ADMIN, "password": "correct-horse", "next": "//evil.test/"},
        follow_redirects=False,
    )

    assert response.headers["location"] == "/admin/"


def test_wrong_password_shows_generic_error(client):
    response = client.post("/auth/login", data={"email": ADMIN, "password": "wrong-password"})

    assert response.status_code == 401
    assert "Invalid email or password." in response.text
    assert ADMIN_SESSION_COOKIE not in response.cookies


def test_non_admin_account_is_denied_without_cookie(client):
    response = client.post(
        "/auth/login", data={"email": "someone@else.test", "password": "other-user"}
    )

    assert response.status_code == 403
    assert "Access Denied" in response.text
    assert ADMIN_SESSION_COOKIE not in response.cookies


def test_invalid_login_form_is_rejected_before_sign_in(client):
    response = client.post("/auth/login", data={"email": "not-an-email", "password": "x"})

    assert response.status_code == 400
    assert "Login Failed" in response.text


def test_non_admin_cookie_is_sent_back_with_role_error(client):
    client.cookies.set(ADMIN_SESSION_COOKIE, session_manager.issue("someone@else.test"))

    response = client.get("/admin/vip-numbers", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/auth/login?error=role"


def test_signed_in_admin_skips_login_page(admin_client):
    response = admin_client.get("/auth/login", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/admin/"


def test_dashboard_renders_for_admin(admin_client):
    response = admin_client.get("/admin/")

    assert response.status_code == 200
    assert "Dashboard" in response.text
    assert ADMIN in response.text


def test_logout_revokes_session(admin_client):
    token = admin_client.cookies.get(ADMIN_SESSION_COOKIE)

    response = admin_client.post("/auth/logout", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/auth/login"
    assert session_manager.resolve(token) is None

    admin_client.cookies.set(ADMIN_SESSION_COOKIE, token)
    again = admin_client.get("/admin/vip-numbers", follow_redirects=False)
    assert again.headers["location"].startswith("/auth/login?next=")
