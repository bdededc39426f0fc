from conftest import TOKEN_COOKIE


def _token_cookies(response):
    return [c for c in response.headers.get_list("set-cookie") if c.startswith(f"{TOKEN_COOKIE}=")]


def test_login_success_sets_session_and_redirects(client):
    response = client.post(
        "/en/auth/login",
        data={"email": "owner@example.com", "password": "correct horse"},
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/en/dashboard"
    assert _token_cookies(response)


def test_login_follows_only_safe_next(client):
    ok = client.post(
        "/fa/auth/login",
        data={"email": "owner@example.com", "password": "correct horse", "next": "/fa/reports"},
    )
    assert ok.headers["location"] == "/fa/reports"
    client.cookies.clear()
    unsafe = client.post(
        "/fa/auth/login",
        data={"email": "owner@example.com", "password": "correct horse", "next": "//evil.com"},
    )
    assert unsafe.headers["location"] == "/fa/dashboard"


def test_login_failure_shows_message(client):
    response = client.post("/en/auth/login", data={"email": "owner@example.com", "password": "wrong"})
    assert response.status_code == 401
    assert "Invalid email or password." in response.text
    assert not _token_cookies(response)


def test_login_with_empty_form_is_rejected_without_provider_call(client, backend):
    response = client.post("/en/auth/login", data={"email": "", "password": ""})
    assert response.status_code == 400
    assert backend.calls == []


def test_signup_asks_to_check_email(client, backend):
    response = client.post("/en/auth/signup", data={"email": "new@example.com", "password": "pw123456"})
    assert response.status_code == 200
    assert "Check your email" in response.text
    name, payload = backend.calls[0]
    assert name == "sign_up"
    assert payload["options"]["email_redirect_to"] == "http://testserver/en/auth/callback"


def test_signup_failure_shows_message(client, backend):
    backend.fail_auth_calls = True
    response = client.post("/en/auth/signup", data={"email": "new@example.com", "password": "pw123456"})
    assert response.status_code == 400
    assert "Could not create the account." in response.text


def test_reset_sends_link_to_reset_password_page(client, backend):
    response = client.post("/fa/auth/reset", data={"email": "owner@example.com"})
    assert response.status_code == 200
    name, email, options = backend.calls[0]
    assert (name, email) == ("reset_password_for_email", "owner@example.com")
    assert options["redirect_to"] == "http://testserver/fa/auth/callback?next=/fa/reset-password"


def test_reset_answer_does_not_reveal_failures(client, backend):
    backend.fail_auth_calls = True
    response = client.post("/en/auth/reset", data={"email": "ghost@example.com"})
    assert response.status_code == 200
    assert "password reset link is on its way" in response.text


def test_login_page_redirects_signed_in_users(signed_in):
    response = signed_in.get("/ps/auth")
    assert response.status_code == 303
    assert response.headers["location"] == "/ps/dashboard"


def test_signout_clears_session_cookies(signed_in, backend):
    signed_in.cookies.set(f"{TOKEN_COOKIE}.0", "leftover")
    response = signed_in.post("/en/auth/signout")
    assert response.status_code == 303
    assert response.headers["location"] == "/en/auth"
    assert ("sign_out",) in backend.calls
    cleared = [c for c in response.headers.get_list("set-cookie") if c.startswith("sb-")]
    names = {c.split("=", 1)[0] for c in cleared}
    assert {TOKEN_COOKIE, f"{TOKEN_COOKIE}.0"} <= names
    assert all("Max-Age=0" in c for c in cleared)


def test_reset_password_updates_signed_in_user(signed_in, backend):
    assert signed_in.get("/en/reset-password").status_code == 200
    response = signed_in.post("/en/reset-password", data={"password": "n3w-secret"})
    assert response.status_code == 200
    assert "Your password has been updated." in response.text
    assert ("update_user", {"password": "n3w-secret"}) in backend.calls


def test_reset_password_failure(signed_in, backend):
    backend.fail_auth_calls = True
    response = signed_in.post("/en/reset-password", data={"password": "x"})
    assert response.status_code == 400
    assert "Could not update the password." in response.text


def test_reset_password_requires_session(client):
    response = client.get("/en/reset-password")
    assert response.status_code == 307
    assert response.headers["location"] == "/en/auth"
