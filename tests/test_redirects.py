import pytest
from starlette.requests import Request

from conftest import make_settings
from retaildesk.auth.redirects import auth_failure_url, is_safe_next, post_login_url, safe_next
from retaildesk.core.config import AppSettings


def _request(headers=None, host="testserver", scheme="http"):
    raw = [(b"host", host.encode())]
    for key, value in (headers or {}).items():
        raw.append((key.lower().encode(), value.encode()))
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": scheme,
        "path": "/en/auth/callback",
        "raw_path": b"/en/auth/callback",
        "query_string": b"",
        "headers": raw,
        "server": (host, 80),
    }
    return Request(scope)


@pytest.mark.parametrize("candidate", ["/reports", "/fa/customers?tab=loans", "/"])
def test_relative_paths_are_safe(candidate):
    assert is_safe_next(candidate)


@pytest.mark.parametrize(
    "candidate",
    [None, "", "javascript:evil", "https://evil.com", "//evil.com", "/\\evil.com", "reports", "/a\r\nSet-Cookie: x"],
)
def test_unsafe_targets_are_rejected(candidate):
    assert not is_safe_next(candidate)
    assert safe_next(candidate, "/en/dashboard") == "/en/dashboard"


def test_local_mode_uses_request_origin_even_with_forwarded_host():
    request = _request({"X-Forwarded-Host": "app.example.com"}, host="localhost:8000")
    assert post_login_url(request, "/en/dashboard", make_settings()) == "http://localhost:8000/en/dashboard"


def test_production_prefers_forwarded_host_over_https():
    request = _request({"X-Forwarded-Host": "app.example.com, proxy.internal"})
    settings = make_settings(EXECUTION_MODE="production")
    assert post_login_url(request, "/fa/reports", settings) == "https://app.example.com/fa/reports"


def test_production_without_forwarded_host_uses_origin():
    settings = make_settings(EXECUTION_MODE="production")
    assert post_login_url(_request(), "/en/dashboard", settings) == "http://testserver/en/dashboard"


def test_allow_list_rejects_unknown_forwarded_host():
    settings = make_settings(EXECUTION_MODE="production", TRUSTED_FORWARDED_HOSTS="app.example.com")
    rejected = _request({"X-Forwarded-Host": "evil.example"})
    accepted = _request({"X-Forwarded-Host": "APP.example.com"})
    assert post_login_url(rejected, "/en/dashboard", settings) == "http://testserver/en/dashboard"
    assert post_login_url(accepted, "/en/dashboard", settings) == "https://APP.example.com/en/dashboard"


def test_failure_url_quotes_message():
    url = auth_failure_url(_request(), "ps")
    assert url == "http://testserver/ps/auth?message=Could%20not%20authenticate%20user"


def test_settings_parse_trusted_hosts_and_mode_aliases():
    settings = make_settings(EXECUTION_MODE="development", TRUSTED_FORWARDED_HOSTS=" A.example.com ,b.example.com,")
    assert settings.is_local
    assert settings.TRUSTED_FORWARDED_HOSTS == ["a.example.com", "b.example.com"]
    assert not make_settings(EXECUTION_MODE="staging").is_local


def test_trusted_hosts_read_from_environment_as_comma_list(monkeypatch):
    monkeypatch.setenv("TRUSTED_FORWARDED_HOSTS", "shop.example.com, Admin.example.com")
    settings = AppSettings(_env_file=None)
    assert settings.TRUSTED_FORWARDED_HOSTS == ["shop.example.com", "admin.example.com"]
