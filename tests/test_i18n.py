import json

import pytest
from click.testing import CliRunner

from retaildesk.i18n import (
    DEFAULT_LOCALE,
    LOCALES,
    CatalogStore,
    flatten_keys,
    negotiate,
    resolve,
    text_direction,
    validate_catalogs,
)
from retaildesk.i18n.validate import DEFAULT_MESSAGES_DIR, cli


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/fa/customers", ("fa", True, "/customers")),
        ("/ps", ("ps", True, "/")),
        ("/en/auth/callback", ("en", True, "/auth/callback")),
        ("/xx/customers", ("en", False, "/xx/customers")),
        ("/customers", ("en", False, "/customers")),
        ("/", ("en", False, "/")),
        ("//fa//loans/", ("fa", True, "/loans")),
        ("/FA/loans", ("en", False, "/FA/loans")),
    ],
)
def test_resolve_splits_locale_prefix(path, expected):
    assert tuple(resolve(path)) == expected


@pytest.mark.parametrize("locale", LOCALES)
def test_resolve_round_trips_every_locale(locale):
    match = resolve(f"/{locale}/reports")
    assert match.locale == locale
    assert match.has_explicit_locale is True
    assert match.remainder == "/reports"


def test_resolve_remainder_always_starts_with_slash():
    for path in ["", "/", "/en", "/en/", "/a/b/c", "fa/x"]:
        assert resolve(path).remainder.startswith("/")


def test_negotiate_prefers_cookie_over_header():
    assert negotiate("fa-IR,fa;q=0.9", cookie_locale="ps") == "ps"


def test_negotiate_uses_quality_values():
    assert negotiate("en;q=0.3, fa;q=0.8, de") == "fa"


def test_negotiate_falls_back_to_default():
    assert negotiate("de-DE,fr;q=0.5") == DEFAULT_LOCALE
    assert negotiate(None) == DEFAULT_LOCALE
    assert negotiate("fa", cookie_locale="xx") == "fa"


def test_negotiate_ignores_zero_quality():
    assert negotiate("fa;q=0, ps;q=0.5") == "ps"


def test_text_direction():
    assert text_direction("fa") == "rtl"
    assert text_direction("ps") == "rtl"
    assert text_direction("en") == "ltr"


def test_shipped_catalogs_are_in_sync():
    assert validate_catalogs(DEFAULT_MESSAGES_DIR) == []


def test_translator_interpolates_and_falls_back():
    store = CatalogStore(DEFAULT_MESSAGES_DIR)
    t = store.translator("en")
    assert t("errors.title", page="Customers") == "Error Loading Customers"
    assert t("customers.count", count=3) == "3 customers"
    assert t("no.such.key") == "no.such.key"
    assert store.translator("xx").locale == "xx"
    assert store.translator("xx")("nav.dashboard") == "Dashboard"


def _write_catalogs(directory, catalogs):
    for locale, messages in catalogs.items():
        (directory / f"{locale}.json").write_text(json.dumps(messages), encoding="utf-8")


BASE = {"dashboard": {"title": "Dashboard", "welcome": "Hi"}, "nav": {"home": "Home"}}


def test_flatten_keys_uses_dotted_paths():
    assert sorted(flatten_keys(BASE)) == ["dashboard.title", "dashboard.welcome", "nav.home"]


def test_cli_passes_when_catalogs_match(tmp_path):
    _write_catalogs(tmp_path, {"en": BASE, "fa": BASE, "ps": BASE})
    result = CliRunner().invoke(cli, ["--messages-dir", str(tmp_path)])
    assert result.exit_code == 0
    assert "All locale message files are in sync" in result.output


def test_cli_reports_exactly_one_missing_key(tmp_path):
    fa = {"dashboard": {"welcome": "سلام"}, "nav": {"home": "خانه"}}
    _write_catalogs(tmp_path, {"en": BASE, "fa": fa, "ps": BASE})
    result = CliRunner().invoke(cli, ["--messages-dir", str(tmp_path)])
    assert result.exit_code == 1
    lines = [line for line in result.output.splitlines() if line.strip()]
    assert lines == ['Locale "fa" is missing key "dashboard.title"']


def test_cli_reports_extra_keys(tmp_path):
    ps = {**BASE, "extra": {"key": "x"}}
    _write_catalogs(tmp_path, {"en": BASE, "fa": BASE, "ps": ps})
    result = CliRunner().invoke(cli, ["--messages-dir", str(tmp_path)])
    assert result.exit_code == 1
    assert 'Locale "ps" has extra key "extra.key" not present in base locale "en"' in result.output


def test_cli_fails_on_missing_file(tmp_path):
    _write_catalogs(tmp_path, {"en": BASE, "fa": BASE})
    result = CliRunner().invoke(cli, ["--messages-dir", str(tmp_path)])
    assert result.exit_code == 1
    assert 'Missing messages file for locale "ps"' in result.output
