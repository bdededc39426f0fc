"""Shared fixtures: settings without .env files and an in-memory Supabase stand-in."""

import sys
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError
from supabase import AuthError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from retaildesk import create_app
from retaildesk.core.config import AppSettings

TOKEN_KEY = "auth-token"
TOKEN_COOKIE = "sb-auth-token"


class FakeAuthError(AuthError):
    def __init__(self, message):
        Exception.__init__(self, message)
        self.message = message


def make_user(user_id="user-1", email="owner@example.com"):
    return SimpleNamespace(
        id=user_id,
        email=email,
        user_metadata={"full_name": "Store Owner"},
        app_metadata={"role": "admin"},
    )


class FakeQuery:
    def __init__(self, client, table):
        self._client = client
        self.table = table
        self.columns = None
        self.filters = []
        self.ordering = None

    def select(self, columns="*"):
        self.columns = columns
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.ordering = (column, desc)
        return self

    async def execute(self):
        backend = self._client.backend
        backend.queries.append(self)
        backend.tokens_seen.append(await self._client.storage.get_item(TOKEN_KEY))
        if self.table in backend.table_errors:
            raise APIError({"message": backend.table_errors[self.table], "code": "XX000", "hint": None, "details": None})
        rows = [
            dict(row)
            for row in backend.tables.get(self.table, [])
            if all(row.get(column) == value for column, value in self.filters)
        ]
        if self.ordering:
            column, desc = self.ordering
            rows.sort(key=lambda row: str(row.get(column) or ""), reverse=desc)
        return SimpleNamespace(data=rows)


class FakeAdminApi:
    def __init__(self, backend):
        self._backend = backend

    async def invite_user_by_email(self, email, options):
        self._backend.calls.append(("invite_user_by_email", email, options))
        if self._backend.fail_auth_calls:
            raise FakeAuthError("Email rate limit exceeded")
        return SimpleNamespace(user=make_user("invited-user", email))


class FakeAuth:
    def __init__(self, client):
        self._client = client
        self.admin = FakeAdminApi(client.backend)

    @property
    def _backend(self):
        return self._client.backend

    @property
    def _storage(self):
        return self._client.storage

    async def get_user(self):
        token = await self._storage.get_item(TOKEN_KEY)
        self._backend.tokens_seen.append(token)
        if self._backend.auth_unreachable:
            raise httpx.ConnectError("[Errno 111] Connection refused")
        if token is None:
            return None
        if token not in self._backend.sessions:
            await self._storage.remove_item(TOKEN_KEY)
            raise FakeAuthError("invalid JWT")
        rotated = self._backend.rotations.get(token)
        if rotated:
            await self._storage.set_item(TOKEN_KEY, rotated)
            token = rotated
        return SimpleNamespace(user=self._backend.sessions[token])

    async def exchange_code_for_session(self, params):
        self._backend.calls.append(("exchange_code_for_session", params))
        token = self._backend.codes.get(params.get("auth_code"))
        if token is None:
            raise FakeAuthError("invalid flow state")
        await self._storage.set_item(TOKEN_KEY, token)
        return SimpleNamespace(user=self._backend.sessions.get(token))

    async def sign_in_with_password(self, credentials):
        self._backend.calls.append(("sign_in_with_password", credentials))
        expected = self._backend.passwords.get(credentials["email"])
        if expected is None or expected[0] != credentials["password"]:
            raise FakeAuthError("Invalid login credentials")
        await self._storage.set_item(TOKEN_KEY, expected[1])
        return SimpleNamespace(user=self._backend.sessions.get(expected[1]))

    async def sign_up(self, credentials):
        self._backend.calls.append(("sign_up", credentials))
        if self._backend.fail_auth_calls:
            raise FakeAuthError("Signups not allowed")
        return SimpleNamespace(user=make_user("new-user", credentials["email"]))

    async def reset_password_for_email(self, email, options):
        self._backend.calls.append(("reset_password_for_email", email, options))
        if self._backend.fail_auth_calls:
            raise FakeAuthError("rate limited")

    async def update_user(self, attributes):
        self._backend.calls.append(("update_user", attributes))
        if self._backend.fail_auth_calls:
            raise FakeAuthError("weak password")
        return SimpleNamespace(user=None)

    async def sign_out(self):
        self._backend.calls.append(("sign_out",))
        await self._storage.remove_item(TOKEN_KEY)


class FakeClient:
    def __init__(self, backend, storage):
        self.backend = backend
        self.storage = storage
        self.auth = FakeAuth(self)

    def table(self, name):
        return FakeQuery(self, name)


class FakeBackend:
    """Sessions, one-time codes and table rows shared by every fake client."""

    def __init__(self):
        user = make_user()
        self.sessions = {"valid-token": user, "rotated-token": user, "fresh-token": user}
        self.rotations = {}
        self.codes = {"good-code": "fresh-token"}
        self.passwords = {"owner@example.com": ("correct horse", "fresh-token")}
        self.tables = {}
        self.table_errors = {}
        self.fail_auth_calls = False
        self.auth_unreachable = False
        self.calls = []
        self.queries = []
        self.tokens_seen = []
        self.clients = 0

    async def factory(self, storage):
        self.clients += 1
        return FakeClient(self, storage)

    async def admin_factory(self):
        self.calls.append(("admin_client",))
        return FakeClient(self, None)


def make_settings(**overrides):
    values = {"EXECUTION_MODE": "local", "SUPABASE_URL": "http://supabase.test", "SUPABASE_ANON_KEY": "anon"}
    values.update(overrides)
    return AppSettings(_env_file=None, **values)


@pytest.fixture()
def backend():
    return FakeBackend()


@pytest.fixture()
def make_client(backend):
    def _make(admin=True, **settings_overrides):
        app = create_app(
            make_settings(**settings_overrides),
            client_factory=backend.factory,
            admin_client_factory=backend.admin_factory if admin else None,
        )
        return TestClient(app, follow_redirects=False)

    return _make


@pytest.fixture()
def client(make_client):
    return make_client()


@pytest.fixture()
def signed_in(client):
    client.cookies.set(TOKEN_COOKIE, "valid-token")
    return client
