from __future__ import annotations

from .client import (
    AdminClientFactory,
    ClientFactory,
    open_request_client,
    supabase_admin_factory,
    supabase_client_factory,
)
from .cookies import CookieJar, CookieMutation, CookieStorage, cookie_options, propagate_to_request
from .redirects import is_safe_next, post_login_url, safe_next
from .session import RefreshResult, SessionRefresher

__all__ = [
    "AdminClientFactory",
    "ClientFactory",
    "CookieJar",
    "CookieMutation",
    "CookieStorage",
    "RefreshResult",
    "SessionRefresher",
    "cookie_options",
    "is_safe_next",
    "open_request_client",
    "post_login_url",
    "propagate_to_request",
    "safe_next",
    "supabase_admin_factory",
    "supabase_client_factory",
]
