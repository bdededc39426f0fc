"""Login, sign-up, password reset, sign-out and the identity provider callback."""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from starlette import status
from supabase import AuthError

from ..auth.client import open_request_client
from ..auth.cookies import CookieJar, cookie_options
from ..auth.redirects import AUTH_FAILURE_MESSAGE, auth_failure_url, post_login_url, safe_next
from ..core.config import AppSettings
from ..core.jinja import render
from ..deps.auth import get_translator, page_locale
from ..i18n import Translator, coerce_locale
from ..schemas.auth import Credentials

logger = logging.getLogger("retaildesk.auth")

router = APIRouter()


def _settings(request: Request) -> AppSettings:
    return request.app.state.settings


def _login_page(request: Request, t: Translator, *, message: str = "", next: str = "", status_code: int = 200):
    return render(
        request,
        "login.html",
        {"message": message, "next": next, "title": t("auth.title")},
        status_code=status_code,
    )


def _see_other(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/{locale}/auth", response_class=HTMLResponse)
async def login_page(
    request: Request,
    locale: str = Depends(page_locale),
    t: Translator = Depends(get_translator),
    message: str = "",
    next: str = "",
):
    if getattr(request.state, "user", None) is not None:
        return _see_other(safe_next(next, f"/{locale}/dashboard"))
    return _login_page(request, t, message=message, next=next)


@router.post("/{locale}/auth/login", response_class=HTMLResponse)
async def login_submit(
    request: Request,
    locale: str = Depends(page_locale),
    t: Translator = Depends(get_translator),
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form(""),
):
    try:
        credentials = Credentials(email=email.strip(), password=password)
    except ValidationError:
        return _login_page(request, t, message=t("auth.messages.invalidCredentials"), next=next, status_code=400)

    client, jar = await open_request_client(request)
    try:
        await client.auth.sign_in_with_password({"email": credentials.email, "password": credentials.password})
    except AuthError as exc:
        logger.info("auth.login_failed", extra={"extra_data": {"reason": str(exc)}})
        response = _login_page(
            request, t, message=t("auth.messages.invalidCredentials"), next=next, status_code=401
        )
        return jar.apply(response)

    logger.info("auth.login", extra={"extra_data": {"email": credentials.email}})
    return jar.apply(_see_other(safe_next(next, f"/{locale}/dashboard")))


@router.post("/{locale}/auth/signup", response_class=HTMLResponse)
async def signup_submit(
    request: Request,
    locale: str = Depends(page_locale),
    t: Translator = Depends(get_translator),
    email: str = Form(""),
    password: str = Form(""),
):
    try:
        credentials = Credentials(email=email.strip(), password=password)
    except ValidationError:
        return _login_page(request, t, message=t("auth.messages.signUpFailed"), status_code=400)

    client, jar = await open_request_client(request)
    redirect_to = post_login_url(request, f"/{locale}/auth/callback", _settings(request))
    try:
        await client.auth.sign_up(
            {
                "email": credentials.email,
                "password": credentials.password,
                "options": {"email_redirect_to": redirect_to},
            }
        )
    except AuthError as exc:
        logger.info("auth.signup_failed", extra={"extra_data": {"reason": str(exc)}})
        return jar.apply(_login_page(request, t, message=t("auth.messages.signUpFailed"), status_code=400))
    return jar.apply(_login_page(request, t, message=t("auth.messages.checkEmail")))


@router.post("/{locale}/auth/reset", response_class=HTMLResponse)
async def reset_submit(
    request: Request,
    locale: str = Depends(page_locale),
    t: Translator = Depends(get_translator),
    email: str = Form(""),
):
    client, jar = await open_request_client(request)
    callback = post_login_url(request, f"/{locale}/auth/callback", _settings(request))
    redirect_to = f"{callback}?next={quote(f'/{locale}/reset-password')}"
    if email.strip():
        try:
            await client.auth.reset_password_for_email(email.strip(), {"redirect_to": redirect_to})
        except AuthError as exc:
            # Same answer either way; the address may not exist.
            logger.warning("auth.reset_failed", extra={"extra_data": {"reason": str(exc)}})
    return jar.apply(_login_page(request, t, message=t("auth.messages.resetSent")))


@router.post("/{locale}/auth/signout")
async def signout(request: Request, locale: str = Depends(page_locale)):
    settings = _settings(request)
    client, jar = await open_request_client(request)
    try:
        await client.auth.sign_out()
    except AuthError as exc:
        logger.warning("auth.signout_failed", extra={"extra_data": {"reason": str(exc)}})

    prefix = f"{settings.AUTH_COOKIE_PREFIX}-"
    options = cookie_options(settings)
    for name in request.cookies:
        if name.startswith(prefix) and name not in jar:
            jar.delete(name, **options)
    logger.info("auth.signout")
    return jar.apply(_see_other(f"/{locale}/auth"))


@router.get("/{locale}/auth/callback")
async def auth_callback(request: Request, locale: str, code: str | None = None, next: str | None = None):
    """Exchange the one-time code from the email link for a session.

    An unsupported path locale falls back to the default instead of a 404, so
    old links keep working.
    """

    route_locale = coerce_locale(locale)
    if not code:
        return RedirectResponse(auth_failure_url(request, route_locale, AUTH_FAILURE_MESSAGE))

    client, jar = await open_request_client(request, CookieJar())
    try:
        await client.auth.exchange_code_for_session({"auth_code": code})
    except AuthError as exc:
        logger.warning("auth.callback_failed", extra={"extra_data": {"reason": str(exc)}})
        return jar.apply(RedirectResponse(auth_failure_url(request, route_locale, AUTH_FAILURE_MESSAGE)))

    destination = safe_next(next, f"/{route_locale}/dashboard")
    target = post_login_url(request, destination, _settings(request))
    logger.info("auth.callback", extra={"extra_data": {"destination": destination}})
    return jar.apply(RedirectResponse(target))
