from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from supabase import AuthError

from ..auth.client import open_request_client
from ..core.jinja import render
from ..deps.auth import get_translator, page_locale, require_session
from ..i18n import Translator
from ..services.loaders import DataLoaderBoundary, SupabaseTableSource
from ..services.pages import PAGES

logger = logging.getLogger("retaildesk.pages")

router = APIRouter(dependencies=[Depends(page_locale), Depends(require_session)])


async def _render_page(request: Request, name: str):
    client, jar = await open_request_client(request)
    response = await DataLoaderBoundary(PAGES[name]).render(request, SupabaseTableSource(client))
    return jar.apply(response)


@router.get("/{locale}/dashboard", response_class=HTMLResponse)
async def dashboard_page(request: Request):
    return await _render_page(request, "dashboard")


@router.get("/{locale}/customers", response_class=HTMLResponse)
async def customers_page(request: Request):
    return await _render_page(request, "customers")


@router.get("/{locale}/loans", response_class=HTMLResponse)
async def loans_page(request: Request):
    return await _render_page(request, "loans")


@router.get("/{locale}/expenses", response_class=HTMLResponse)
async def expenses_page(request: Request):
    return await _render_page(request, "expenses")


@router.get("/{locale}/stores", response_class=HTMLResponse)
async def stores_page(request: Request):
    return await _render_page(request, "stores")


@router.get("/{locale}/staff", response_class=HTMLResponse)
async def staff_page(request: Request):
    return await _render_page(request, "staff")


@router.get("/{locale}/reports", response_class=HTMLResponse)
async def reports_page(request: Request):
    return await _render_page(request, "reports")


@router.get("/{locale}/products", response_class=HTMLResponse)
async def products_page(request: Request):
    return await _render_page(request, "products")


@router.get("/{locale}/sales", response_class=HTMLResponse)
async def sales_page(request: Request):
    return await _render_page(request, "sales")


@router.get("/{locale}/inventory", response_class=HTMLResponse)
async def inventory_page(request: Request):
    return await _render_page(request, "inventory")


@router.get("/{locale}/locations", response_class=HTMLResponse)
async def locations_page(request: Request):
    return await _render_page(request, "locations")


@router.get("/{locale}/reset-password", response_class=HTMLResponse)
async def reset_password_page(request: Request):
    return render(request, "reset_password.html", {"message": ""})


@router.post("/{locale}/reset-password", response_class=HTMLResponse)
async def reset_password_submit(
    request: Request,
    t: Translator = Depends(get_translator),
    password: str = Form(""),
):
    if not password:
        return render(request, "reset_password.html", {"message": t("resetPassword.failed")}, status_code=400)

    client, jar = await open_request_client(request)
    try:
        await client.auth.update_user({"password": password})
    except AuthError as exc:
        logger.warning("auth.password_update_failed", extra={"extra_data": {"reason": str(exc)}})
        response = render(request, "reset_password.html", {"message": t("resetPassword.failed")}, status_code=400)
        return jar.apply(response)
    return jar.apply(render(request, "reset_password.html", {"message": t("auth.messages.passwordUpdated")}))
