"""
HTML routes for browsing and editing logos.

Mounted under ``/logos``. Mutations answer with a 302 to the logo's page;
reads render Jinja2 templates. Store errors are never handled here, they
propagate to the app-wide handlers in ``logos.error_handlers``.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request, status
from fastapi.responses import RedirectResponse

from logos.config import Settings
from logos.db import ANONYMOUS, LogoRecord, LogoStore
from logos.dependencies import get_app_settings, get_logo_store
from logos.images import upload_image
from logos.oauth2 import UserProfile, get_current_user, require_user
from logos.templating import render

logger = logging.getLogger(__name__)

router = APIRouter()


def _logo_url(request: Request, logo_id: str) -> str:
    return f"{request.app.state.settings.logos_prefix}/{logo_id}"


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("")
def list_logos(
    request: Request,
    page_token: Optional[str] = Query(None, alias="pageToken"),
    store: LogoStore = Depends(get_logo_store),
    settings: Settings = Depends(get_app_settings),
):
    """Display a page of logos."""
    logos, next_token = store.list(settings.page_size, page_token)
    return render(
        request,
        "logos/list.html",
        {"logos": logos, "next_page_token": next_token},
    )


@router.get("/mine")
def list_my_logos(
    request: Request,
    page_token: Optional[str] = Query(None, alias="pageToken"),
    user: UserProfile = Depends(require_user),
    store: LogoStore = Depends(get_logo_store),
    settings: Settings = Depends(get_app_settings),
):
    """Display a page of the signed-in user's logos."""
    logos, next_token = store.list_by(user.id, settings.page_size, page_token)
    return render(
        request,
        "logos/list.html",
        {"logos": logos, "next_page_token": next_token},
    )


@router.get("/add")
def add_form(request: Request):
    return render(request, "logos/form.html", {"logo": {}, "action": "Add"})


@router.post("/add")
def add_logo(
    request: Request,
    title: str = Form(""),
    image_url: Optional[str] = Depends(upload_image),
    user: Optional[UserProfile] = Depends(get_current_user),
    store: LogoStore = Depends(get_logo_store),
):
    record = LogoRecord(title=title, image_url=image_url)
    if user is not None:
        record.created_by = user.display_name
        record.created_by_id = user.id
    else:
        record.created_by = ANONYMOUS

    saved = store.create(record)
    logger.info("Created logo %s", saved.id)
    return _redirect(_logo_url(request, saved.id))


@router.get("/{logo_id}/edit")
def edit_form(
    request: Request, logo_id: str, store: LogoStore = Depends(get_logo_store)
):
    logo = store.read(logo_id)
    return render(request, "logos/form.html", {"logo": logo, "action": "Edit"})


@router.post("/{logo_id}/edit")
def edit_logo(
    request: Request,
    logo_id: str,
    title: str = Form(""),
    current_image_url: Optional[str] = Form(None, alias="imageUrl"),
    uploaded_url: Optional[str] = Depends(upload_image),
    store: LogoStore = Depends(get_logo_store),
):
    record = LogoRecord(
        title=title, image_url=uploaded_url or current_image_url or None
    )
    saved = store.update(logo_id, record)
    logger.info("Updated logo %s", saved.id)
    return _redirect(_logo_url(request, saved.id))


@router.get("/{logo_id}")
def view_logo(
    request: Request, logo_id: str, store: LogoStore = Depends(get_logo_store)
):
    logo = store.read(logo_id)
    return render(request, "logos/view.html", {"logo": logo})


@router.get("/{logo_id}/delete")
def delete_logo(
    request: Request, logo_id: str, store: LogoStore = Depends(get_logo_store)
):
    store.delete(logo_id)
    logger.info("Deleted logo %s", logo_id)
    return _redirect(request.app.state.settings.logos_prefix)
