"""
JSON REST routes for logos, mounted under ``/api/logos``.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from logos.config import Settings
from logos.db import ANONYMOUS, LogoRecord, LogoStore
from logos.dependencies import get_app_settings, get_logo_store
from logos.oauth2 import UserProfile, get_current_user
from logos.schemas import DeleteResponse, ListLogosResponse, LogoPayload, LogoResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ListLogosResponse)
def list_logos(
    page_token: Optional[str] = Query(None, alias="pageToken"),
    store: LogoStore = Depends(get_logo_store),
    settings: Settings = Depends(get_app_settings),
):
    logos, next_token = store.list(settings.page_size, page_token)
    return ListLogosResponse(
        items=[LogoResponse.from_record(logo) for logo in logos],
        nextPageToken=next_token,
    )


@router.post("", response_model=LogoResponse)
def create_logo(
    payload: LogoPayload,
    user: Optional[UserProfile] = Depends(get_current_user),
    store: LogoStore = Depends(get_logo_store),
):
    record = LogoRecord(
        title=payload.title,
        image_url=payload.imageUrl,
        created_by=user.display_name if user else ANONYMOUS,
        created_by_id=user.id if user else None,
    )
    saved = store.create(record)
    logger.info("Created logo %s via api", saved.id)
    return LogoResponse.from_record(saved)


@router.get("/{logo_id}", response_model=LogoResponse)
def read_logo(logo_id: str, store: LogoStore = Depends(get_logo_store)):
    return LogoResponse.from_record(store.read(logo_id))


@router.put("/{logo_id}", response_model=LogoResponse)
def update_logo(
    logo_id: str,
    payload: LogoPayload,
    store: LogoStore = Depends(get_logo_store),
):
    record = LogoRecord(title=payload.title, image_url=payload.imageUrl)
    saved = store.update(logo_id, record)
    logger.info("Updated logo %s via api", saved.id)
    return LogoResponse.from_record(saved)


@router.delete("/{logo_id}", response_model=DeleteResponse)
def delete_logo(logo_id: str, store: LogoStore = Depends(get_logo_store)):
    store.delete(logo_id)
    logger.info("Deleted logo %s via api", logo_id)
    return DeleteResponse(status="ok")
