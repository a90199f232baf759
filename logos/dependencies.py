"""
Dependency wiring for the FastAPI app.

Backends are built once in ``create_app`` and parked on ``app.state``;
these accessors hand them to route handlers.
"""

from __future__ import annotations

from fastapi import Request

from logos.config import Settings
from logos.db import LogoStore
from logos.storage import ImageStorage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_logo_store(request: Request) -> LogoStore:
    return request.app.state.logo_store


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage
