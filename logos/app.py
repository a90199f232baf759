"""
FastAPI application entry point for the logos service.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, status
from fastapi.responses import RedirectResponse
from starlette.middleware.sessions import SessionMiddleware

from logos import api, crud, images, oauth2
from logos.config import Settings, get_settings
from logos.db import build_logo_store
from logos.error_handlers import register_error_handlers
from logos.storage import build_image_storage


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Logos", version="0.1.0")
    app.state.settings = settings
    app.state.logo_store = build_logo_store(settings)
    app.state.image_storage = build_image_storage(settings)
    app.state.oauth_client = oauth2.build_oauth_client(settings)

    # Added before the session middleware so it runs inside it.
    images.register_upload_limit(app, settings)
    app.add_middleware(SessionMiddleware, secret_key=settings.secret_key)
    register_error_handlers(app)

    app.include_router(crud.router, prefix=settings.logos_prefix)
    app.include_router(api.router, prefix=f"{settings.api_prefix}/logos")
    app.include_router(oauth2.router, prefix="/auth")

    @app.get("/", include_in_schema=False)
    def index():
        return RedirectResponse(settings.logos_prefix, status_code=status.HTTP_302_FOUND)

    return app


app = create_app()
