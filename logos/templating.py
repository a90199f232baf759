"""
Jinja2 rendering for the logos pages.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from logos.oauth2 import template_context

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(
    request: Request,
    name: str,
    context: Optional[dict[str, Any]] = None,
    status_code: int = 200,
):
    """Render ``name`` with the sign-in variables and mount prefix every page uses."""
    merged = template_context(request)
    merged["logos_prefix"] = request.app.state.settings.logos_prefix
    merged.update(context or {})
    return templates.TemplateResponse(
        request, name, merged, status_code=status_code
    )
