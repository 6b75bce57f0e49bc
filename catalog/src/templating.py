"""
Template rendering and redirects for the catalog views.

Templates live in catalog/src/templates and receive plain context
dicts; each router documents the field names its views rely on.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = status.HTTP_200_OK,
):
    """Render `name` with the given context."""
    return templates.TemplateResponse(request, name, context or {}, status_code=status_code)


def redirect(url: str) -> RedirectResponse:
    """POST/GET redirect that the browser follows with a GET."""
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)
