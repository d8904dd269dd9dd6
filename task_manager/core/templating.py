from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from task_manager.core.flash import clear_flash, has_flash, read_flash

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
) -> Response:
    """
    Render a page with the current user and the pending flash message.

    A flash passed explicitly in ``context`` wins over the one waiting in the
    cookie; the cookie is cleared either way.
    """
    context = dict(context or {})
    context.setdefault("current_user", getattr(request.state, "current_user", None))
    context.setdefault("errors", {})
    if "flash" not in context:
        context["flash"] = read_flash(request)

    response = templates.TemplateResponse(request, name, context, status_code=status_code)
    if has_flash(request):
        clear_flash(response)
    return response
