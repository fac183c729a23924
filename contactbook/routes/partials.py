"""
ContactBook Backend: Partial Template Routes
=============================================

What:  GET /partials/{name} serves one template fragment of the client app.
How:   `name` is looked up in a fixed set of known partials. Anything else is
       a 404 before the template loader is touched, so a name can never be
       turned into an arbitrary file path.

Ordering:
    This router must be mounted before the shell router. The shell's
    catch-all would otherwise answer /partials/edit with the root layout.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from contactbook.exceptions import NotFoundError
from contactbook.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Partials"])

# One entry per client view
KNOWN_PARTIALS = frozenset({"index", "show", "new", "edit"})


@router.get(
    "/partials/{name}",
    response_class=HTMLResponse,
    summary="Render a template fragment",
)
async def render_partial(name: str, request: Request) -> HTMLResponse:
    if name not in KNOWN_PARTIALS:
        logger.warning("Rejected unknown partial name: %r", name)
        raise NotFoundError(resource="partial", resource_id=name)

    return templates.TemplateResponse(
        request,
        f"partials/{name}.html",
        {"partial": name},
    )
