"""
ContactBook Backend: Application Shell Route
=============================================

What:  GET / and GET /{anything} render the root layout of the client app.
How:   The layout is the same for every path. The client router reads the
       browser location and decides which view to show.

Ordering:
    The catch-all matches every GET path, so this router is mounted last.
    Anything registered after it is unreachable.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from contactbook import __version__
from contactbook.client.routes import DEFAULT_PATH
from contactbook.config import Settings
from contactbook.dependencies import get_settings
from contactbook.templating import templates

router = APIRouter(tags=["Shell"])


def _render_shell(request: Request, settings: Settings) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "version": __version__,
            "default_path": DEFAULT_PATH,
            "api_base": "/api",
            "partials_base": "/partials",
            "debug": settings.log_level == "DEBUG",
        },
    )


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(request: Request, settings: Settings = Depends(get_settings)) -> HTMLResponse:
    return _render_shell(request, settings)


@router.get("/{full_path:path}", response_class=HTMLResponse, include_in_schema=False)
async def catch_all(
    full_path: str,
    request: Request,
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    return _render_shell(request, settings)
