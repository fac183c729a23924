"""
ContactBook Backend: Template Environment
==========================================

What:  The Jinja2 template loader shared by the shell and partial routers.
How:   Templates ship inside the package (contactbook/templates) so they
       resolve the same way from a checkout, a wheel or a container.

Partials are rendered twice: once here, where only the static parts are
filled in, and once by the client with the controller scope. Client-side
markup therefore sits inside {% raw %} blocks.
"""

from pathlib import Path

from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
