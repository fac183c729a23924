# Routes package init
"""
ContactBook Backend: Routes Package
====================================

Route Inventory (in mount order, first match wins):
    - health.py:    GET  /health
    - contacts.py:  GET/POST /api/contacts, GET/PUT/DELETE /api/contacts/{id}
    - partials.py:  GET  /partials/{name}
    - shell.py:     GET  /  and  GET /{path}   (catch-all, always last)

ROUTERS is the single source of that order; main.create_app() mounts it
as-is.
"""

from contactbook.routes import contacts, health, partials, shell

ROUTERS = (
    health.router,
    contacts.router,
    partials.router,
    shell.router,
)
