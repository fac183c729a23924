"""
ContactBook Client: Navigator
==============================

What:  Runs the client half of the two-level dispatch.
How:   navigate(path):
           1. resolve the path in the route table (default redirect included)
           2. run the route's controller to build the scope
           3. fetch the route's partial from /partials/<name> (once per client)
           4. render the partial with the scope
       submit(form) hands a form to the current controller and, if the
       controller moved the location, navigates there.
Who:   Scripts and tests driving the application the way a browser does.

Dispatch is sequential: one navigation finishes before the next starts.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx
from jinja2 import Environment, select_autoescape

from contactbook.client.controllers import Controller, ControllerContext, Location, Scope
from contactbook.client.resource import CONTACTS, ResourceClient, ResourceDescriptor
from contactbook.client.routes import RouteMatch, RouteTable, build_route_table
from contactbook.exceptions import ClientRoutingError, ResourceRequestError

logger = logging.getLogger(__name__)


@dataclass
class View:
    """What the client shows after a dispatch."""

    path: str
    template: str
    scope: Scope
    html: str
    redirected_from: Optional[str] = None
    params: Dict[str, str] = field(default_factory=dict)


class ContactBookClient:
    """
    Browser-like driver for the ContactBook application.

    Args:
        http:       httpx client pointed at the server (base_url, timeout and
                    transport are its business)
        routes:     client route table; the standard table when omitted
        descriptor: resource descriptor for contacts
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        routes: Optional[RouteTable] = None,
        descriptor: ResourceDescriptor = CONTACTS,
    ):
        self.http = http
        self.routes = routes or build_route_table()
        self.contacts = ResourceClient(descriptor, http)
        self.location = Location()
        self.history: List[str] = []
        self.view: Optional[View] = None
        self._current: Optional[Tuple[RouteMatch, Controller]] = None
        self._partials: Dict[str, str] = {}
        self._env = Environment(autoescape=select_autoescape(default_for_string=True))

    async def navigate(self, path: str) -> View:
        match = self.routes.resolve(path)
        controller = match.controller()
        self.location.path = match.path

        ctx = ControllerContext(params=dict(match.params), contacts=self.contacts, location=self.location)
        scope = await controller.scope(ctx)

        self._current = (match, controller)
        self.history.append(match.path)

        # A controller may redirect while loading
        if self.location.path != match.path:
            return await self.navigate(self.location.path)

        return await self._render(match, scope)

    async def submit(self, form: Mapping[str, Any]) -> View:
        if self._current is None:
            raise ClientRoutingError("", context={"reason": "submit before any navigation"})

        match, controller = self._current
        ctx = ControllerContext(params=dict(match.params), contacts=self.contacts, location=self.location)
        scope = await controller.submit(ctx, dict(form))

        if self.location.path != match.path:
            return await self.navigate(self.location.path)
        return await self._render(match, scope)

    async def _render(self, match: RouteMatch, scope: Scope) -> View:
        source = await self._partial(match.template)
        html = self._env.from_string(source).render(**scope, params=match.params)
        self.view = View(
            path=match.path,
            template=match.template,
            scope=scope,
            html=html,
            redirected_from=match.redirected_from,
            params=dict(match.params),
        )
        logger.debug("Rendered %s with %s", match.path, match.template)
        return self.view

    async def _partial(self, template: str) -> str:
        """Template source from the server's partial router, cached per client."""
        cached = self._partials.get(template)
        if cached is not None:
            return cached

        url = f"/{template}"
        try:
            response = await self.http.get(url)
        except httpx.HTTPError as e:
            raise ResourceRequestError(
                message=f"Could not fetch template {template}: {type(e).__name__}",
                context={"url": url},
            ) from e
        if response.is_error:
            raise ResourceRequestError(
                message=f"Could not fetch template {template}",
                status_code=response.status_code,
                context={"url": url},
            )

        self._partials[template] = response.text
        return response.text
