"""
ContactBook Client: Route Table
================================

What:  Maps client paths to (template, controller) pairs.
How:   Routes are tried in registration order and the first match wins, so
       `/contacts/new` has to be registered before `/contacts/:id`. A path
       that matches nothing is redirected to the default path, which is then
       matched like any other path. The default is a redirect, never a view.

Client routes:
    /contacts            → partials/index   ContactsIndexController
    /contacts/new        → partials/new     ContactNewController
    /contacts/:id        → partials/show    ContactShowController
    /contacts/:id/edit   → partials/edit    ContactEditController
    anything else        → redirect to /contacts
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple, Type
from urllib.parse import unquote, urlsplit

from contactbook.client.controllers import (
    CONTACTS_PATH,
    ContactEditController,
    ContactNewController,
    ContactsIndexController,
    ContactShowController,
    Controller,
)
from contactbook.exceptions import ClientRoutingError

logger = logging.getLogger(__name__)

DEFAULT_PATH = CONTACTS_PATH

_SEGMENT_PARAM = re.compile(r"^:([A-Za-z_][A-Za-z0-9_]*)$")


def compile_pattern(pattern: str) -> "re.Pattern[str]":
    """`/contacts/:id/edit` → ^/contacts/(?P<id>[^/]+)/edit$"""
    parts = []
    for segment in pattern.strip("/").split("/"):
        m = _SEGMENT_PARAM.match(segment)
        parts.append(f"(?P<{m.group(1)}>[^/]+)" if m else re.escape(segment))
    return re.compile("^/" + "/".join(parts) + "$")


def normalize_path(path: str) -> str:
    """Drop query and fragment, force a leading slash, drop a trailing one."""
    path = urlsplit(path).path or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


@dataclass(frozen=True)
class ClientRoute:
    pattern: str
    template: str
    controller: Type[Controller]
    regex: "re.Pattern[str]" = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", compile_pattern(self.pattern))

    def match(self, path: str) -> Optional[Dict[str, str]]:
        m = self.regex.match(path)
        if m is None:
            return None
        return {name: unquote(value) for name, value in m.groupdict().items()}


@dataclass(frozen=True)
class RouteMatch:
    route: ClientRoute
    path: str
    params: Dict[str, str]
    redirected_from: Optional[str] = None

    @property
    def template(self) -> str:
        return self.route.template

    @property
    def controller(self) -> Type[Controller]:
        return self.route.controller


class RouteTable:
    """
    Ordered client routes plus one default redirect.

    Example:
        routes = (
            RouteTable()
            .when("/contacts", "partials/index", ContactsIndexController)
            .otherwise("/contacts")
        )
        routes.resolve("/nowhere").path   # "/contacts"
    """

    def __init__(self) -> None:
        self._routes: List[ClientRoute] = []
        self.default_path: Optional[str] = None

    @property
    def routes(self) -> Tuple[ClientRoute, ...]:
        return tuple(self._routes)

    def when(self, pattern: str, template: str, controller: Type[Controller]) -> "RouteTable":
        self._routes.append(ClientRoute(pattern, template, controller))
        return self

    def otherwise(self, redirect_to: str) -> "RouteTable":
        self.default_path = normalize_path(redirect_to)
        return self

    def match(self, path: str) -> Optional[RouteMatch]:
        """First registered route matching `path`, or None."""
        path = normalize_path(path)
        for route in self._routes:
            params = route.match(path)
            if params is not None:
                return RouteMatch(route=route, path=path, params=params)
        return None

    def resolve(self, path: str) -> RouteMatch:
        """
        Match `path`, following the default redirect once if nothing matches.

        Raises:
            ClientRoutingError: no match and no default, or the default path
                                itself matches no route
        """
        found = self.match(path)
        if found is not None:
            return found

        if self.default_path is None:
            raise ClientRoutingError(normalize_path(path))

        logger.info("No client route for %s, redirecting to %s", path, self.default_path)
        found = self.match(self.default_path)
        if found is None:
            raise ClientRoutingError(self.default_path, context={"redirected_from": path})
        return replace(found, redirected_from=normalize_path(path))


def build_route_table() -> RouteTable:
    return (
        RouteTable()
        .when(CONTACTS_PATH, "partials/index", ContactsIndexController)
        .when(f"{CONTACTS_PATH}/new", "partials/new", ContactNewController)
        .when(f"{CONTACTS_PATH}/:id", "partials/show", ContactShowController)
        .when(f"{CONTACTS_PATH}/:id/edit", "partials/edit", ContactEditController)
        .otherwise(DEFAULT_PATH)
    )
