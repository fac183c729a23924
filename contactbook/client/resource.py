"""
ContactBook Client: REST Resource Binding
==========================================

What:  Declarative binding between a REST resource and the client.
How:   A ResourceDescriptor holds a URL template (`/api/contacts/:id`), an
       identity alias map and an action table. One generic request builder
       (ResourceClient.call) turns (action, params, record) into an HTTP
       request. No methods are generated at runtime.

Identity aliasing:
    URLs use a conventional `id` slot while stored records carry the
    store's own `_id`. With aliases {"id": "_id"} the `id` placeholder is
    filled from record["_id"] when no explicit `id` param is given, and
    parse_url() + identity_of() map a URL back to {"_id": ...}.

Results:
    list action      → list of records
    singular action  → record, or None when the server answers 404 ("no data")
    anything else    → ResourceRequestError ("request failed")
"""

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import quote, unquote, urlencode, urlsplit

import httpx

from contactbook.exceptions import ResourceRequestError

logger = logging.getLogger(__name__)

GET = "GET"
POST = "POST"
PUT = "PUT"
DELETE = "DELETE"

Record = Dict[str, Any]
Result = Union[Record, List[Record], None]

_PLACEHOLDER = re.compile(r"^:([A-Za-z_][A-Za-z0-9_]*)$")


@dataclass(frozen=True)
class Action:
    """HTTP verb plus whether the action answers with a collection."""

    method: str
    is_array: bool = False

    @property
    def sends_body(self) -> bool:
        return self.method in (POST, PUT)


DEFAULT_ACTIONS: Mapping[str, Action] = MappingProxyType({
    "list": Action(GET, is_array=True),
    "show": Action(GET),
    "create": Action(POST),
    "update": Action(PUT),
    "destroy": Action(DELETE),
})


@dataclass(frozen=True)
class ResourceDescriptor:
    """
    Configuration of one REST resource.

    Attributes:
        name:     Entity name, used in log lines and errors ("Contact")
        url:      URL template; whole path segments of the form `:name`
                  are placeholders
        aliases:  public URL parameter → internal record field
        actions:  action name → Action
    """

    name: str
    url: str
    aliases: Mapping[str, str] = field(default_factory=lambda: {"id": "_id"})
    actions: Mapping[str, Action] = field(default_factory=lambda: dict(DEFAULT_ACTIONS))

    @property
    def placeholders(self) -> List[str]:
        names = []
        for segment in self.url.split("/"):
            m = _PLACEHOLDER.match(segment)
            if m:
                names.append(m.group(1))
        return names

    def action(self, name: str) -> Action:
        try:
            return self.actions[name]
        except KeyError:
            raise ValueError(f"{self.name} resource has no action '{name}'") from None

    def identity_of(self, params: Mapping[str, Any]) -> Record:
        """Translate public URL params into internal identity fields."""
        return {
            internal: params[public]
            for public, internal in self.aliases.items()
            if params.get(public) is not None
        }


def build_url(
    descriptor: ResourceDescriptor,
    params: Optional[Mapping[str, Any]] = None,
    record: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Fill the descriptor's URL template.

    Each placeholder takes the explicit param of the same name first, then
    the record field it is aliased to (or the same-named field). Placeholders
    left without a value are dropped with their segment, so
    `/api/contacts/:id` becomes `/api/contacts`. Params that fill no
    placeholder are appended as a query string.

    >>> build_url(CONTACTS, record={"_id": "abc123"})
    '/api/contacts/abc123'
    """
    remaining = {k: v for k, v in (params or {}).items() if v is not None}
    record = record or {}

    segments = []
    for segment in descriptor.url.split("/"):
        m = _PLACEHOLDER.match(segment)
        if not m:
            segments.append(segment)
            continue
        name = m.group(1)
        value = remaining.pop(name, None)
        if value is None:
            value = record.get(descriptor.aliases.get(name, name))
        if value is None or value == "":
            continue
        segments.append(quote(str(value), safe=""))

    path = "/".join(segments) or "/"
    if remaining:
        path = f"{path}?{urlencode(sorted(remaining.items()))}"
    return path


def _template_regex(descriptor: ResourceDescriptor) -> "re.Pattern[str]":
    parts = []
    for segment in descriptor.url.strip("/").split("/"):
        m = _PLACEHOLDER.match(segment)
        if m:
            parts.append(f"(?:/(?P<{m.group(1)}>[^/]+))?")
        else:
            parts.append("/" + re.escape(segment))
    return re.compile("^" + "".join(parts) + "/?$")


def parse_url(descriptor: ResourceDescriptor, url: str) -> Dict[str, str]:
    """
    Inverse of build_url for the path part: recover the placeholder values.

    Raises:
        ValueError: the URL does not belong to this resource
    """
    path = urlsplit(url).path
    m = _template_regex(descriptor).match(path)
    if m is None:
        raise ValueError(f"'{url}' is not a {descriptor.name} URL ({descriptor.url})")
    return {name: unquote(value) for name, value in m.groupdict().items() if value is not None}


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Server answered {response.status_code} {response.reason_phrase}"


class ResourceClient:
    """
    Issues the requests described by a ResourceDescriptor over httpx.

    The httpx client owns the base URL, the timeout and the transport;
    ResourceClient never creates or closes it.
    """

    def __init__(self, descriptor: ResourceDescriptor, http: httpx.AsyncClient):
        self.descriptor = descriptor
        self.http = http

    async def call(
        self,
        action_name: str,
        params: Optional[Mapping[str, Any]] = None,
        record: Optional[Mapping[str, Any]] = None,
    ) -> Result:
        """
        Run one action.

        Args:
            action_name: key of the descriptor's action table
            params:      explicit URL params (placeholders or query string)
            record:      record to read aliased identity from; also the JSON
                         body for POST/PUT actions

        Returns:
            list for array actions, dict for singular ones, None for a 404
            on a singular action.

        Raises:
            ResourceRequestError: transport failure, timeout, non-2xx status
                                  or a body of the wrong shape
        """
        action = self.descriptor.action(action_name)
        url = build_url(self.descriptor, params, record)
        body = dict(record) if action.sends_body and record is not None else None
        context = {"action": action_name, "method": action.method, "url": url}

        logger.debug("%s %s (%s.%s)", action.method, url, self.descriptor.name, action_name)
        try:
            response = await self.http.request(action.method, url, json=body)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", action.method, url, type(e).__name__)
            raise ResourceRequestError(
                message=f"{self.descriptor.name} {action_name} request failed: {type(e).__name__}",
                context={**context, "error_type": type(e).__name__},
            ) from e

        if response.status_code == 404 and not action.is_array:
            return None
        if response.is_error:
            raise ResourceRequestError(
                message=_error_message(response),
                status_code=response.status_code,
                context=context,
            )
        if response.status_code == 204 or not response.content:
            return [] if action.is_array else None

        try:
            data = response.json()
        except ValueError as e:
            raise ResourceRequestError(
                message=f"{self.descriptor.name} {action_name} returned a non-JSON body",
                status_code=response.status_code,
                context=context,
            ) from e

        expected = list if action.is_array else dict
        if not isinstance(data, expected):
            raise ResourceRequestError(
                message=f"{self.descriptor.name} {action_name} expected a JSON {expected.__name__}",
                status_code=response.status_code,
                context=context,
            )
        return data

    # ── Convenience wrappers over call() ──────────────────────────────────

    async def list(self, **params: Any) -> List[Record]:
        return await self.call("list", params)

    async def show(self, record: Optional[Mapping[str, Any]] = None, **params: Any) -> Optional[Record]:
        return await self.call("show", params, record)

    async def create(self, record: Mapping[str, Any]) -> Optional[Record]:
        # A new record has no identity yet; never let a stale one pick the URL
        internal = set(self.descriptor.aliases.values())
        fresh = {key: value for key, value in record.items() if key not in internal}
        return await self.call("create", None, fresh)

    async def update(self, record: Mapping[str, Any], **params: Any) -> Optional[Record]:
        return await self.call("update", params, record)

    async def destroy(self, record: Optional[Mapping[str, Any]] = None, **params: Any) -> Optional[Record]:
        return await self.call("destroy", params, record)


CONTACTS = ResourceDescriptor(name="Contact", url="/api/contacts/:id")
