"""
ContactBook Client: View Controllers
=====================================

One controller per client view. `load()` builds the scope a view is
rendered with; `submit()` handles the view's form and may move the
location, after which the navigator dispatches the new path.

A failed request never looks like an empty result: scope() turns a
ResourceRequestError into {"error": ...}, while a missing record comes back
as {"contact": None, "missing": True}.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

from contactbook.client.resource import Record, ResourceClient
from contactbook.exceptions import ClientRoutingError, ResourceRequestError

logger = logging.getLogger(__name__)

CONTACTS_PATH = "/contacts"

Scope = Dict[str, Any]


@dataclass
class Location:
    """The client's current path; controllers change it to navigate."""

    path: str = ""

    def go(self, path: str) -> None:
        logger.debug("Location change %s -> %s", self.path, path)
        self.path = path


@dataclass
class ControllerContext:
    params: Dict[str, str]
    contacts: ResourceClient
    location: Location


def contact_path(contacts: ResourceClient, record: Mapping[str, Any], suffix: str = "") -> str:
    """Client path of a contact, read through the resource's identity alias."""
    identity = record[contacts.descriptor.aliases.get("id", "id")]
    return f"{CONTACTS_PATH}/{quote(str(identity), safe='')}{suffix}"


class Controller:
    """
    Base controller: a view with no data and no form.

    Subclasses override load() to fill the scope and submit() when their
    view has a form.
    """

    async def load(self, ctx: ControllerContext) -> Scope:
        return {}

    async def submit(self, ctx: ControllerContext, form: Record) -> Scope:
        """
        Raises:
            ClientRoutingError: this view has no form to submit
        """
        raise ClientRoutingError(
            ctx.location.path,
            context={"reason": f"{type(self).__name__} has no form"},
        )

    async def scope(self, ctx: ControllerContext) -> Scope:
        try:
            return await self.load(ctx)
        except ResourceRequestError as e:
            logger.warning("%s failed to load: %s", type(self).__name__, e.message)
            return {"error": e.message}


class ContactsIndexController(Controller):
    """The contact list. Read-only."""

    async def load(self, ctx: ControllerContext) -> Scope:
        return {"contacts": await ctx.contacts.list()}


async def _load_contact(ctx: ControllerContext) -> Scope:
    contact = await ctx.contacts.show(id=ctx.params["id"])
    if contact is None:
        return {"contact": None, "missing": True}
    return {"contact": contact}


class ContactShowController(Controller):
    """Shows one contact; its form is the delete button."""

    async def load(self, ctx: ControllerContext) -> Scope:
        return await _load_contact(ctx)

    async def submit(self, ctx: ControllerContext, form: Record) -> Scope:
        try:
            removed = await ctx.contacts.destroy(id=ctx.params["id"])
        except ResourceRequestError as e:
            return {**await self.scope(ctx), "error": e.message}
        if removed is None:
            return {"contact": None, "missing": True}
        ctx.location.go(CONTACTS_PATH)
        return {}


class ContactNewController(Controller):
    """Empty form; a successful create moves to the new contact."""

    async def load(self, ctx: ControllerContext) -> Scope:
        return {"contact": {"firstname": "", "lastname": "", "age": ""}}

    async def submit(self, ctx: ControllerContext, form: Record) -> Scope:
        try:
            created: Optional[Record] = await ctx.contacts.create(form)
        except ResourceRequestError as e:
            return {"contact": dict(form), "error": e.message}
        if created is None:
            return {"contact": dict(form), "error": "The server did not return the new contact"}
        ctx.location.go(contact_path(ctx.contacts, created))
        return {"contact": created}


class ContactEditController(Controller):
    """Form over the current record; a successful save moves back to it."""

    async def load(self, ctx: ControllerContext) -> Scope:
        return await _load_contact(ctx)

    async def submit(self, ctx: ControllerContext, form: Record) -> Scope:
        try:
            updated = await ctx.contacts.update(form, id=ctx.params["id"])
        except ResourceRequestError as e:
            identity = ctx.contacts.descriptor.identity_of(ctx.params)
            return {"contact": {**form, **identity}, "error": e.message}
        if updated is None:
            return {"contact": None, "missing": True}
        ctx.location.go(contact_path(ctx.contacts, updated))
        return {"contact": updated}
