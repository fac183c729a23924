"""
ContactBook Client
===================

The browser half of ContactBook, in Python: the REST resource binding, the
client route table, the view controllers and a navigator that ties them
together over an httpx client.

Example:
    async with httpx.AsyncClient(base_url="http://localhost:8000", timeout=10) as http:
        client = ContactBookClient(http)
        view = await client.navigate("/contacts")
"""

from contactbook.client.app import ContactBookClient, View
from contactbook.client.resource import (
    CONTACTS,
    Action,
    ResourceClient,
    ResourceDescriptor,
    build_url,
    parse_url,
)
from contactbook.client.routes import DEFAULT_PATH, RouteTable, build_route_table

__all__ = [
    "Action",
    "CONTACTS",
    "ContactBookClient",
    "DEFAULT_PATH",
    "ResourceClient",
    "ResourceDescriptor",
    "RouteTable",
    "View",
    "build_route_table",
    "build_url",
    "parse_url",
]
