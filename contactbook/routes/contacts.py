"""
ContactBook Backend: Contacts API Route Handlers
=================================================

What:  The REST resource for contacts.

    GET    /api/contacts        list
    GET    /api/contacts/{id}   show
    POST   /api/contacts        create
    PUT    /api/contacts/{id}   update (partial merge)
    DELETE /api/contacts/{id}   destroy
    *      /api/...            JSON 404 (registered last)

How:   Handlers stay thin: pull the store and collection from the app,
       delegate to ContactService, let the global exception handlers turn
       NotFoundError / DatabaseError into error responses.
Who:   Called by the client resource binding (contactbook.client.resource).
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from contactbook.dependencies import get_contacts_collection, get_store
from contactbook.exceptions import NotFoundError
from contactbook.schemas.common import ErrorResponse
from contactbook.schemas.contact import Contact, ContactCreate, ContactUpdate
from contactbook.services.contact_service import contact_service
from contactbook.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Contacts"])

_STORE_ERRORS = {
    500: {"description": "Store query failed", "model": ErrorResponse},
    503: {"description": "Store unreachable", "model": ErrorResponse},
}
_NOT_FOUND = {404: {"description": "Contact not found", "model": ErrorResponse}}


@router.get(
    "/contacts",
    response_model=List[Contact],
    responses=_STORE_ERRORS,
    summary="List all contacts",
)
async def list_contacts(
    store: DocumentStore = Depends(get_store),
    collection: str = Depends(get_contacts_collection),
) -> List[Contact]:
    """Every stored contact, in insertion order. No filtering or paging."""
    return await contact_service.list_contacts(store, collection)


@router.get(
    "/contacts/{contact_id}",
    response_model=Contact,
    responses={**_NOT_FOUND, **_STORE_ERRORS},
    summary="Get a single contact",
)
async def show_contact(
    contact_id: str,
    store: DocumentStore = Depends(get_store),
    collection: str = Depends(get_contacts_collection),
) -> Contact:
    return await contact_service.get_contact(store, collection, contact_id)


@router.post(
    "/contacts",
    status_code=201,
    response_model=Contact,
    responses=_STORE_ERRORS,
    summary="Create a contact",
    description=(
        "Persists the submitted fields and answers with the stored record, "
        "including the `_id` assigned by the store."
    ),
)
async def create_contact(
    payload: ContactCreate,
    store: DocumentStore = Depends(get_store),
    collection: str = Depends(get_contacts_collection),
) -> Contact:
    return await contact_service.create_contact(store, collection, payload)


@router.put(
    "/contacts/{contact_id}",
    response_model=Contact,
    responses={
        400: {"description": "No updatable field in body", "model": ErrorResponse},
        **_NOT_FOUND,
        **_STORE_ERRORS,
    },
    summary="Update a contact",
    description="Merges the fields present in the body into the stored contact.",
)
async def update_contact(
    payload: ContactUpdate,
    contact_id: str,
    store: DocumentStore = Depends(get_store),
    collection: str = Depends(get_contacts_collection),
) -> Contact:
    return await contact_service.update_contact(store, collection, contact_id, payload)


@router.delete(
    "/contacts/{contact_id}",
    response_model=Contact,
    responses={**_NOT_FOUND, **_STORE_ERRORS},
    summary="Delete a contact",
    description="Removes the contact and answers with the removed record.",
)
async def destroy_contact(
    contact_id: str,
    store: DocumentStore = Depends(get_store),
    collection: str = Depends(get_contacts_collection),
) -> Contact:
    return await contact_service.delete_contact(store, collection, contact_id)


@router.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def api_not_found(path: str) -> None:
    """Misses under /api answer a JSON 404 instead of falling through to the shell."""
    raise NotFoundError(resource="API endpoint", context={"path": f"/api/{path}"})
