"""
ContactBook Backend: Contact Service
=====================================

What:  Business rules for the contacts resource: list, show, create, update,
       destroy.
How:   Composes the DocumentStore (persistence) and a ResourceMapper (wire
       translation). Converts "store returned None" into NotFoundError.
Who:   Called by the contacts route handlers; tests call it directly.

Design Decision:
    ContactService is stateless. The store and the collection name are passed
    in on every call, so a single instance serves every application and test.

Policies:
    create:  responds with the persisted record, `_id` included
    update:  partial merge of the fields present in the body; 404 if absent;
             400 if the body carries no field at all
    destroy: 404 if absent; otherwise returns the removed record
"""

import logging
from typing import List

from contactbook.exceptions import NotFoundError, ValidationError
from contactbook.schemas.contact import Contact, ContactCreate, ContactUpdate
from contactbook.services.document_store import DocumentStore
from contactbook.services.resource_mapper import ResourceMapper

logger = logging.getLogger(__name__)


class ContactService:
    """
    Contact operations over an injected DocumentStore.

    Store errors (DatabaseError, StoreUnavailableError) are not caught here;
    they propagate to the global exception handlers unchanged.
    """

    def __init__(self, mapper: ResourceMapper[Contact]):
        self.mapper = mapper

    async def list_contacts(self, store: DocumentStore, collection: str) -> List[Contact]:
        """All contacts in the store's natural (insertion) order. No paging."""
        records = await store.find_all(collection)
        return self.mapper.to_wire_many(records)

    async def get_contact(self, store: DocumentStore, collection: str, contact_id: str) -> Contact:
        """
        Raises:
            NotFoundError: no contact has this `_id` (→ 404)
        """
        record = await store.find_by_id(collection, contact_id)
        if record is None:
            raise NotFoundError(resource=self.mapper.resource, resource_id=contact_id)
        return self.mapper.to_wire(record)

    async def create_contact(
        self,
        store: DocumentStore,
        collection: str,
        payload: ContactCreate,
    ) -> Contact:
        record = await store.save(collection, self.mapper.from_wire(payload))
        logger.info("Created %s %s", self.mapper.resource, record["_id"])
        return self.mapper.to_wire(record)

    async def update_contact(
        self,
        store: DocumentStore,
        collection: str,
        contact_id: str,
        payload: ContactUpdate,
    ) -> Contact:
        """
        Merge the submitted fields into an existing contact.

        Raises:
            ValidationError: body has no updatable field (→ 400)
            NotFoundError: no contact has this `_id` (→ 404)
        """
        fields = self.mapper.from_wire(payload, partial=True)
        if not fields:
            raise ValidationError(
                message="Update body must contain at least one of: firstname, lastname, age",
                context={"resource_id": contact_id},
            )

        record = await store.update(collection, contact_id, fields)
        if record is None:
            raise NotFoundError(resource=self.mapper.resource, resource_id=contact_id)
        logger.info("Updated %s %s (%s)", self.mapper.resource, contact_id, ", ".join(sorted(fields)))
        return self.mapper.to_wire(record)

    async def delete_contact(self, store: DocumentStore, collection: str, contact_id: str) -> Contact:
        record = await store.delete(collection, contact_id)
        if record is None:
            raise NotFoundError(resource=self.mapper.resource, resource_id=contact_id)
        logger.info("Deleted %s %s", self.mapper.resource, contact_id)
        return self.mapper.to_wire(record)


# ── Singleton Instance ────────────────────────────────────────────────────
contact_service = ContactService(ResourceMapper("contact", Contact))
