"""
ContactBook: Contact Service Unit Tests
========================================

What:  ContactService rules in isolation: None → NotFoundError, empty
       updates rejected, store errors passed through untouched.
How:   The DocumentStore is an AsyncMock; no database involved.
"""

from unittest.mock import AsyncMock

import pytest

from contactbook.exceptions import NotFoundError, StoreUnavailableError, ValidationError
from contactbook.schemas.contact import Contact, ContactCreate, ContactUpdate
from contactbook.services.contact_service import ContactService
from contactbook.services.resource_mapper import ResourceMapper

ADA = {"_id": "65a1f0c2b3e4d5f6a7b8c9d0", "firstname": "Ada", "lastname": "Lovelace", "age": 28}


@pytest.fixture
def mock_store():
    return AsyncMock()


class TestContactServiceReads:

    def setup_method(self):
        self.service = ContactService(ResourceMapper("contact", Contact))

    @pytest.mark.asyncio
    async def test_list_maps_records(self, mock_store):
        """Store records are mapped to Contact models."""
        mock_store.find_all.return_value = [ADA]

        contacts = await self.service.list_contacts(mock_store, "contacts")

        assert [c.model_dump(by_alias=True) for c in contacts] == [ADA]
        mock_store.find_all.assert_awaited_once_with("contacts")

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, mock_store):
        """A missing record becomes NotFoundError."""
        mock_store.find_by_id.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_contact(mock_store, "contacts", "nope")

        assert exc_info.value.resource == "contact"
        assert exc_info.value.resource_id == "nope"

    @pytest.mark.asyncio
    async def test_store_errors_propagate(self, mock_store):
        """Store errors pass through unchanged."""
        mock_store.find_all.side_effect = StoreUnavailableError()

        with pytest.raises(StoreUnavailableError):
            await self.service.list_contacts(mock_store, "contacts")


class TestContactServiceWrites:

    def setup_method(self):
        self.service = ContactService(ResourceMapper("contact", Contact))

    @pytest.mark.asyncio
    async def test_create_saves_validated_fields(self, mock_store):
        """Create saves exactly the validated fields."""
        mock_store.save.return_value = ADA

        contact = await self.service.create_contact(
            mock_store, "contacts", ContactCreate(firstname="Ada", lastname="Lovelace", age=28),
        )

        mock_store.save.assert_awaited_once_with(
            "contacts", {"firstname": "Ada", "lastname": "Lovelace", "age": 28},
        )
        assert contact.id == ADA["_id"]

    @pytest.mark.asyncio
    async def test_update_sends_only_present_fields(self, mock_store):
        """Update sends only the fields present in the body."""
        mock_store.update.return_value = {**ADA, "age": 36}

        contact = await self.service.update_contact(mock_store, "contacts", ADA["_id"], ContactUpdate(age=36))

        mock_store.update.assert_awaited_once_with("contacts", ADA["_id"], {"age": 36})
        assert contact.age == 36

    @pytest.mark.asyncio
    async def test_update_without_fields_never_hits_store(self, mock_store):
        """An empty update is rejected before the store is touched."""
        with pytest.raises(ValidationError):
            await self.service.update_contact(mock_store, "contacts", ADA["_id"], ContactUpdate())

        mock_store.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self, mock_store):
        """Updating a missing contact raises NotFoundError."""
        mock_store.update.return_value = None

        with pytest.raises(NotFoundError):
            await self.service.update_contact(mock_store, "contacts", "nope", ContactUpdate(age=1))

    @pytest.mark.asyncio
    async def test_delete_missing_raises_not_found(self, mock_store):
        """Deleting a missing contact raises NotFoundError."""
        mock_store.delete.return_value = None

        with pytest.raises(NotFoundError):
            await self.service.delete_contact(mock_store, "contacts", "nope")
