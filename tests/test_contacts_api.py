"""
ContactBook: Contacts API Integration Tests
============================================

What:  The REST resource end to end, through HTTP.
How:   httpx AsyncClient over ASGITransport against an app backed by an
       in-memory SQLite document store (see conftest.py).

What we test:
    ✅ Create → list / show round trips, `_id` on every record
    ✅ Update merges, destroy removes, both 404 for unknown ids
    ✅ Malformed bodies rejected without touching the store
    ✅ Store failures surface as 500 / 503, never as empty results
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from contactbook.exceptions import DatabaseError, StoreUnavailableError
from contactbook.main import create_app
from contactbook.services.document_store import DocumentStore


async def _create(client, fields):
    response = await client.post("/api/contacts", json=fields)
    assert response.status_code == 201
    return response.json()


class TestContactsRead:

    @pytest.mark.asyncio
    async def test_list_empty(self, test_client):
        """An empty store lists as []."""
        response = await test_client.get("/api/contacts")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_create_then_list(self, test_client, sample_contact):
        """A created contact shows up in the list with its `_id`."""
        created = await _create(test_client, sample_contact)

        response = await test_client.get("/api/contacts")

        records = response.json()
        assert len(records) == 1
        assert records[0]["_id"]
        assert records[0] == {**sample_contact, "_id": created["_id"]}

    @pytest.mark.asyncio
    async def test_list_matches_store_and_is_stable(self, test_client, store):
        """The list equals the stored set, in insertion order, on every call."""
        for name in ("Ada", "Grace", "Edsger"):
            await _create(test_client, {"firstname": name, "lastname": "X", "age": 40})

        first = (await test_client.get("/api/contacts")).json()
        second = (await test_client.get("/api/contacts")).json()

        assert first == second
        assert first == await store.find_all("contacts")
        assert [r["firstname"] for r in first] == ["Ada", "Grace", "Edsger"]

    @pytest.mark.asyncio
    async def test_show_round_trip(self, test_client, sample_contact):
        """Show returns exactly what create returned."""
        created = await _create(test_client, sample_contact)

        response = await test_client.get(f"/api/contacts/{created['_id']}")

        assert response.status_code == 200
        assert response.json() == created

    @pytest.mark.asyncio
    async def test_show_unknown_id_is_404(self, test_client):
        """An unknown id is a 404 carrying the request ID."""
        response = await test_client.get("/api/contacts/000000000000000000000000")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["request_id"] == response.headers["X-Request-ID"]


class TestContactsWrite:

    @pytest.mark.asyncio
    async def test_create_returns_persisted_record(self, test_client, store, sample_contact):
        """Create answers with the record as stored."""
        created = await _create(test_client, sample_contact)

        assert created["firstname"] == "Ada"
        assert await store.find_by_id("contacts", created["_id"]) == created

    @pytest.mark.asyncio
    async def test_create_ignores_client_id(self, test_client, sample_contact):
        """The store assigns `_id`; a client-supplied one is ignored."""
        created = await _create(test_client, {**sample_contact, "_id": "mine"})

        assert created["_id"] != "mine"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"firstname": "Ada", "lastname": "Lovelace", "age": "old"},
            {"firstname": "Ada", "age": 28},
            {"firstname": "", "lastname": "Lovelace", "age": 28},
            {"firstname": "Ada", "lastname": "Lovelace", "age": -1},
        ],
    )
    async def test_create_rejects_malformed_body(self, test_client, store, body):
        """Malformed bodies get 422 and persist nothing."""
        response = await test_client.post("/api/contacts", json=body)

        assert response.status_code == 422
        assert await store.find_all("contacts") == []

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, test_client, sample_contact):
        """Update merges fields into the existing body."""
        created = await _create(test_client, sample_contact)

        response = await test_client.put(f"/api/contacts/{created['_id']}", json={"age": 36})

        assert response.status_code == 200
        assert response.json() == {**created, "age": 36}
        shown = await test_client.get(f"/api/contacts/{created['_id']}")
        assert shown.json()["age"] == 36

    @pytest.mark.asyncio
    async def test_update_with_full_record_from_client(self, test_client, sample_contact):
        """A full record sent back by the client updates cleanly."""
        created = await _create(test_client, sample_contact)

        edited = {**created, "lastname": "King"}
        response = await test_client.put(f"/api/contacts/{created['_id']}", json=edited)

        assert response.json() == edited

    @pytest.mark.asyncio
    async def test_update_unknown_id_is_404(self, test_client):
        """Updating an unknown id is a 404."""
        response = await test_client.put("/api/contacts/000000000000000000000000", json={"age": 1})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_without_fields_is_400(self, test_client, sample_contact):
        """A body with no known field is a 400."""
        created = await _create(test_client, sample_contact)

        response = await test_client.put(f"/api/contacts/{created['_id']}", json={"nickname": "Ada"})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_destroy_removes_contact(self, test_client, sample_contact):
        """Destroy answers with the removed record and removes it."""
        created = await _create(test_client, sample_contact)

        response = await test_client.delete(f"/api/contacts/{created['_id']}")

        assert response.status_code == 200
        assert response.json() == created
        assert (await test_client.get(f"/api/contacts/{created['_id']}")).status_code == 404
        assert (await test_client.get("/api/contacts")).json() == []

    @pytest.mark.asyncio
    async def test_destroy_unknown_id_is_404(self, test_client):
        """Destroying an unknown id is a 404."""
        response = await test_client.delete("/api/contacts/000000000000000000000000")

        assert response.status_code == 404


class TestContactsStoreFailures:

    @pytest.mark.asyncio
    async def test_query_failure_is_500_not_empty_list(self, test_client, store):
        """A failing query is a 500, not an empty list."""
        with patch.object(store, "find_all", AsyncMock(side_effect=DatabaseError())):
            response = await test_client.get("/api/contacts")

        assert response.status_code == 500
        assert response.json()["error"] == "server_error"

    @pytest.mark.asyncio
    async def test_store_outage_is_503(self, test_client, store, sample_contact):
        """An unreachable store is a 503 with Retry-After."""
        with patch.object(store, "save", AsyncMock(side_effect=StoreUnavailableError())):
            response = await test_client.post("/api/contacts", json=sample_contact)

        assert response.status_code == 503
        assert response.json()["error"] == "store_unavailable"
        assert response.headers["Retry-After"] == "5"

    @pytest.mark.asyncio
    async def test_unopened_store_is_503(self, test_settings):
        """A store that was never opened answers 503."""
        app = create_app(settings=test_settings, store=DocumentStore(test_settings))
        transport = ASGITransport(app=app)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/contacts")

        assert response.status_code == 503
