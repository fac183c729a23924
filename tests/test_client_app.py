"""
ContactBook: Client Navigator Tests
====================================

What:  The whole two-level dispatch as a browser would drive it: client
       route → controller → REST calls → partial fetched from the server →
       rendered view.
How:   ContactBookClient over the test app (the `browser` fixture).

What we test:
    ✅ Unknown paths land on the contact list via the default redirect
    ✅ Create, edit and delete flows through forms
    ✅ Missing contacts and failed requests render differently from data
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from contactbook.client.app import ContactBookClient
from contactbook.exceptions import ClientRoutingError, DatabaseError

ADA_FORM = {"firstname": "Ada", "lastname": "Lovelace", "age": "28"}


async def _create_via_form(browser) -> dict:
    await browser.navigate("/contacts/new")
    view = await browser.submit(ADA_FORM)
    return view.scope["contact"]


class TestNavigation:

    @pytest.mark.asyncio
    async def test_unknown_path_shows_contact_list(self, browser):
        """An unknown client path redirects to the contact list."""
        view = await browser.navigate("/unknown")

        assert view.path == "/contacts"
        assert view.redirected_from == "/unknown"
        assert view.template == "partials/index"
        assert view.scope == {"contacts": []}
        assert "No contacts yet." in view.html

    @pytest.mark.asyncio
    async def test_list_shows_links_by_identity(self, browser, test_client, sample_contact):
        """List links point at each contact's `_id`."""
        created = (await test_client.post("/api/contacts", json=sample_contact)).json()

        view = await browser.navigate("/contacts")

        assert f'href="/contacts/{created["_id"]}"' in view.html
        assert "Ada Lovelace" in view.html

    @pytest.mark.asyncio
    async def test_missing_contact(self, browser):
        """A missing contact renders the missing state, not an error."""
        view = await browser.navigate("/contacts/000000000000000000000000")

        assert view.template == "partials/show"
        assert view.scope == {"contact": None, "missing": True}
        assert "does not exist" in view.html

    @pytest.mark.asyncio
    async def test_partials_fetched_once(self, app):
        """Each partial is fetched from the server only once per client."""
        fetched = []

        async def record_request(request):
            if request.url.path.startswith("/partials/"):
                fetched.append(request.url.path)

        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            event_hooks={"request": [record_request]},
        ) as http:
            browser = ContactBookClient(http)
            await browser.navigate("/contacts")
            await browser.navigate("/elsewhere")

        assert fetched == ["/partials/index"]

    @pytest.mark.asyncio
    async def test_submit_before_navigation(self, browser):
        """Submitting with no current view is a routing error."""
        with pytest.raises(ClientRoutingError):
            await browser.submit(ADA_FORM)

    @pytest.mark.asyncio
    async def test_submit_on_view_without_form(self, browser):
        """Submitting on the read-only list is a routing error, not a crash."""
        await browser.navigate("/contacts")

        with pytest.raises(ClientRoutingError) as exc_info:
            await browser.submit(ADA_FORM)

        assert exc_info.value.path == "/contacts"
        assert "ContactsIndexController" in exc_info.value.context["reason"]


class TestForms:

    @pytest.mark.asyncio
    async def test_create_redirects_to_new_contact(self, browser):
        """A successful create moves to the new contact's page."""
        await browser.navigate("/contacts/new")

        view = await browser.submit(ADA_FORM)

        contact = view.scope["contact"]
        assert view.path == f"/contacts/{contact['_id']}"
        assert view.template == "partials/show"
        assert contact["age"] == 28
        assert '<dd class="lastname">Lovelace</dd>' in view.html
        assert browser.history[-2:] == ["/contacts/new", view.path]

    @pytest.mark.asyncio
    async def test_create_with_invalid_form_stays_on_form(self, browser, store):
        """A rejected form stays on the form with an error and persists nothing."""
        await browser.navigate("/contacts/new")

        view = await browser.submit({**ADA_FORM, "age": "old"})

        assert view.path == "/contacts/new"
        assert view.scope["contact"] == {**ADA_FORM, "age": "old"}
        assert 'class="error"' in view.html
        assert await store.find_all("contacts") == []

    @pytest.mark.asyncio
    async def test_edit_updates_contact(self, browser):
        """Saving the edit form updates the contact and shows it."""
        contact = await _create_via_form(browser)
        await browser.navigate(f"/contacts/{contact['_id']}/edit")

        view = await browser.submit({"firstname": "Ada", "lastname": "King", "age": "36"})

        assert view.path == f"/contacts/{contact['_id']}"
        assert view.scope["contact"] == {**contact, "lastname": "King", "age": 36}

    @pytest.mark.asyncio
    async def test_delete_returns_to_list(self, browser, store):
        """Deleting from the show page returns to an empty list."""
        contact = await _create_via_form(browser)
        await browser.navigate(f"/contacts/{contact['_id']}")

        view = await browser.submit({})

        assert view.path == "/contacts"
        assert view.scope == {"contacts": []}
        assert await store.find_by_id("contacts", contact["_id"]) is None


class TestFailures:

    @pytest.mark.asyncio
    async def test_failed_list_is_not_an_empty_list(self, browser, store):
        """A failed list request renders an error, never the empty-list text."""
        with patch.object(store, "find_all", AsyncMock(side_effect=DatabaseError())):
            view = await browser.navigate("/contacts")

        assert "contacts" not in view.scope
        assert view.scope["error"]
        assert 'class="error"' in view.html
        assert "No contacts yet." not in view.html
