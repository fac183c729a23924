"""
ContactBook: Application Package Initializer
=============================================

What: Server and client halves of the ContactBook single-page application.
Who:  Imported by uvicorn (`contactbook.main:app`), Alembic, pytest and the
      Python client (`contactbook.client`).

Architecture Note:

    ┌─────────────────────────────────────┐
    │   Client (route table, resources)   │  ← navigation + REST binding
    ├─────────────────────────────────────┤
    │   Routes (API, partials, shell)     │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (contacts, mapper)       │  ← orchestration, not-found rules
    ├─────────────────────────────────────┤
    │   Document store (SQLAlchemy)       │  ← collections of JSON documents
    └─────────────────────────────────────┘

    URL space is split three ways on the server: `/api/...` answers JSON,
    `/partials/<name>` answers template fragments, and every other GET path
    answers the application shell so the client router can take over.
"""

__version__ = "1.0.0"
