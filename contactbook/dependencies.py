"""
ContactBook Backend: Request Dependencies
==========================================

What:  FastAPI dependencies handing the per-application objects to handlers.
How:   create_app() stores the Settings and the DocumentStore on app.state;
       these functions read them back from the current request.
"""

from fastapi import Request

from contactbook.config import Settings
from contactbook.services.document_store import DocumentStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_contacts_collection(request: Request) -> str:
    return request.app.state.settings.contacts_collection
