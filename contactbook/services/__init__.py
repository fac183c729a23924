# Services package init
"""
ContactBook Backend: Services Layer
====================================

What:  Everything between the route handlers and the database.

Service Inventory:
    - DocumentStore:   collections of JSON documents over async SQLAlchemy
    - ResourceMapper:  store record ⇄ wire model translation
    - ContactService:  contact rules (not-found, empty updates) over the store
"""
