"""
ContactBook Backend: Pydantic Request/Response Schemas
=======================================================

What:  API contract for the contacts resource plus the shared error and
       health payloads.
How:   FastAPI validates request bodies against ContactCreate/ContactUpdate
       and serializes responses through Contact (by alias, so the identity
       goes out as `_id`, the store's own field name).

Wire example:
    {"_id": "65a1f0c2b3e4d5f6a7b8c9d0", "firstname": "Ada", "lastname": "Lovelace", "age": 28}
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ContactCreate(BaseModel):
    """Body of POST /api/contacts. Unknown fields, `_id` included, are dropped."""

    model_config = ConfigDict(extra="ignore")

    firstname: str = Field(min_length=1, max_length=100, description="Given name")
    lastname: str = Field(min_length=1, max_length=100, description="Family name")
    age: int = Field(ge=0, le=150, description="Age in years")


class ContactUpdate(BaseModel):
    """
    Body of PUT /api/contacts/{id}.

    Every field is optional: only the fields present in the body are merged
    into the stored document.
    """

    model_config = ConfigDict(extra="ignore")

    firstname: Optional[str] = Field(default=None, min_length=1, max_length=100)
    lastname: Optional[str] = Field(default=None, min_length=1, max_length=100)
    age: Optional[int] = Field(default=None, ge=0, le=150)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class Contact(BaseModel):
    """
    A stored contact as it goes over the wire.

    Fields are optional on the way out: documents are schema-flexible and a
    record written by another tool may lack one of them.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id", description="Store-assigned identity")
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    age: Optional[int] = None
