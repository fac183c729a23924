"""
ContactBook Backend: Resource Mapper
=====================================

What:  Translates store records to wire models and request models to store
       fields. Pass-through: no renaming, no computed fields.
Who:   Used by ContactService on every read and write.
"""

from typing import Any, Dict, Generic, Iterable, List, Type, TypeVar

from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


class ResourceMapper(Generic[ModelT]):
    """
    Maps between documents of one collection and their wire representation.

    Args:
        resource: Singular resource name used in error messages ("contact")
        wire_model: Pydantic model the records are serialized through
    """

    def __init__(self, resource: str, wire_model: Type[ModelT]):
        self.resource = resource
        self.wire_model = wire_model

    def to_wire(self, record: Dict[str, Any]) -> ModelT:
        return self.wire_model.model_validate(record)

    def to_wire_many(self, records: Iterable[Dict[str, Any]]) -> List[ModelT]:
        return [self.to_wire(record) for record in records]

    def from_wire(self, payload: BaseModel, partial: bool = False) -> Dict[str, Any]:
        """
        Store fields from a validated request model.

        With partial=True only the non-null fields the client actually sent
        are kept, which is what a merge update needs.
        """
        if partial:
            return payload.model_dump(exclude_unset=True, exclude_none=True)
        return payload.model_dump()
