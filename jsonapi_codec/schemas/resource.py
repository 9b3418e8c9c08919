"""Pydantic models for JSON:API v1.1 documents.

Member names held by these models are already in wire form; the serializer
and deserializer apply the field name transform on the way in and out.
"""

from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, model_validator


class JSONAPIResourceIdentifier(BaseModel):
    """Resource identifier object: type + id."""

    model_config = ConfigDict(frozen=True)

    type: str
    id: str
    meta: Optional[Dict[str, Any]] = None

    @property
    def key(self) -> Tuple[str, str]:
        return self.type, self.id

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class JSONAPIRelationship(BaseModel):
    """Relationship object. ``data`` holds identifiers only.

    An explicit ``data: null`` is kept on the wire; a relationship built
    without ``data`` renders links and meta only.
    """

    data: Union[JSONAPIResourceIdentifier, List[JSONAPIResourceIdentifier], None] = None
    links: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None

    def identifiers(self) -> List[JSONAPIResourceIdentifier]:
        if self.data is None:
            return []
        if isinstance(self.data, list):
            return list(self.data)
        return [self.data]

    def to_wire(self) -> Dict[str, Any]:
        wire = self.model_dump(exclude_none=True)
        if "data" in self.model_fields_set and self.data is None:
            wire["data"] = None
        return wire


class JSONAPIResource(BaseModel):
    """Resource object with attributes and relationships."""

    type: str
    id: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None
    relationships: Optional[Dict[str, JSONAPIRelationship]] = None
    links: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None

    @property
    def key(self) -> Tuple[str, Optional[str]]:
        return self.type, self.id

    def identifier(self) -> JSONAPIResourceIdentifier:
        return JSONAPIResourceIdentifier(type=self.type, id=self.id)

    def to_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {"type": self.type}
        if self.id is not None:
            wire["id"] = self.id
        if self.attributes is not None:
            wire["attributes"] = dict(self.attributes)
        if self.relationships is not None:
            wire["relationships"] = {
                name: relationship.to_wire()
                for name, relationship in self.relationships.items()
            }
        if self.links:
            wire["links"] = dict(self.links)
        if self.meta:
            wire["meta"] = dict(self.meta)
        return wire


class JSONAPIErrorObject(BaseModel):
    """Error object."""

    id: Optional[str] = None
    status: Optional[str] = None
    code: Optional[str] = None
    title: Optional[str] = None
    detail: Optional[str] = None
    source: Optional[Dict[str, Any]] = None
    links: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class JSONAPIDocument(BaseModel):
    """Top-level JSON:API document."""

    data: Union[JSONAPIResource, List[JSONAPIResource], None] = None
    included: Optional[List[JSONAPIResource]] = None
    meta: Optional[Dict[str, Any]] = None
    links: Optional[Dict[str, Any]] = None
    errors: Optional[List[JSONAPIErrorObject]] = None
    jsonapi: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def _data_or_errors(self) -> "JSONAPIDocument":
        if self.errors is not None and "data" in self.model_fields_set:
            raise ValueError("A document MUST NOT contain both data and errors")
        return self

    def resources(self) -> List[JSONAPIResource]:
        """Return primary data as a list."""
        if self.data is None:
            return []
        if isinstance(self.data, list):
            return list(self.data)
        return [self.data]

    def to_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {}
        if self.errors is not None:
            wire["errors"] = [error.to_wire() for error in self.errors]
        elif isinstance(self.data, list):
            wire["data"] = [resource.to_wire() for resource in self.data]
        else:
            wire["data"] = None if self.data is None else self.data.to_wire()
        if self.included:
            wire["included"] = [resource.to_wire() for resource in self.included]
        if self.links:
            wire["links"] = dict(self.links)
        if self.meta:
            wire["meta"] = dict(self.meta)
        if self.jsonapi:
            wire["jsonapi"] = dict(self.jsonapi)
        return wire
