"""Access to application records.

The codec never reaches into records directly. It goes through a
:class:`ResourceAccessor`, which reads ids, attribute values and relationship
values. Relationship values come back as one of :data:`RelationshipValue`:

* :class:`Loaded` - a single related record
* :class:`LoadedMany` - a (possibly empty) collection of related records
* :class:`NotLoaded` - a known reference whose record was not fetched
* :class:`Null` - no related record
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from jsonapi_codec.core.errors import RequiredFieldError
from jsonapi_codec.core.schema import Relationship, ResourceSchema
from jsonapi_codec.schemas.resource import JSONAPIResourceIdentifier

_MISSING = object()


class NotLoaded(BaseModel):
    """Reference to a record that was not fetched.

    ``id`` is ``None`` when not even the identifier is known (for example an
    unloaded to-many collection).
    """

    model_config = ConfigDict(frozen=True)

    type: str
    id: Optional[str] = None

    def identifier(self) -> Optional[JSONAPIResourceIdentifier]:
        if self.id is None:
            return None
        return JSONAPIResourceIdentifier(type=self.type, id=self.id)


class Loaded(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    resource: Any


class LoadedMany(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    resources: Tuple[Any, ...] = ()


class Null(BaseModel):
    model_config = ConfigDict(frozen=True)


RelationshipValue = Union[Loaded, LoadedMany, NotLoaded, Null]


def relationship_value(raw: Any, *, many: bool) -> RelationshipValue:
    """Wrap a raw relationship value read from a record."""
    if isinstance(raw, (Loaded, LoadedMany, NotLoaded, Null)):
        return raw
    if raw is None:
        return LoadedMany() if many else Null()
    if isinstance(raw, (list, tuple, set, frozenset)):
        return LoadedMany(resources=tuple(raw))
    if many:
        return LoadedMany(resources=(raw,))
    return Loaded(resource=raw)


def is_loaded(value: Any) -> bool:
    """Return ``False`` for references whose records were not fetched."""
    return not isinstance(value, NotLoaded)


class ResourceAccessor:
    """Read ids, types, attributes and relationships from records.

    The default implementation reads mapping keys or object attributes.
    """

    def get(self, resource: Any, field: str, default: Any = _MISSING) -> Any:
        if isinstance(resource, Mapping):
            value = resource.get(field, default)
        else:
            value = getattr(resource, field, default)
        if value is _MISSING:
            raise KeyError(field)
        return value

    def id(self, resource: Any, schema: Optional[ResourceSchema] = None) -> str:
        field = schema.id_attribute if schema is not None else "id"
        value = self.get(resource, field, None)
        if value is None:
            type_ = schema.type if schema is not None else type(resource).__name__
            raise RequiredFieldError(
                field, detail=f"Resources of type '{type_}' must have an '{field}' defined"
            )
        return str(value)

    def type(self, resource: Any, schema: Optional[ResourceSchema] = None) -> str:
        if schema is not None:
            return schema.type
        value = self.get(resource, "type", None)
        if value is None:
            raise RequiredFieldError("type")
        return str(value)

    def attribute_value(self, resource: Any, field: str) -> Any:
        return self.get(resource, field, None)

    def relationship_value(self, resource: Any, relationship: Relationship) -> RelationshipValue:
        return relationship_value(
            self.get(resource, relationship.name, None), many=relationship.many
        )

    def matches(self, resource: Any, id_: str, type_: str) -> bool:
        """Return whether ``resource`` is identified by ``(id_, type_)``."""
        try:
            return self.id(resource) == id_ and self.type(resource) == type_
        except RequiredFieldError:
            return False
