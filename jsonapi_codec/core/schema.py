"""Declarative resource schemas.

A :class:`ResourceSchema` describes the wire shape of one resource type::

    post = ResourceSchema(
        type="post",
        attributes=["title", "body", Attribute(name="excerpt", serialize=excerpt)],
        relationships={
            "author": {"target": "user"},
            "comments": {"target": "comment", "many": True},
        },
    )

Relationships refer to their target by type name. Schemas that point at each
other are resolved through a :class:`SchemaRegistry`, so cycles never turn
into cyclic ownership.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

#: ``(resource, context) -> value``
FieldFunction = Callable[[Any, Any], Any]


class Attribute(BaseModel):
    """An attribute and its (de)serialization options."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1)
    serialize: Union[bool, FieldFunction] = True
    deserialize: Union[bool, FieldFunction] = True


class Relationship(BaseModel):
    """A relationship to resources of the ``target`` type.

    ``name`` is the field read from the resource. ``wire_name``, when given,
    is rendered verbatim instead of the transformed ``name``.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    target: str = Field(min_length=1)
    many: bool = False
    wire_name: Optional[str] = None


class ResourceSchema(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: str = Field(min_length=1)
    id_attribute: str = "id"
    attributes: Tuple[Attribute, ...] = ()
    relationships: Tuple[Relationship, ...] = ()
    path: Optional[str] = None
    links: Optional[FieldFunction] = None
    meta: Optional[FieldFunction] = None

    @field_validator("attributes", mode="before")
    @classmethod
    def _coerce_attributes(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return tuple(
                Attribute(name=name, **(options or {})) for name, options in value.items()
            )
        return tuple(
            Attribute(name=item) if isinstance(item, str) else item for item in value
        )

    @field_validator("relationships", mode="before")
    @classmethod
    def _coerce_relationships(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return tuple(
                options
                if isinstance(options, Relationship)
                else Relationship(name=name, **options)
                for name, options in value.items()
            )
        return tuple(value)

    @property
    def url_path(self) -> str:
        return self.path or self.type

    def attribute(self, name: str) -> Optional[Attribute]:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def relationship(self, name: str) -> Optional[Relationship]:
        for relationship in self.relationships:
            if relationship.name == name:
                return relationship
        return None

    @property
    def attribute_names(self) -> Tuple[str, ...]:
        return tuple(attribute.name for attribute in self.attributes)

    @property
    def relationship_names(self) -> Tuple[str, ...]:
        return tuple(relationship.name for relationship in self.relationships)

    def has_field(self, name: str) -> bool:
        return name in self.attribute_names or name in self.relationship_names


class SchemaRegistry:
    """Registry of schemas keyed by type name.

    Populated once at startup and only read afterwards, so a single registry
    can be shared by any number of concurrent requests.
    """

    def __init__(self, schemas: Iterable[ResourceSchema] = ()) -> None:
        self._schemas: Dict[str, ResourceSchema] = {}
        for schema in schemas:
            self.register(schema)

    def register(self, schema: ResourceSchema) -> ResourceSchema:
        existing = self._schemas.get(schema.type)
        if existing is not None and existing != schema:
            raise ValueError(f"A different schema is already registered for type '{schema.type}'")
        self._schemas[schema.type] = schema
        return schema

    def get(self, type_: str) -> ResourceSchema:
        try:
            return self._schemas[type_]
        except KeyError:
            raise KeyError(f"No schema registered for type '{type_}'") from None

    def resolve(self, handle: Union[str, ResourceSchema]) -> ResourceSchema:
        if isinstance(handle, ResourceSchema):
            return self._schemas.get(handle.type, handle)
        return self.get(handle)

    def target(self, relationship: Relationship) -> ResourceSchema:
        return self.get(relationship.target)

    def for_related_type(self, schema: ResourceSchema, type_: str) -> Optional[ResourceSchema]:
        """Return the schema of the first relationship of ``schema`` targeting ``type_``."""
        for relationship in schema.relationships:
            if relationship.target == type_:
                return self.get(type_)
        return None

    def validate(self) -> None:
        """Check that every relationship points at a registered schema."""
        for schema in self._schemas.values():
            for relationship in schema.relationships:
                if relationship.target not in self._schemas:
                    raise ValueError(
                        f"Relationship '{schema.type}.{relationship.name}' targets "
                        f"unregistered type '{relationship.target}'"
                    )

    def __contains__(self, type_: object) -> bool:
        return type_ in self._schemas

    def __iter__(self) -> Iterator[ResourceSchema]:
        return iter(self._schemas.values())

    def __len__(self) -> int:
        return len(self._schemas)
