"""Base class for query parameter normalization strategies."""

from __future__ import annotations

from typing import Any, Callable, Optional, Union

from jsonapi_codec.config import JSONAPIConfig
from jsonapi_codec.core.context import RequestContext
from jsonapi_codec.core.schema import Relationship, ResourceSchema, SchemaRegistry
from jsonapi_codec.core.transform import FieldTransform

#: ``(context, raw_value) -> normalized_value``
ParseFunction = Callable[[RequestContext, Any], Any]


class QueryParser:
    """Normalize one query parameter family.

    ``parse`` receives the context built so far and the raw value (``None``
    when the parameter is absent) and returns the normalized value, or
    raises :class:`~jsonapi_codec.core.errors.ValidationError`.
    """

    parameter: str = ""

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        config: JSONAPIConfig | None = None,
    ) -> None:
        self.registry = registry or SchemaRegistry()
        self.config = config or JSONAPIConfig()
        self.transform = FieldTransform(self.config.field_transformation)

    def parse(self, context: RequestContext, value: Any) -> Any:
        raise NotImplementedError

    def __call__(self, context: RequestContext, value: Any) -> Any:
        return self.parse(context, value)

    def field_name(self, schema: ResourceSchema, wire_name: str) -> str:
        """Return the internal name of a field given by its wire name."""
        relationship = self.relationship(schema, wire_name)
        if relationship is not None:
            return relationship.name
        return self.transform.to_internal(wire_name)

    def relationship(self, schema: ResourceSchema, wire_name: str) -> Optional[Relationship]:
        internal = self.transform.to_internal(wire_name)
        for relationship in schema.relationships:
            if relationship.wire_name is not None:
                if relationship.wire_name == wire_name:
                    return relationship
            elif relationship.name == internal:
                return relationship
        return None


ParserSpec = Union[type, ParseFunction, None]
