"""Serialize application records into JSON:API documents."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Iterable, Mapping, Union

from jsonapi_codec.config import JSONAPIConfig
from jsonapi_codec.core.context import IncludeTree, RequestContext
from jsonapi_codec.core.document import ErrorLike, JSONAPIDocumentBuilder
from jsonapi_codec.core.resource import (
    Loaded,
    LoadedMany,
    NotLoaded,
    RelationshipValue,
    ResourceAccessor,
)
from jsonapi_codec.core.schema import Relationship, ResourceSchema, SchemaRegistry
from jsonapi_codec.core.transform import FieldTransform
from jsonapi_codec.schemas.resource import (
    JSONAPIDocument,
    JSONAPIRelationship,
    JSONAPIResource,
    JSONAPIResourceIdentifier,
)

logger = logging.getLogger(__name__)

IncludedSet = dict[tuple[str, str], JSONAPIResource]


class JSONAPISerializer:
    """Serialize records described by registered schemas into JSON:API documents.

    A serializer holds no per-request state and can be shared between
    requests. The included set is created per :meth:`serialize` call.
    """

    document_builder_class: type = JSONAPIDocumentBuilder

    def __init__(
        self,
        registry: SchemaRegistry,
        *,
        config: JSONAPIConfig | None = None,
        accessor: ResourceAccessor | None = None,
    ) -> None:
        self.registry = registry
        self.config = config or JSONAPIConfig()
        self.accessor = accessor or ResourceAccessor()
        self.transform = FieldTransform(self.config.field_transformation)

    def get_document_builder(self) -> JSONAPIDocumentBuilder:
        return self.document_builder_class()

    def serialize(
        self,
        schema: Union[str, ResourceSchema],
        data: Any,
        context: RequestContext | None = None,
        *,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> JSONAPIDocument:
        """Serialize ``data`` (a record, a list of records or ``None``)."""
        schema = self.registry.resolve(schema)
        if context is None:
            context = RequestContext(view=schema)
        builder = self.get_document_builder()

        if data is None:
            return builder.build_single(None, links=links, meta=meta)

        many = isinstance(data, (list, tuple))
        records = list(data) if many else [data]
        primary = [self.to_resource(schema, record, context) for record in records]

        included: IncludedSet = {}
        primary_keys = {resource.key for resource in primary}
        for record in records:
            self._collect_included(schema, record, context, context.include, included, primary_keys)

        document_links: dict[str, Any] = {
            "self": self._url(schema) if many else primary[0].links["self"]
        }
        document_links.update(links or {})
        if many:
            return builder.build_collection(
                primary, included=included.values(), links=document_links, meta=meta
            )
        return builder.build_single(
            primary[0], included=included.values(), links=document_links, meta=meta
        )

    def serialize_errors(
        self, status: int | HTTPStatus, errors: Iterable[ErrorLike]
    ) -> JSONAPIDocument:
        """Return an error document; no data is rendered alongside errors."""
        return self.get_document_builder().build_error(status, errors)

    def to_resource(
        self, schema: ResourceSchema, record: Any, context: RequestContext
    ) -> JSONAPIResource:
        """Serialize a record into a resource object (no included resources)."""
        resource_id = self.accessor.id(record, schema)
        attributes = self.get_attributes(schema, record, context)
        relationships = self.get_relationships(schema, record, resource_id, context)
        links = {"self": self._url(schema, resource_id)}
        if schema.links is not None:
            links.update(schema.links(record, context) or {})
        meta = schema.meta(record, context) if schema.meta is not None else None
        return JSONAPIResource(
            type=schema.type,
            id=resource_id,
            attributes=attributes or None,
            relationships=relationships or None,
            links=links,
            meta=self.transform.to_wire(meta) if meta else None,
        )

    def get_attributes(
        self, schema: ResourceSchema, record: Any, context: RequestContext
    ) -> dict[str, Any]:
        """Return wire attributes, honouring sparse fieldsets and attribute options."""
        allowed_fields = context.fields_for(schema.type)
        attributes: dict[str, Any] = {}
        for attribute in schema.attributes:
            if attribute.name == schema.id_attribute:
                continue
            if allowed_fields is not None and attribute.name not in allowed_fields:
                continue
            if attribute.serialize is False:
                continue
            if callable(attribute.serialize):
                value = attribute.serialize(record, context)
            else:
                value = self.accessor.attribute_value(record, attribute.name)
            attributes[self.transform.to_wire(attribute.name)] = value
        return attributes

    def get_relationships(
        self,
        schema: ResourceSchema,
        record: Any,
        resource_id: str,
        context: RequestContext,
    ) -> dict[str, JSONAPIRelationship]:
        """Return relationship objects holding resource identifiers only."""
        relationships: dict[str, JSONAPIRelationship] = {}
        for relationship in self._visible_relationships(schema, context):
            value = self.accessor.relationship_value(record, relationship)
            relationships[self.relationship_name(relationship)] = self._relationship_object(
                schema, resource_id, relationship, value
            )
        return relationships

    def relationship_object(
        self,
        schema: Union[str, ResourceSchema],
        record: Any,
        relationship_name: str,
    ) -> JSONAPIRelationship | None:
        """Build the relationship object for a single relationship, if declared."""
        schema = self.registry.resolve(schema)
        relationship = schema.relationship(relationship_name)
        if relationship is None:
            return None
        resource_id = self.accessor.id(record, schema)
        value = self.accessor.relationship_value(record, relationship)
        return self._relationship_object(schema, resource_id, relationship, value)

    def relationship_name(self, relationship: Relationship) -> str:
        return relationship.wire_name or self.transform.to_wire(relationship.name)

    def _visible_relationships(
        self, schema: ResourceSchema, context: RequestContext
    ) -> list[Relationship]:
        allowed_fields = context.fields_for(schema.type)
        return [
            relationship
            for relationship in schema.relationships
            if allowed_fields is None or relationship.name in allowed_fields
        ]

    def _relationship_object(
        self,
        schema: ResourceSchema,
        resource_id: str,
        relationship: Relationship,
        value: RelationshipValue,
    ) -> JSONAPIRelationship:
        links = self._relationship_links(schema, resource_id, self.relationship_name(relationship))
        target = self.registry.target(relationship)
        if isinstance(value, Loaded):
            return JSONAPIRelationship(data=self._identifier(target, value.resource), links=links)
        if isinstance(value, LoadedMany):
            return JSONAPIRelationship(
                data=[self._identifier(target, related) for related in value.resources],
                links=links,
            )
        if isinstance(value, NotLoaded):
            identifier = value.identifier()
            if identifier is None:
                return JSONAPIRelationship(links=links)
            return JSONAPIRelationship(data=identifier, links=links)
        return JSONAPIRelationship(data=None, links=links)

    def _collect_included(
        self,
        schema: ResourceSchema,
        record: Any,
        context: RequestContext,
        include: IncludeTree,
        included: IncludedSet,
        primary_keys: set[tuple[str, str]],
    ) -> None:
        if not include:
            return
        for relationship in self._visible_relationships(schema, context):
            if relationship.name not in include:
                continue
            value = self.accessor.relationship_value(record, relationship)
            if isinstance(value, NotLoaded):
                logger.debug(
                    "Not including %s.%s: relationship is not loaded",
                    schema.type,
                    relationship.name,
                )
                continue
            if isinstance(value, Loaded):
                related_records: tuple[Any, ...] = (value.resource,)
            elif isinstance(value, LoadedMany):
                related_records = value.resources
            else:
                continue
            target = self.registry.target(relationship)
            subtree = include[relationship.name]
            for related in related_records:
                key = (target.type, self.accessor.id(related, target))
                if key in included or key in primary_keys:
                    logger.debug("Skipping already serialized resource %s:%s", *key)
                else:
                    included[key] = self.to_resource(target, related, context)
                self._collect_included(target, related, context, subtree, included, primary_keys)

    def _identifier(self, schema: ResourceSchema, record: Any) -> JSONAPIResourceIdentifier:
        return JSONAPIResourceIdentifier(type=schema.type, id=self.accessor.id(record, schema))

    def _url(self, schema: ResourceSchema, resource_id: str | None = None) -> str:
        return self.config.url_for([schema.url_path, resource_id or ""])

    def _relationship_links(
        self, schema: ResourceSchema, resource_id: str, relationship: str
    ) -> dict[str, str]:
        resource_path = self._url(schema, resource_id)
        return {
            "self": f"{resource_path}/relationships/{relationship}",
            "related": f"{resource_path}/{relationship}",
        }
