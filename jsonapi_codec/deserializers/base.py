"""Deserialize JSON:API request payloads.

:meth:`JSONAPIDeserializer.deserialize` flattens a payload into parameters
that are easy to cast into application models. For example::

    {
        "data": {
            "id": "1",
            "type": "user",
            "attributes": {"foo-bar": True},
            "relationships": {"baz": {"data": {"id": "2", "type": "baz"}}},
        }
    }

becomes::

    {"id": "1", "type": "user", "foo_bar": True, "baz_id": "2"}

To-many linkage is collected under ``<type>_id`` of each identifier, so two
relationships that target the same type share one key. The first id is
stored as a plain value; the second turns it into ``[first, second]``; every
further id is prepended. A stored id that is not a string is replaced
rather than collected.

:meth:`JSONAPIDeserializer.deserialize_document` parses a payload into the
document model and :meth:`JSONAPIDeserializer.resolve` turns one into
records whose relationships point at the matching included records, or at
:class:`~jsonapi_codec.core.resource.NotLoaded` when nothing matches.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Union

import pydantic

from jsonapi_codec.config import JSONAPIConfig
from jsonapi_codec.core.context import RequestContext
from jsonapi_codec.core.errors import MalformedDocumentError, RequiredFieldError
from jsonapi_codec.core.resource import NotLoaded, ResourceAccessor
from jsonapi_codec.core.schema import ResourceSchema, SchemaRegistry
from jsonapi_codec.core.transform import FieldTransform
from jsonapi_codec.schemas.resource import (
    JSONAPIDocument,
    JSONAPIResource,
    JSONAPIResourceIdentifier,
)

logger = logging.getLogger(__name__)


class JSONAPIDeserializer:
    """Turn inbound JSON:API payloads into flat params, documents and records."""

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        *,
        config: JSONAPIConfig | None = None,
        accessor: ResourceAccessor | None = None,
    ) -> None:
        self.registry = registry or SchemaRegistry()
        self.config = config or JSONAPIConfig()
        self.accessor = accessor or ResourceAccessor()
        self.transform = FieldTransform(self.config.field_transformation)

    # flat params

    def deserialize(
        self,
        payload: Any,
        schema: Union[str, ResourceSchema, None] = None,
        context: RequestContext | None = None,
    ) -> Any:
        """Flatten a payload. Anything without a top-level ``data`` is returned unchanged."""
        if not isinstance(payload, Mapping) or "data" not in payload:
            return payload
        if schema is not None:
            schema = self.registry.resolve(schema)
        data = payload["data"]
        if data is None:
            return None
        if isinstance(data, list):
            return [
                self._flatten(item, schema, context, f"/data/{index}")
                for index, item in enumerate(data)
            ]
        if isinstance(data, Mapping):
            incoming = {
                key: value for key, value in payload.items() if key not in ("data", "included")
            }
            incoming.update(data)
            return self._flatten(incoming, schema, context, "/data")
        return payload

    def process_included(self, payload: Any) -> dict[str, list[dict[str, Any]]]:
        """Flatten ``included`` resources and group them by type.

        Each record is put in front of the ones already collected for its
        type, so a group lists its records in reverse input order.
        """
        grouped: dict[str, list[dict[str, Any]]] = {}
        if not isinstance(payload, Mapping):
            return grouped
        for index, item in enumerate(payload.get("included") or []):
            type_ = item.get("type") if isinstance(item, Mapping) else None
            if type_ is None:
                raise RequiredFieldError("type", pointer=f"/included/{index}/type")
            schema = self.registry.resolve(type_) if type_ in self.registry else None
            flattened = self._flatten(item, schema, None, f"/included/{index}")
            grouped.setdefault(type_, []).insert(0, flattened)
        return grouped

    def _flatten(
        self,
        data: Mapping[str, Any],
        schema: ResourceSchema | None,
        context: RequestContext | None,
        pointer: str = "/data",
    ) -> dict[str, Any]:
        data = dict(data)
        relationships = data.pop("relationships", None)
        attributes = data.pop("attributes", None)

        flat: dict[str, Any] = {}
        for name, relationship in (relationships or {}).items():
            self._flatten_relationship(
                flat, name, relationship, f"{pointer}/relationships/{name}/data"
            )
        flat.update(self.transform.keys_to_internal(data))
        flat.update(self.transform.keys_to_internal(attributes or {}))

        if schema is not None:
            self._apply_deserialize_options(schema, flat, context)
        return flat

    def _flatten_relationship(
        self, flat: dict[str, Any], name: str, relationship: Any, pointer: str
    ) -> None:
        if not isinstance(relationship, Mapping) or "data" not in relationship:
            return
        data = relationship["data"]
        if data is None:
            flat[self._id_key(name)] = None
        elif isinstance(data, Mapping):
            flat[self._id_key(name)] = data.get("id")
        elif isinstance(data, list):
            for index, identifier in enumerate(data):
                _check_identifier(identifier, f"{pointer}/{index}")
                key = self._id_key(identifier["type"])
                flat[key] = _accumulate_id(flat.get(key), identifier["id"])

    def _id_key(self, name: str) -> str:
        return f"{self.transform.to_internal(name)}_id"

    def _apply_deserialize_options(
        self, schema: ResourceSchema, flat: dict[str, Any], context: RequestContext | None
    ) -> None:
        for attribute in schema.attributes:
            if attribute.deserialize is False:
                flat.pop(attribute.name, None)
            elif callable(attribute.deserialize) and attribute.name in flat:
                flat[attribute.name] = attribute.deserialize(flat, context)

    # document model

    def deserialize_document(
        self, payload: Any, *, require_id: bool = True
    ) -> JSONAPIDocument | None:
        """Parse a payload into a document; ``None`` when it has no ``data`` member.

        Resource objects must carry ``type``, and ``id`` unless
        ``require_id`` is false (resource creation). Included resources and
        relationship linkage always need both.
        """
        if not isinstance(payload, Mapping) or "data" not in payload:
            return None
        data = payload["data"]
        if isinstance(data, list):
            for index, resource in enumerate(data):
                _check_resource(resource, f"/data/{index}", require_id=require_id)
        elif data is not None:
            _check_resource(data, "/data", require_id=require_id)
        for index, resource in enumerate(payload.get("included") or []):
            _check_resource(resource, f"/included/{index}", require_id=True)
        try:
            return JSONAPIDocument.model_validate(dict(payload))
        except pydantic.ValidationError as exc:
            raise MalformedDocumentError(str(exc)) from exc

    # records

    def resolve(
        self, document: JSONAPIDocument, schema: Union[str, ResourceSchema, None] = None
    ) -> Any:
        """Return primary data as records with relationships resolved against ``included``."""
        if document.data is None:
            return None
        if schema is not None:
            schema = self.registry.resolve(schema)
        pool = self._included_records(document.included or [])
        records = [
            self.deserialize_resource(schema or self._schema_for(resource.type), resource, pool)
            for resource in document.resources()
        ]
        return records if isinstance(document.data, list) else records[0]

    def deserialize_resource(
        self,
        schema: ResourceSchema | None,
        resource: JSONAPIResource,
        included: Iterable[Any] = (),
    ) -> dict[str, Any]:
        """Build a record for ``resource``; ``included`` holds already built records."""
        record = self._base_record(schema, resource)
        self._resolve_relationships(schema, resource, record, list(included))
        return record

    def _included_records(self, included: list[JSONAPIResource]) -> list[dict[str, Any]]:
        schemas = [self._schema_for(resource.type) for resource in included]
        pool = [
            self._base_record(schema, resource) for schema, resource in zip(schemas, included)
        ]
        for schema, resource, record in zip(schemas, included, pool):
            self._resolve_relationships(schema, resource, record, pool)
        return pool

    def _schema_for(self, type_: str) -> ResourceSchema | None:
        return self.registry.get(type_) if type_ in self.registry else None

    def _base_record(
        self, schema: ResourceSchema | None, resource: JSONAPIResource
    ) -> dict[str, Any]:
        id_attribute = schema.id_attribute if schema is not None else "id"
        record: dict[str, Any] = {id_attribute: resource.id, "type": resource.type}
        record.update(self.transform.keys_to_internal(resource.attributes or {}))
        if schema is not None:
            self._apply_deserialize_options(schema, record, None)
        return record

    def _resolve_relationships(
        self,
        schema: ResourceSchema | None,
        resource: JSONAPIResource,
        record: dict[str, Any],
        pool: list[Any],
    ) -> None:
        for wire_name, relationship in (resource.relationships or {}).items():
            if "data" not in relationship.model_fields_set:
                continue
            name = self._relationship_field(schema, wire_name)
            if relationship.data is None:
                record[name] = None
            elif isinstance(relationship.data, list):
                record[name] = [self._lookup(identifier, pool) for identifier in relationship.data]
            else:
                record[name] = self._lookup(relationship.data, pool)

    def _relationship_field(self, schema: ResourceSchema | None, wire_name: str) -> str:
        if schema is not None:
            for relationship in schema.relationships:
                if wire_name == relationship.wire_name:
                    return relationship.name
        return self.transform.to_internal(wire_name)

    def _lookup(self, identifier: JSONAPIResourceIdentifier, pool: list[Any]) -> Any:
        for candidate in pool:
            if self._matches(candidate, identifier):
                return candidate
        logger.debug("No included resource for %s:%s", identifier.type, identifier.id)
        return NotLoaded(id=identifier.id, type=identifier.type)

    def _matches(self, candidate: Any, identifier: JSONAPIResourceIdentifier) -> bool:
        schema = self._schema_for(identifier.type)
        if schema is not None and isinstance(candidate, Mapping):
            if candidate.get("type") != identifier.type:
                return False
            return str(candidate.get(schema.id_attribute)) == identifier.id
        return self.accessor.matches(candidate, identifier.id, identifier.type)


def _accumulate_id(current: Any, id_: Any) -> Any:
    if isinstance(current, list):
        return [id_, *current]
    if isinstance(current, str):
        return [current, id_]
    return id_


def _check_identifier(identifier: Any, pointer: str) -> None:
    if not isinstance(identifier, Mapping):
        raise MalformedDocumentError(f"Expected a resource identifier at '{pointer}'")
    for member in ("type", "id"):
        if identifier.get(member) is None:
            raise RequiredFieldError(member, pointer=f"{pointer}/{member}")


def _check_resource(resource: Any, pointer: str, *, require_id: bool) -> None:
    if not isinstance(resource, Mapping):
        raise MalformedDocumentError(f"Expected a resource object at '{pointer}'")
    if not resource.get("type"):
        raise RequiredFieldError("type", pointer=f"{pointer}/type")
    if require_id and resource.get("id") is None:
        raise RequiredFieldError("id", pointer=f"{pointer}/id")
    for name, relationship in (resource.get("relationships") or {}).items():
        data = relationship.get("data") if isinstance(relationship, Mapping) else None
        base = f"{pointer}/relationships/{name}/data"
        if isinstance(data, list):
            for index, identifier in enumerate(data):
                _check_identifier(identifier, f"{base}/{index}")
        elif data is not None:
            _check_identifier(data, base)
