"""Inclusion of related resources: ``include=comments.author,tags``."""

from __future__ import annotations

from typing import Any

from jsonapi_codec.core.context import IncludeTree, RequestContext
from jsonapi_codec.core.errors import InvalidRelationshipError, ValidationError
from jsonapi_codec.query.base import QueryParser
from jsonapi_codec.utils.query_params import split_csv


class IncludeParser(QueryParser):
    """Build an include tree, checking each path segment against the schema reached so far."""

    parameter = "include"

    def parse(self, context: RequestContext, value: Any) -> IncludeTree:
        if value is None:
            return context.include
        if context.view is None:
            raise ValidationError(
                "Cannot include relationships without a resource schema",
                parameter=self.parameter,
                value=value,
            )
        tree: IncludeTree = {}
        for path in split_csv(str(value)):
            schema = context.view
            node = tree
            for segment in path.split("."):
                relationship = self.relationship(schema, segment)
                if relationship is None:
                    raise InvalidRelationshipError(segment, schema.type, path=path)
                node = node.setdefault(relationship.name, {})
                schema = self.registry.target(relationship)
        return tree
