"""Compose the query parameter strategies into a request context."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Union

from jsonapi_codec.config import JSONAPIConfig
from jsonapi_codec.core.context import RequestContext
from jsonapi_codec.core.errors import MissingFilterStrategyError, ValidationError
from jsonapi_codec.core.schema import ResourceSchema, SchemaRegistry
from jsonapi_codec.query.base import ParserSpec, QueryParser
from jsonapi_codec.query.fields import FieldsParser
from jsonapi_codec.query.filter import FilterParser
from jsonapi_codec.query.include import IncludeParser
from jsonapi_codec.query.page import PageParser
from jsonapi_codec.query.sort import SortParser
from jsonapi_codec.utils.query_params import parse_query_params

logger = logging.getLogger(__name__)


class QueryNormalizer:
    """Normalize the query parameters of requests for one resource schema.

    Each family is handled by its own strategy, given as a
    :class:`QueryParser` subclass, an instance, or a plain
    ``(context, value)`` callable. Strategies run in the order of
    :attr:`families` and each one sees the context produced by the previous
    ones. Passing ``None`` disables a family; a request that still uses it
    is rejected.
    """

    families = ("fields", "filter", "include", "page", "sort")

    def __init__(
        self,
        schema: Union[str, ResourceSchema],
        registry: SchemaRegistry,
        *,
        config: JSONAPIConfig | None = None,
        fields: ParserSpec = FieldsParser,
        filter: ParserSpec = FilterParser,
        include: ParserSpec = IncludeParser,
        page: ParserSpec = PageParser,
        sort: ParserSpec = SortParser,
    ) -> None:
        self.registry = registry
        self.config = config or JSONAPIConfig()
        self.schema = registry.resolve(schema)
        specs = {"fields": fields, "filter": filter, "include": include, "page": page, "sort": sort}
        self.parsers = {family: self._build(spec) for family, spec in specs.items()}

    def _build(self, spec: ParserSpec) -> Any:
        if isinstance(spec, type) and issubclass(spec, QueryParser):
            return spec(registry=self.registry, config=self.config)
        return spec

    def normalize(
        self,
        query_params: Mapping[str, Any],
        *,
        document: Any = None,
        params: Any = None,
    ) -> RequestContext:
        """Return the request context for a flat query parameter mapping."""
        raw = parse_query_params(query_params)
        context = RequestContext(view=self.schema, document=document, params=params)
        for family in self.families:
            parser = self.parsers[family]
            value = raw[family]
            if parser is None:
                if value is not None:
                    self._reject(family, value)
                continue
            context = context.model_copy(update={family: parser(context, value)})
        logger.debug(
            "Normalized %s query: include=%s sort=%s",
            self.schema.type,
            context.include_paths(),
            context.sort,
        )
        return context

    def _reject(self, family: str, value: Any) -> None:
        if family == "filter":
            raise MissingFilterStrategyError(value)
        raise ValidationError(
            f"The '{family}' parameter is not supported for type '{self.schema.type}'",
            parameter=family,
            value=value,
        )
