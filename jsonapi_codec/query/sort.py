"""Sorting: ``sort=-created-at,title``."""

from __future__ import annotations

from typing import Any, Tuple

from jsonapi_codec.core.context import RequestContext
from jsonapi_codec.core.errors import InvalidSortError
from jsonapi_codec.query.base import QueryParser
from jsonapi_codec.utils.query_params import split_csv

ASC = "asc"
DESC = "desc"


class SortParser(QueryParser):
    """Return ``(direction, field)`` pairs in request order; only attributes sort."""

    parameter = "sort"

    def parse(self, context: RequestContext, value: Any) -> Tuple[Tuple[str, str], ...]:
        if value is None:
            return context.sort
        schema = context.view
        sort = []
        for item in split_csv(str(value)):
            direction = DESC if item.startswith("-") else ASC
            name = item[1:] if item.startswith("-") else item
            field = self.transform.to_internal(name)
            if schema is None or field not in schema.attribute_names:
                raise InvalidSortError(field, schema.type if schema is not None else "")
            sort.append((direction, field))
        return tuple(sort)
