"""Filtering: ``filter[...]``."""

from __future__ import annotations

from typing import Any

from jsonapi_codec.core.context import RequestContext
from jsonapi_codec.query.base import QueryParser


class FilterParser(QueryParser):
    """Identity strategy: the raw filter is handed to the data layer as is."""

    parameter = "filter"

    def parse(self, context: RequestContext, value: Any) -> Any:
        if value is None:
            return context.filter
        return value
