"""Pagination: ``page[offset]=10&page[limit]=5``."""

from __future__ import annotations

from typing import Any, Mapping

from jsonapi_codec.core.context import RequestContext
from jsonapi_codec.core.errors import InvalidPageError, ValidationError
from jsonapi_codec.query.base import QueryParser

PAGE_KEYS = frozenset({"limit", "offset", "page", "size", "cursor"})


class PageParser(QueryParser):
    """Restrict ``page`` to known keys, leaving values for the pagination strategy."""

    parameter = "page"
    allowed_keys = PAGE_KEYS

    def parse(self, context: RequestContext, value: Any) -> dict[str, Any]:
        if value is None:
            return context.page
        if not isinstance(value, Mapping):
            raise ValidationError(
                "Pagination must be given as page[KEY]=VALUE",
                parameter=self.parameter,
                value=value,
            )
        for key in value:
            if key not in self.allowed_keys:
                raise InvalidPageError(key, self.allowed_keys)
        return dict(value)
