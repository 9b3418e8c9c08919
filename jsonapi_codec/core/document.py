"""JSON:API document construction."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Iterable, Mapping, Union

from jsonapi_codec.core.errors import JSONAPIError, JSONAPIErrorBuilder
from jsonapi_codec.schemas.resource import (
    JSONAPIDocument,
    JSONAPIErrorObject,
    JSONAPIResource,
)

ErrorLike = Union[JSONAPIErrorObject, JSONAPIError, Mapping[str, Any]]


class JSONAPIDocumentBuilder:
    """Build JSON:API v1.1 documents from serialized data."""

    def build_single(
        self,
        resource: JSONAPIResource | None,
        *,
        included: Iterable[JSONAPIResource] | None = None,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> JSONAPIDocument:
        """Return a JSON:API document for a single resource object (or null)."""
        return self._build(resource, included=included, links=links, meta=meta)

    def build_collection(
        self,
        resources: Iterable[JSONAPIResource],
        *,
        included: Iterable[JSONAPIResource] | None = None,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> JSONAPIDocument:
        """Return a JSON:API document for a collection of resources."""
        return self._build(list(resources), included=included, links=links, meta=meta)

    def build_error(
        self, status: int | HTTPStatus, errors: Iterable[ErrorLike]
    ) -> JSONAPIDocument:
        """Return an error document, stamping ``status`` and ``title`` on every error."""
        raw = [_error_dict(error) for error in errors]
        stamped = JSONAPIErrorBuilder().stamp_status(status, raw)
        return JSONAPIDocument(errors=[JSONAPIErrorObject(**error) for error in stamped])

    def _build(
        self,
        data: Any,
        *,
        included: Iterable[JSONAPIResource] | None,
        links: Mapping[str, Any] | None,
        meta: Mapping[str, Any] | None,
    ) -> JSONAPIDocument:
        document = JSONAPIDocument(data=data)
        included = list(included or [])
        if included:
            document.included = included
        if links:
            document.links = dict(links)
        if meta:
            document.meta = dict(meta)
        return document


def build_error_document(status: int | HTTPStatus, errors: Iterable[ErrorLike]) -> JSONAPIDocument:
    return JSONAPIDocumentBuilder().build_error(status, errors)


def _error_dict(error: ErrorLike) -> dict[str, Any]:
    if isinstance(error, JSONAPIErrorObject):
        return error.to_wire()
    if isinstance(error, JSONAPIError):
        return error.to_error_object()
    return dict(error)
