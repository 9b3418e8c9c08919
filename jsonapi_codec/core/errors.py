"""JSON:API error objects and the exceptions that produce them."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)


def status_title(status: int | HTTPStatus) -> str:
    """Return the HTTP reason phrase for a status code."""
    try:
        return HTTPStatus(int(status)).phrase
    except ValueError:
        return "Unknown Error"


class JSONAPIError(Exception):
    """Base exception rendered as a JSON:API error object."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR.value
    code: str | None = None

    def __init__(
        self,
        detail: str = "",
        *,
        status_code: int | None = None,
        code: str | None = None,
        source: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.source = source

    @property
    def title(self) -> str:
        return status_title(self.status_code)

    def to_error_object(self) -> dict[str, Any]:
        """Return the wire error object for this exception."""
        return JSONAPIErrorBuilder().error_object(
            status=str(self.status_code),
            code=self.code,
            title=self.title,
            detail=self.detail or None,
            source=self.source,
        )


class ValidationError(JSONAPIError):
    """Invalid client input in a query parameter."""

    status_code = HTTPStatus.BAD_REQUEST.value

    def __init__(self, detail: str, *, parameter: str, value: Any = None, **kwargs: Any) -> None:
        kwargs.setdefault("source", {"parameter": parameter})
        super().__init__(detail, **kwargs)
        self.parameter = parameter
        self.value = value
        logger.warning("ValidationError: %s (%s=%r)", detail, parameter, value)


class InvalidFieldError(ValidationError):
    code = "invalid_field"

    def __init__(self, field: str, type_: str, *, parameter: str = "fields") -> None:
        super().__init__(
            f"Field '{field}' is not defined for type '{type_}'",
            parameter=f"{parameter}[{type_}]",
            value=field,
        )
        self.field = field
        self.type = type_


class InvalidRelationshipError(ValidationError):
    code = "invalid_relationship"

    def __init__(self, relationship: str, type_: str, *, path: str | None = None) -> None:
        super().__init__(
            f"Relationship '{relationship}' is not defined for type '{type_}'",
            parameter="include",
            value=path or relationship,
        )
        self.relationship = relationship
        self.type = type_


class InvalidSortError(ValidationError):
    code = "invalid_sort"

    def __init__(self, field: str, type_: str) -> None:
        super().__init__(
            f"Cannot sort type '{type_}' by unknown attribute '{field}'",
            parameter="sort",
            value=field,
        )
        self.field = field
        self.type = type_


class InvalidPageError(ValidationError):
    code = "invalid_page"

    def __init__(self, key: str, allowed: Iterable[str]) -> None:
        super().__init__(
            f"Unsupported pagination parameter '{key}', expected one of: "
            + ", ".join(sorted(allowed)),
            parameter=f"page[{key}]",
            value=key,
        )
        self.key = key


class MissingFilterStrategyError(ValidationError):
    code = "filter_not_supported"

    def __init__(self, value: Any) -> None:
        super().__init__(
            "Filtering is not supported for this resource",
            parameter="filter",
            value=value,
        )


class RequiredFieldError(JSONAPIError):
    """A required member (usually a resource id) is missing."""

    status_code = HTTPStatus.BAD_REQUEST.value
    code = "required_field"

    def __init__(
        self, field: str, *, pointer: str | None = None, detail: str | None = None
    ) -> None:
        super().__init__(
            detail or f"Required field '{field}' is missing",
            source={"pointer": pointer} if pointer else None,
        )
        self.field = field


class MalformedDocumentError(JSONAPIError):
    """The request body is not a valid JSON:API document."""

    status_code = HTTPStatus.BAD_REQUEST.value
    code = "malformed_document"


class JSONAPIErrorBuilder:
    """Build JSON:API error objects and error documents."""

    def error_object(
        self,
        *,
        status: str | None = None,
        code: str | None = None,
        title: str | None = None,
        detail: str | None = None,
        source: dict[str, Any] | None = None,
        meta: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return a JSON:API error object."""
        error: dict[str, Any] = {}
        if status is not None:
            error["status"] = status
        if code is not None:
            error["code"] = code
        if title is not None:
            error["title"] = title
        if detail is not None:
            error["detail"] = detail
        if source is not None:
            error["source"] = source
        if meta is not None:
            error["meta"] = meta
        if not error:
            raise ValueError("Error object must include at least one field.")
        return error

    def error_document(self, errors: list[dict[str, Any]]) -> dict[str, Any]:
        """Return a JSON:API document with an errors array."""
        return {"errors": errors}

    def from_exception(self, exc: JSONAPIError) -> dict[str, Any]:
        """Return an error document for a raised exception."""
        return self.error_document([exc.to_error_object()])

    def stamp_status(
        self, status: int | HTTPStatus, errors: Iterable[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        """Overwrite status and title of each error with the response status."""
        code = int(status)
        return [{**error, "status": str(code), "title": status_title(code)} for error in errors]
