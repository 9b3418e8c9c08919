"""Starlette responses carrying JSON:API documents."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Iterable

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse

from jsonapi_codec.core.document import ErrorLike, build_error_document
from jsonapi_codec.core.errors import JSONAPIError, JSONAPIErrorBuilder
from jsonapi_codec.schemas.resource import JSONAPIDocument
from jsonapi_codec.utils.content_negotiation import JSONAPI_MEDIA_TYPE

logger = logging.getLogger(__name__)


class JSONAPIResponse(JSONResponse):
    """JSON response with the JSON:API media type; accepts document models."""

    media_type = JSONAPI_MEDIA_TYPE

    def render(self, content: Any) -> bytes:
        if isinstance(content, JSONAPIDocument):
            content = content.to_wire()
        return super().render(jsonable_encoder(content))


def send_error(status: int | HTTPStatus, errors: Iterable[ErrorLike]) -> JSONAPIResponse:
    """Return an error response; every error carries the response status and title."""
    return JSONAPIResponse(build_error_document(status, errors), status_code=int(status))


async def jsonapi_exception_handler(request: Request, exc: JSONAPIError) -> JSONAPIResponse:
    """FastAPI exception handler rendering :class:`JSONAPIError` as an error document."""
    logger.debug("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONAPIResponse(
        JSONAPIErrorBuilder().from_exception(exc), status_code=exc.status_code
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(JSONAPIError, jsonapi_exception_handler)
