"""FastAPI dependency that parses JSON:API requests."""

from __future__ import annotations

from typing import Any, Union

from fastapi import Request

from jsonapi_codec.config import JSONAPIConfig
from jsonapi_codec.core.context import RequestContext
from jsonapi_codec.core.errors import MalformedDocumentError
from jsonapi_codec.core.schema import ResourceSchema, SchemaRegistry
from jsonapi_codec.deserializers.base import JSONAPIDeserializer
from jsonapi_codec.query.normalizer import QueryNormalizer
from jsonapi_codec.utils.content_negotiation import is_jsonapi_content_type

BODY_METHODS = frozenset({"POST", "PATCH", "PUT", "DELETE"})


class JSONAPIRequest:
    """Normalize query parameters and deserialize the body of a request.

    Use it as a dependency::

        posts_request = JSONAPIRequest("post", registry)

        @app.get("/posts")
        async def list_posts(context: RequestContext = Depends(posts_request)):
            ...

    The resulting :class:`RequestContext` is also stored on
    ``request.state.jsonapi``. Bodies are only deserialized when sent with
    the JSON:API media type; ``context.params`` holds the flattened
    parameters and ``context.document`` the parsed document. Validation
    failures raise :class:`~jsonapi_codec.core.errors.JSONAPIError`, which
    :func:`~jsonapi_codec.responses.install_exception_handlers` turns into
    error responses.
    """

    def __init__(
        self,
        schema: Union[str, ResourceSchema],
        registry: SchemaRegistry,
        *,
        config: JSONAPIConfig | None = None,
        normalizer: QueryNormalizer | None = None,
        deserializer: JSONAPIDeserializer | None = None,
        **strategies: Any,
    ) -> None:
        self.normalizer = normalizer or QueryNormalizer(
            schema, registry, config=config, **strategies
        )
        self.deserializer = deserializer or JSONAPIDeserializer(registry, config=config)

    async def __call__(self, request: Request) -> RequestContext:
        document = params = None
        if request.method in BODY_METHODS and is_jsonapi_content_type(
            request.headers.get("content-type")
        ):
            body = await request.body()
            if body:
                try:
                    payload = await request.json()
                except ValueError as exc:
                    raise MalformedDocumentError("Request body is not valid JSON") from exc
                document = self.deserializer.deserialize_document(
                    payload, require_id=request.method != "POST"
                )
                params = self.deserializer.deserialize(payload, self.normalizer.schema)
        context = self.normalizer.normalize(request.query_params, document=document, params=params)
        request.state.jsonapi = context
        return context
