"""JSON:API content negotiation middleware."""

from typing import Any

from jsonapi_codec.responses import send_error
from jsonapi_codec.utils.content_negotiation import (
    JSONAPI_MEDIA_TYPE,
    accepts_jsonapi,
    parse_jsonapi_media_type,
)


class ContentNegotiationMiddleware:
    """Reject JSON:API bodies with unknown media type parameters and unacceptable ``Accept``.

    Requests whose body is not JSON:API pass through untouched.
    """

    def __init__(self, app: Any) -> None:
        """Store the ASGI app for middleware chaining."""
        self.app = app

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        """Validate JSON:API headers before passing to downstream app."""
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        headers = {k.decode().lower(): v.decode() for k, v in scope.get("headers", [])}
        content_type = headers.get("content-type", "")

        if content_type:
            parsed = parse_jsonapi_media_type(content_type)
            if parsed["media_type"] == JSONAPI_MEDIA_TYPE and parsed.get("other_params"):
                await send_error(415, [{"detail": "Media type parameters are not allowed"}])(
                    scope, receive, send
                )
                return

        if not accepts_jsonapi(headers.get("accept")):
            detail = f"Responses are only available as {JSONAPI_MEDIA_TYPE}"
            await send_error(406, [{"detail": detail}])(scope, receive, send)
            return

        await self.app(scope, receive, send)
