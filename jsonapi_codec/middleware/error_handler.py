"""JSON:API error handling middleware."""

import logging
from typing import Any

from jsonapi_codec.core.errors import JSONAPIError
from jsonapi_codec.responses import send_error

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware:
    """Convert exceptions into JSON:API error documents."""

    def __init__(self, app: Any) -> None:
        """Store the ASGI app for middleware chaining."""
        self.app = app

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        """Answer with the error's status, or 500 for anything unexpected."""
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return
        try:
            await self.app(scope, receive, send)
        except JSONAPIError as exc:
            await send_error(exc.status_code, [exc])(scope, receive, send)
        except Exception as exc:  # noqa: BLE001 - last resort handler
            logger.exception("Unhandled error while processing %s", scope.get("path"))
            await send_error(500, [{"detail": str(exc)}])(scope, receive, send)
