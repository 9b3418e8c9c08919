"""Helpers for JSON:API content negotiation."""

from __future__ import annotations

from typing import Any

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


def _split_parameters(value: str) -> list[str]:
    return [part.strip() for part in value.split(";") if part.strip()]


def _parse_param_value(value: str) -> list[str]:
    if value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    if not value:
        return []
    return value.split(" ")


def parse_jsonapi_media_type(content_type: str) -> dict[str, Any]:
    """Parse a media type and its JSON:API ``ext``/``profile`` parameters."""
    parts = _split_parameters(content_type)
    media_type = parts[0].lower() if parts else ""
    params: dict[str, Any] = {"media_type": media_type, "ext": [], "profile": []}

    for param in parts[1:]:
        if "=" not in param:
            continue
        name, raw_value = param.split("=", 1)
        name = name.strip().lower()
        raw_value = raw_value.strip()
        if name in {"ext", "profile"}:
            params[name] = _parse_param_value(raw_value)
        else:
            params.setdefault("other_params", {})[name] = raw_value
    return params


def is_jsonapi_content_type(content_type: str | None) -> bool:
    """Return whether ``content_type`` is the JSON:API media type."""
    if not content_type:
        return False
    return parse_jsonapi_media_type(content_type)["media_type"] == JSONAPI_MEDIA_TYPE


def accepts_jsonapi(accept: str | None) -> bool:
    """Return whether an ``Accept`` header allows a JSON:API response.

    At least one JSON:API entry must be free of media type parameters other
    than ``ext`` and ``profile``.
    """
    if not accept:
        return True
    for entry in accept.split(","):
        parsed = parse_jsonapi_media_type(entry)
        if parsed["media_type"] in ("*/*", "application/*"):
            return True
        other = {k: v for k, v in parsed.get("other_params", {}).items() if k != "q"}
        if parsed["media_type"] == JSONAPI_MEDIA_TYPE and not other:
            return True
    return False
