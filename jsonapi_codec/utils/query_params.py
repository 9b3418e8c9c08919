"""Helpers for JSON:API query parameter extraction."""

from __future__ import annotations

import json
import re
from typing import Any, Mapping
from urllib.parse import unquote

_FAMILY_KEY = re.compile(r"^(fields|page)\[([^\]]+)\]$")
_FILTER_KEY = re.compile(r"^filter\[([^\]]+)\](?:\[([^\]]+)\])?$")

#: Filter operators whose value is a comma separated list
LIST_OPERATORS = frozenset({"in", "not_in", "nin", "between"})


def split_csv(value: str) -> list[str]:
    return [item for item in (part.strip() for part in value.split(",")) if item]


def _maybe_parse_json(value: Any) -> Any:
    """Parse JSON string if it looks like JSON, otherwise return as-is.

    Handles URL-encoded JSON strings and regular JSON strings.
    """
    if not isinstance(value, str):
        return value

    stripped = value.strip()
    if not stripped:
        return value

    if stripped[0] in "[{":
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass

    decoded = unquote(stripped)
    if decoded != stripped and decoded[:1] in ("[", "{"):
        try:
            return json.loads(decoded)
        except json.JSONDecodeError:
            pass

    return value


def parse_query_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Split a flat query mapping into raw JSON:API parameter families.

    ``fields[post]=title`` lands in ``{"fields": {"post": "title"}}`` and
    ``page[size]=10`` in ``{"page": {"size": "10"}}``. Families that are not
    present are ``None``. Values are not validated here.
    """
    raw: dict[str, Any] = {
        "fields": None,
        "filter": None,
        "include": None,
        "page": None,
        "sort": None,
    }

    for key, value in params.items():
        if value is None:
            continue
        if key in ("include", "sort"):
            raw[key] = str(value)
        elif key in ("fields", "page") and isinstance(value, Mapping):
            raw[key] = {**(raw[key] or {}), **value}
        elif key == "filter":
            parsed = _maybe_parse_json(value)
            if isinstance(parsed, (dict, list)):
                raw["filter"] = parsed
            else:
                # A bare filter=<value> without field
                raw["filter"] = {"value": parsed}
        elif key.startswith(("fields[", "page[")):
            match = _FAMILY_KEY.match(key)
            if match:
                family, name = match.groups()
                raw[family] = {**(raw[family] or {}), name: value}
        elif key.startswith("filter["):
            match = _FILTER_KEY.match(key)
            if match:
                _add_filter(raw, match.group(1), match.group(2), _maybe_parse_json(value))

    return raw


def _add_filter(raw: dict[str, Any], field_name: str, op_name: str | None, value: Any) -> None:
    if not isinstance(raw["filter"], dict):
        raw["filter"] = {}
    if op_name is None:
        # filter[field] syntax: {"field": value}
        raw["filter"][field_name] = value
        return
    # filter[field][op] syntax: {"field": {"op": "gt", "val": value}}
    if op_name in LIST_OPERATORS:
        if isinstance(value, str):
            value = split_csv(value)
        elif not isinstance(value, list):
            value = [value]
    raw["filter"][field_name] = {"op": op_name, "val": value}
