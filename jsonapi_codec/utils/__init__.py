"""Utilities for JSON:API parsing and headers."""

from .content_negotiation import (
    JSONAPI_MEDIA_TYPE,
    accepts_jsonapi,
    is_jsonapi_content_type,
    parse_jsonapi_media_type,
)
from .query_params import parse_query_params, split_csv

__all__ = [
    "JSONAPI_MEDIA_TYPE",
    "accepts_jsonapi",
    "is_jsonapi_content_type",
    "parse_jsonapi_media_type",
    "parse_query_params",
    "split_csv",
]
