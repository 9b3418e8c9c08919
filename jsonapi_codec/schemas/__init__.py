"""Pydantic schemas for JSON:API."""

from .resource import (
    JSONAPIDocument,
    JSONAPIErrorObject,
    JSONAPIRelationship,
    JSONAPIResource,
    JSONAPIResourceIdentifier,
)

__all__ = [
    "JSONAPIDocument",
    "JSONAPIErrorObject",
    "JSONAPIRelationship",
    "JSONAPIResource",
    "JSONAPIResourceIdentifier",
]
