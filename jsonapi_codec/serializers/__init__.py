"""Serialization of records into JSON:API documents."""

from .base import JSONAPISerializer

__all__ = ["JSONAPISerializer"]
