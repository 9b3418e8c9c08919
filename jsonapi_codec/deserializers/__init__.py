"""Deserialization of JSON:API request payloads."""

from .base import JSONAPIDeserializer

__all__ = ["JSONAPIDeserializer"]
