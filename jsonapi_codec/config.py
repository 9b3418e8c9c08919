"""Codec configuration shared by the serializer, deserializer and query normalizer."""

from __future__ import annotations

import os
from typing import Iterable, Literal, Optional

from pydantic import BaseModel, ConfigDict

FieldTransformation = Optional[Literal["dasherize", "camelize"]]

DEFAULT_PORTS = {"http": 80, "https": 443}


class JSONAPIConfig(BaseModel):
    """Explicit codec settings.

    ``field_transformation`` selects how internal (underscored) member names
    appear on the wire. ``scheme``, ``host``, ``port`` and ``namespace`` make
    up the canonical resource URLs rendered in ``links``; without a host the
    URLs are path-only.
    """

    model_config = ConfigDict(frozen=True)

    field_transformation: FieldTransformation = "dasherize"
    scheme: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    namespace: Optional[str] = None

    @classmethod
    def from_env(cls, prefix: str = "JSONAPI_") -> "JSONAPIConfig":
        """Build a configuration from ``<prefix>*`` environment variables."""
        options: dict[str, object] = {}
        transformation = os.environ.get(f"{prefix}FIELD_TRANSFORMATION")
        if transformation is not None:
            options["field_transformation"] = transformation or None
        for name in ("scheme", "host", "namespace"):
            value = os.environ.get(f"{prefix}{name.upper()}")
            if value:
                options[name] = value
        port = os.environ.get(f"{prefix}PORT")
        if port:
            options["port"] = int(port)
        return cls(**options)

    def url_for(self, segments: Iterable[str]) -> str:
        """Render the canonical URL for the given path segments."""
        parts = [segment.strip("/") for segment in segments if segment]
        if self.namespace:
            parts.insert(0, self.namespace.strip("/"))
        path = "/" + "/".join(parts)
        if not self.host:
            return path
        scheme = self.scheme or "http"
        netloc = self.host
        if self.port is not None and self.port != DEFAULT_PORTS.get(scheme):
            netloc = f"{netloc}:{self.port}"
        return f"{scheme}://{netloc}{path}"
