"""Field name casing between the wire format and internal names."""

from __future__ import annotations

import re
from typing import Any, Callable, Mapping

from jsonapi_codec.config import FieldTransformation

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_UNDERSCORE_WORD = re.compile(r"_([a-z0-9])")


def dasherize(value: str) -> str:
    return value.replace("_", "-")


def undasherize(value: str) -> str:
    return value.replace("-", "_")


def camelize(value: str) -> str:
    return _UNDERSCORE_WORD.sub(lambda match: match.group(1).upper(), value)


def uncamelize(value: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"\1_\2", value).lower()


_CONVERTERS: dict[str, tuple[Callable[[str], str], Callable[[str], str]]] = {
    "dasherize": (dasherize, undasherize),
    "camelize": (camelize, uncamelize),
}


def _identity(value: str) -> str:
    return value


class FieldTransform:
    """Recursive, reversible renaming of member names.

    Mapping keys are renamed at any depth. Bare strings, and strings in a
    bare list, are renamed too since they name fields or relationships.
    String values held under a mapping key are attribute values and are left
    alone, as are non-string keys and scalars.
    """

    def __init__(self, transformation: FieldTransformation = "dasherize") -> None:
        if transformation is None:
            self._to_wire = self._to_internal = _identity
        else:
            self._to_wire, self._to_internal = _CONVERTERS[transformation]
        self.transformation = transformation

    def to_wire(self, value: Any) -> Any:
        """Rename internal member names to their wire form."""
        return _transform(value, self._to_wire, rename_strings=True)

    def to_internal(self, value: Any) -> Any:
        """Rename wire member names to their internal form."""
        return _transform(value, self._to_internal, rename_strings=True)

    def keys_to_internal(self, value: Mapping[str, Any]) -> dict[str, Any]:
        """Rename the top-level keys of ``value`` only; the values are kept as sent."""
        return {
            (self._to_internal(key) if isinstance(key, str) else key): item
            for key, item in value.items()
        }

    def __repr__(self) -> str:
        return f"FieldTransform({self.transformation!r})"


def _transform(value: Any, convert: Callable[[str], str], *, rename_strings: bool) -> Any:
    if isinstance(value, Mapping):
        return {
            (convert(key) if isinstance(key, str) else key): _transform(
                item, convert, rename_strings=False
            )
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        items = [_transform(item, convert, rename_strings=rename_strings) for item in value]
        return items if isinstance(value, list) else tuple(items)
    if isinstance(value, str) and rename_strings:
        return convert(value)
    return value
