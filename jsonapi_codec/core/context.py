"""Per-request normalized query parameters."""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from jsonapi_codec.core.schema import ResourceSchema
from jsonapi_codec.schemas.resource import JSONAPIDocument

#: ``{"comments": {"author": {}}}`` for ``include=comments.author``
IncludeTree = Dict[str, Any]


class RequestContext(BaseModel):
    """Validated query parameters and request document.

    Built once per request by the query normalizer and read-only afterwards.
    ``fields`` maps a type to the internal field names to render; ``sort``
    holds ``(direction, field)`` pairs in request order.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    view: Optional[ResourceSchema] = None
    fields: Dict[str, FrozenSet[str]] = {}
    filter: Any = None
    include: IncludeTree = {}
    page: Dict[str, Any] = {}
    sort: Tuple[Tuple[str, str], ...] = ()
    document: Optional[JSONAPIDocument] = None
    params: Any = None

    def fields_for(self, type_: str) -> Optional[FrozenSet[str]]:
        """Return the sparse fieldset for ``type_``, or ``None`` for all fields."""
        return self.fields.get(type_)

    def include_paths(self) -> List[str]:
        """Return the include tree as dotted relationship paths."""
        return _paths(self.include, ())


def _paths(tree: IncludeTree, prefix: Tuple[str, ...]) -> List[str]:
    paths: List[str] = []
    for name, subtree in tree.items():
        path = prefix + (name,)
        paths.append(".".join(path))
        paths.extend(_paths(subtree, path))
    return paths
