from typing import Any

import pytest

from jsonapi_codec.core.context import RequestContext
from jsonapi_codec.core.errors import (
    InvalidFieldError,
    InvalidPageError,
    InvalidRelationshipError,
    InvalidSortError,
    MissingFilterStrategyError,
    ValidationError,
)
from jsonapi_codec.core.schema import ResourceSchema, SchemaRegistry
from jsonapi_codec.query import FieldsParser, IncludeParser, QueryNormalizer, SortParser
from jsonapi_codec.query.base import QueryParser
from jsonapi_codec.serializers.base import JSONAPISerializer


@pytest.fixture
def normalizer(registry: SchemaRegistry) -> QueryNormalizer:
    return QueryNormalizer("post", registry)


def test_defaults(normalizer: QueryNormalizer) -> None:
    context = normalizer.normalize({})

    assert context.view is normalizer.schema
    assert context.fields == {}
    assert context.include == {}
    assert context.sort == ()
    assert context.page == {}
    assert context.filter is None


def test_sort(normalizer: QueryNormalizer) -> None:
    assert normalizer.normalize({"sort": "-created_at"}).sort == (("desc", "created_at"),)
    assert normalizer.normalize({"sort": "title,-created-at"}).sort == (
        ("asc", "title"),
        ("desc", "created_at"),
    )


def test_sort_rejects_unknown_field(normalizer: QueryNormalizer) -> None:
    with pytest.raises(InvalidSortError) as exc_info:
        normalizer.normalize({"sort": "-unknown_field"})

    assert exc_info.value.field == "unknown_field"
    assert "unknown_field" in exc_info.value.detail
    assert exc_info.value.to_error_object()["source"] == {"parameter": "sort"}


def test_sort_rejects_relationships(normalizer: QueryNormalizer) -> None:
    with pytest.raises(InvalidSortError):
        normalizer.normalize({"sort": "author"})


def test_fields(normalizer: QueryNormalizer) -> None:
    context = normalizer.normalize(
        {"fields[post]": "title,best-comment", "fields[user]": "full-name,whatever"}
    )

    assert context.fields == {
        "post": frozenset({"title", "best_comment"}),
        "user": frozenset({"full_name", "whatever"}),
    }


def test_fields_reject_unknown_field(normalizer: QueryNormalizer) -> None:
    with pytest.raises(InvalidFieldError) as exc_info:
        normalizer.normalize({"fields[post]": "title,nope"})

    assert exc_info.value.field == "nope"
    assert exc_info.value.type == "post"
    assert exc_info.value.parameter == "fields[post]"


def test_include_tree(normalizer: QueryNormalizer) -> None:
    context = normalizer.normalize({"include": "comments.author,author,best-comment"})

    assert context.include == {
        "comments": {"author": {}},
        "author": {},
        "best_comment": {},
    }
    assert context.include_paths() == ["comments", "comments.author", "author", "best_comment"]


def test_include_checks_segments_against_target_schema(normalizer: QueryNormalizer) -> None:
    with pytest.raises(InvalidRelationshipError) as exc_info:
        normalizer.normalize({"include": "comments.title"})

    assert exc_info.value.relationship == "title"
    assert exc_info.value.type == "comment"
    assert exc_info.value.value == "comments.title"


def test_page(normalizer: QueryNormalizer) -> None:
    assert normalizer.normalize({"page[offset]": "10", "page[limit]": "5"}).page == {
        "offset": "10",
        "limit": "5",
    }


def test_page_rejects_unknown_keys(normalizer: QueryNormalizer) -> None:
    with pytest.raises(InvalidPageError) as exc_info:
        normalizer.normalize({"page[number]": "2"})

    assert exc_info.value.parameter == "page[number]"


def test_filter_is_passed_through(normalizer: QueryNormalizer) -> None:
    context = normalizer.normalize({"filter[title]": "hello", "filter[id][in]": "1,2"})

    assert context.filter == {"title": "hello", "id": {"op": "in", "val": ["1", "2"]}}


def test_disabled_filter_rejects_filters(registry: SchemaRegistry) -> None:
    normalizer = QueryNormalizer("post", registry, filter=None)

    assert normalizer.normalize({}).filter is None
    with pytest.raises(MissingFilterStrategyError):
        normalizer.normalize({"filter[title]": "x"})


def test_disabled_family_is_rejected(registry: SchemaRegistry) -> None:
    normalizer = QueryNormalizer("post", registry, page=None)

    with pytest.raises(ValidationError) as exc_info:
        normalizer.normalize({"page[size]": "1"})
    assert exc_info.value.parameter == "page"


def test_strategies_run_in_order_and_see_earlier_results(registry: SchemaRegistry) -> None:
    seen: list[tuple[str, Any]] = []

    def filter_strategy(context: RequestContext, value: Any) -> Any:
        seen.append(("filter", context.fields))
        return {"normalized": value}

    class RecordingSort(SortParser):
        def parse(self, context: RequestContext, value: Any) -> Any:
            seen.append(("sort", context.filter))
            return super().parse(context, value)

    normalizer = QueryNormalizer("post", registry, filter=filter_strategy, sort=RecordingSort)

    context = normalizer.normalize({"fields[post]": "title", "filter": "x", "sort": "title"})

    assert seen == [
        ("filter", {"post": frozenset({"title"})}),
        ("sort", {"normalized": {"value": "x"}}),
    ]
    assert context.sort == (("asc", "title"),)


def test_parser_instances_can_be_used_directly(registry: SchemaRegistry) -> None:
    parser = IncludeParser(registry=registry)
    context = RequestContext(view=registry.get("comment"))

    assert parser(context, "author") == {"author": {}}
    assert parser(context, None) == {}


def test_custom_parser_subclass(registry: SchemaRegistry) -> None:
    class UpperFields(FieldsParser):
        def parse(self, context: RequestContext, value: Any) -> Any:
            return {type_: frozenset({"title"}) for type_ in (value or {})}

    normalizer = QueryNormalizer("post", registry, fields=UpperFields)

    assert normalizer.normalize({"fields[post]": "anything"}).fields == {"post": frozenset({"title"})}


def test_base_parser_is_abstract() -> None:
    with pytest.raises(NotImplementedError):
        QueryParser().parse(RequestContext(), "x")


def test_context_is_read_only(normalizer: QueryNormalizer) -> None:
    context = normalizer.normalize({})

    with pytest.raises(Exception):
        context.sort = (("asc", "title"),)


def test_fields_of_related_types_honour_wire_names() -> None:
    person = ResourceSchema(type="person", attributes=["name"])
    note = ResourceSchema(
        type="note",
        attributes=["text"],
        relationships={"author": {"target": "person", "wire_name": "writtenBy"}},
    )
    book = ResourceSchema(
        type="book",
        attributes=["title"],
        relationships={"notes": {"target": "note", "many": True}},
    )
    registry = SchemaRegistry([person, note, book])
    normalizer = QueryNormalizer("book", registry)

    context = normalizer.normalize(
        {"include": "notes", "fields[note]": "writtenBy", "fields[tag]": "display-name"}
    )
    record = {
        "id": 1,
        "title": "t",
        "notes": [{"id": 2, "text": "x", "author": {"id": 3, "name": "ada"}}],
    }
    wire = JSONAPISerializer(registry).serialize("book", record, context).to_wire()

    assert context.fields == {
        "note": frozenset({"author"}),
        "tag": frozenset({"display_name"}),
    }
    (included,) = wire["included"]
    assert "attributes" not in included
    assert included["relationships"]["writtenBy"]["data"] == {"type": "person", "id": "3"}
