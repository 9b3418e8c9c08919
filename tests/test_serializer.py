import pytest

from jsonapi_codec.config import JSONAPIConfig
from jsonapi_codec.core.context import RequestContext
from jsonapi_codec.core.errors import RequiredFieldError
from jsonapi_codec.core.resource import NotLoaded
from jsonapi_codec.core.schema import ResourceSchema, SchemaRegistry
from jsonapi_codec.deserializers.base import JSONAPIDeserializer
from jsonapi_codec.serializers.base import JSONAPISerializer
from tests.factories import POST, make_comment, make_post, make_user


def test_null_data(serializer: JSONAPISerializer) -> None:
    assert serializer.serialize("post", None).to_wire() == {"data": None}


def test_single_resource(serializer: JSONAPISerializer) -> None:
    author = make_user(7)
    post = make_post(1, author=author, comments=[make_comment(3)])

    wire = serializer.serialize(POST, post).to_wire()

    assert wire["links"] == {"self": "/post/1"}
    data = wire["data"]
    assert data["id"] == "1"
    assert data["type"] == "post"
    assert data["attributes"] == {
        "title": "Hello",
        "body": "A long enough body",
        "created-at": "2024-01-01",
        "excerpt": "A long eno",
    }
    assert data["links"] == {"self": "/post/1"}
    assert data["relationships"]["author"] == {
        "data": {"type": "user", "id": "7"},
        "links": {
            "self": "/post/1/relationships/author",
            "related": "/post/1/author",
        },
    }
    assert data["relationships"]["comments"]["data"] == [{"type": "comment", "id": "3"}]
    assert data["relationships"]["best-comment"]["data"] is None
    assert "included" not in wire


def test_relationship_data_never_carries_attributes(serializer: JSONAPISerializer) -> None:
    post = make_post(1, author=make_user(7))

    relationship = serializer.serialize("post", post).to_wire()["data"]["relationships"]["author"]

    assert set(relationship["data"]) == {"type", "id"}


def test_collection_dedups_included(serializer: JSONAPISerializer) -> None:
    author = make_user(7)
    posts = [make_post(1, author=author), make_post(2, author=author)]
    context = RequestContext(view=POST, include={"author": {}})

    wire = serializer.serialize("post", posts, context).to_wire()

    assert [item["id"] for item in wire["data"]] == ["1", "2"]
    assert wire["links"] == {"self": "/post"}
    assert wire["included"] == [
        {
            "type": "user",
            "id": "7",
            "attributes": {"username": "alice", "full-name": "alice liddell"},
            "links": {"self": "/user/7"},
        }
    ]


def test_sparse_fieldsets(serializer: JSONAPISerializer) -> None:
    context = RequestContext(view=POST, fields={"post": frozenset({"title"})})

    data = serializer.serialize("post", make_post(1), context).to_wire()["data"]

    assert data["attributes"] == {"title": "Hello"}
    assert "relationships" not in data


def test_sparse_fieldsets_apply_to_included_types(serializer: JSONAPISerializer) -> None:
    context = RequestContext(
        view=POST,
        include={"author": {}},
        fields={"user": frozenset({"username"}), "unknown": frozenset({"x"})},
    )

    wire = serializer.serialize("post", make_post(1, author=make_user(7)), context).to_wire()

    assert wire["included"][0]["attributes"] == {"username": "alice"}


def test_include_expands_only_matched_depth(serializer: JSONAPISerializer) -> None:
    comments = [make_comment(3, author=make_user(7)), make_comment(4, author=make_user(8, "bob"))]
    post = make_post(1, comments=comments)
    context = RequestContext(view=POST, include={"comments": {}})

    wire = serializer.serialize("post", post, context).to_wire()

    assert [(item["type"], item["id"]) for item in wire["included"]] == [
        ("comment", "3"),
        ("comment", "4"),
    ]
    assert wire["included"][0]["relationships"]["author"]["data"] == {"type": "user", "id": "7"}


def test_nested_include(serializer: JSONAPISerializer) -> None:
    author = make_user(7)
    post = make_post(1, comments=[make_comment(3, author=author), make_comment(4, author=author)])
    context = RequestContext(view=POST, include={"comments": {"author": {}}})

    wire = serializer.serialize("post", post, context).to_wire()

    assert [(item["type"], item["id"]) for item in wire["included"]] == [
        ("comment", "3"),
        ("user", "7"),
        ("comment", "4"),
    ]


def test_not_loaded_relationship_renders_identifier_only(serializer: JSONAPISerializer) -> None:
    post = make_post(1, author=NotLoaded(id="5", type="user"))
    context = RequestContext(view=POST, include={"author": {}})

    wire = serializer.serialize("post", post, context).to_wire()

    assert wire["data"]["relationships"]["author"]["data"] == {"id": "5", "type": "user"}
    assert "included" not in wire


def test_not_loaded_without_id_renders_links_only(serializer: JSONAPISerializer) -> None:
    post = make_post(1, comments=NotLoaded(type="comment"))

    relationship = serializer.serialize("post", post).to_wire()["data"]["relationships"]["comments"]

    assert "data" not in relationship
    assert relationship["links"]["related"] == "/post/1/comments"


def test_primary_resources_are_not_repeated_in_included() -> None:
    person = ResourceSchema(
        type="person",
        attributes=["name"],
        relationships={"friends": {"target": "person", "many": True}},
    )
    serializer = JSONAPISerializer(SchemaRegistry([person]))
    alice = {"id": 1, "name": "alice", "friends": []}
    bob = {"id": 2, "name": "bob", "friends": [alice]}
    alice["friends"] = [bob]
    context = RequestContext(view=person, include={"friends": {"friends": {}}})

    wire = serializer.serialize("person", [alice], context).to_wire()

    assert [item["id"] for item in wire["included"]] == ["2"]


def test_missing_id_raises(serializer: JSONAPISerializer) -> None:
    with pytest.raises(RequiredFieldError):
        serializer.serialize("post", make_post(None))


def test_schema_links_meta_and_path() -> None:
    schema = ResourceSchema(
        type="article",
        path="articles",
        attributes=["title"],
        links=lambda record, context: {"canonical": f"https://blog.test/{record['slug']}"},
        meta=lambda record, context: {"word_count": 3},
    )
    serializer = JSONAPISerializer(
        SchemaRegistry([schema]), config=JSONAPIConfig(host="api.test", namespace="v1")
    )

    wire = serializer.serialize(
        "article", {"id": "a", "title": "t", "slug": "t-1"}, meta={"total": 1}
    ).to_wire()

    assert wire["data"]["links"] == {
        "self": "http://api.test/v1/articles/a",
        "canonical": "https://blog.test/t-1",
    }
    assert wire["data"]["meta"] == {"word-count": 3}
    assert wire["meta"] == {"total": 1}


def test_custom_id_attribute_and_wire_name() -> None:
    tag = ResourceSchema(type="tag", id_attribute="slug", attributes=["slug", "label"])
    page = ResourceSchema(
        type="page",
        attributes=["title"],
        relationships={"tag_list": {"target": "tag", "many": True, "wire_name": "tags"}},
    )
    serializer = JSONAPISerializer(SchemaRegistry([tag, page]))
    record = {"id": 1, "title": "t", "tag_list": [{"slug": "py", "label": "Python"}]}

    wire = serializer.serialize("page", record, RequestContext(include={"tag_list": {}})).to_wire()

    assert wire["data"]["relationships"]["tags"]["data"] == [{"type": "tag", "id": "py"}]
    assert wire["included"][0]["attributes"] == {"label": "Python"}


def test_identifiers_round_trip(
    serializer: JSONAPISerializer, deserializer: JSONAPIDeserializer
) -> None:
    wire = serializer.serialize("post", make_post(12)).to_wire()

    params = deserializer.deserialize(wire)

    assert (params["id"], params["type"]) == ("12", "post")


def test_error_document(serializer: JSONAPISerializer) -> None:
    document = serializer.serialize_errors(409, [{"detail": "title is taken"}])

    assert document.to_wire() == {
        "errors": [{"status": "409", "title": "Conflict", "detail": "title is taken"}]
    }
