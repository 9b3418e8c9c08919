import pytest

from jsonapi_codec.config import JSONAPIConfig
from jsonapi_codec.core.schema import SchemaRegistry
from jsonapi_codec.deserializers.base import JSONAPIDeserializer
from jsonapi_codec.serializers.base import JSONAPISerializer
from tests.factories import COMMENT, POST, USER


@pytest.fixture
def registry() -> SchemaRegistry:
    registry = SchemaRegistry([USER, COMMENT, POST])
    registry.validate()
    return registry


@pytest.fixture
def config() -> JSONAPIConfig:
    return JSONAPIConfig()


@pytest.fixture
def serializer(registry: SchemaRegistry, config: JSONAPIConfig) -> JSONAPISerializer:
    return JSONAPISerializer(registry, config=config)


@pytest.fixture
def deserializer(registry: SchemaRegistry, config: JSONAPIConfig) -> JSONAPIDeserializer:
    return JSONAPIDeserializer(registry, config=config)
