from datetime import date, datetime, time
from enum import Enum
from uuid import UUID

import pytest
from graphql import (
    GraphQLBoolean,
    GraphQLField,
    GraphQLFloat,
    GraphQLInt,
    GraphQLList,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLString,
    graphql_sync,
)

from entityql.core.resolution import FieldResolver
from entityql.core.scalars import (
    SCALAR_TYPE_KEYS,
    ScalarMapping,
    build_scalar_table,
    encode_json,
    format_datetime,
    identity,
    lookup_scalar,
)
from entityql.types import GraphQLTypeLibrary


class Counter:
    def __init__(self, hits):
        self.hits = hits

    def getHits(self):
        return self.hits


@pytest.fixture
def table():
    return build_scalar_table(GraphQLTypeLibrary())


def test_table_covers_every_declared_key(table):
    assert set(table) == set(SCALAR_TYPE_KEYS)


@pytest.mark.parametrize("key,expected", [
    ('smallint', GraphQLInt), ('integer', GraphQLInt), ('bigint', GraphQLString),
    ('float', GraphQLFloat), ('decimal', GraphQLFloat),
    ('text', GraphQLString), ('string', GraphQLString),
    ('boolean', GraphQLBoolean),
    ('json_array', GraphQLString),
    ('date', GraphQLString), ('datetime', GraphQLString), ('time', GraphQLString),
])
def test_scalar_types(table, key, expected):
    assert table[key].type is expected


def test_array_is_list_of_strings(table):
    array_type = table['array'].type
    assert isinstance(array_type, GraphQLList)
    assert array_type.of_type is GraphQLString


def test_plain_types_use_identity(table):
    for key in ('integer', 'string', 'boolean', 'array', 'float'):
        assert table[key].eval is identity


def test_default_eval_is_identity():
    mapping = ScalarMapping(GraphQLInt)
    assert mapping.eval(5) == 5


def test_json_is_compact_and_keeps_null(table):
    encode = table['json_array'].eval
    assert encode({"a": 1}) == '{"a":1}'
    assert encode([1, "x"]) == '[1,"x"]'
    assert encode(None) is None
    assert encode_json({}) == '{}'


def test_dates_format_and_keep_null(table):
    fmt = table['datetime'].eval
    assert fmt(datetime(2024, 1, 2, 3, 4, 5)) == '2024-01-02 03:04:05'
    assert table['date'].eval(date(2024, 1, 2)) == '2024-01-02 00:00:00'
    assert table['time'].eval(time(13, 45, 7)) == '1970-01-01 13:45:07'
    assert fmt(None) is None
    assert format_datetime(None) is None


def test_enum_and_uuid_coercion(table):
    class Color(Enum):
        RED = 'red'

    assert table['enum'].eval(Color.RED) == 'red'
    assert table['enum'].eval(None) is None
    uid = UUID('12345678-1234-5678-1234-567812345678')
    assert table['uuid'].eval(uid) == '12345678-1234-5678-1234-567812345678'
    assert table['uuid'].eval(None) is None


def test_unmapped_lookup_returns_none(table):
    assert lookup_scalar(table, 'binary') is None
    assert lookup_scalar(table, None) is None
    assert lookup_scalar(table, object) is None
    assert lookup_scalar(table, 'integer') is table['integer']


def test_bigint_survives_execution(table):
    bigint = table['bigint']
    counter_type = GraphQLObjectType('Counter', {
        'hits': GraphQLField(bigint.type, resolve=FieldResolver(bigint.eval, field_key='hits')),
    })
    schema = GraphQLSchema(GraphQLObjectType('Query', {
        'counter': GraphQLField(counter_type, resolve=lambda *_: Counter(5_000_000_000)),
    }))
    result = graphql_sync(schema, '{ counter { hits } }')
    assert result.errors is None
    assert result.data == {'counter': {'hits': '5000000000'}}
    assert bigint.eval(None) is None
