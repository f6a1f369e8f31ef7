"""Storage type key -> (schema scalar type, coercion) table.

The keys are the storage type names reported by the metadata provider (see
:func:`entityql.metadata.storage_type_key`). ``eval`` converts a raw stored value
into what the schema scalar expects and defaults to identity.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..types import SchemaTypeLibrary

__all__ = [
    'DATE_FORMAT',
    'SCALAR_TYPE_KEYS',
    'ScalarMapping',
    'identity',
    'format_datetime',
    'encode_json',
    'enum_value',
    'stringify',
    'build_scalar_table',
    'lookup_scalar',
]

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
_EPOCH = date(1970, 1, 1)


def identity(value: Any) -> Any:
    return value


def format_datetime(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, time):
        value = datetime.combine(_EPOCH, value)
    return value.strftime(DATE_FORMAT)


def enum_value(value: Any) -> Any:
    if value is None:
        return None
    return getattr(value, 'value', value)


def stringify(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def encode_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, separators=(',', ':'))


@dataclass(frozen=True)
class ScalarMapping:
    """Schema type for a storage type plus the coercion applied to raw values."""

    type: Any
    eval: Callable[[Any], Any] = field(default=identity)


SCALAR_TYPE_KEYS = (
    'smallint', 'integer', 'bigint',
    'float', 'decimal',
    'text', 'string', 'enum', 'uuid',
    'boolean',
    'array',
    'json_array',
    'date', 'datetime', 'time',
)


def build_scalar_table(library: 'SchemaTypeLibrary') -> Dict[str, ScalarMapping]:
    int_t = ScalarMapping(library.int())
    float_t = ScalarMapping(library.float())
    string_t = ScalarMapping(library.string())
    date_t = ScalarMapping(library.string(), format_datetime)
    return {
        'smallint': int_t,
        'integer': int_t,
        # GraphQL Int is 32-bit
        'bigint': ScalarMapping(library.string(), stringify),
        'float': float_t,
        'decimal': float_t,
        'text': string_t,
        'string': string_t,
        'enum': ScalarMapping(library.string(), enum_value),
        'uuid': ScalarMapping(library.string(), stringify),
        'boolean': ScalarMapping(library.boolean()),
        'array': ScalarMapping(library.list_of(library.string())),
        'json_array': ScalarMapping(library.string(), encode_json),
        'date': date_t,
        'datetime': date_t,
        'time': date_t,
    }


def lookup_scalar(table: Dict[str, ScalarMapping], key: Any) -> Optional[ScalarMapping]:
    if not isinstance(key, str):
        return None
    return table.get(key)
