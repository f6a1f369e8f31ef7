"""Entity metadata: what the mapper needs to know about a persisted class.

The mapper asks a :class:`MetadataProvider` whether a class is an entity and
for its scalar fields and associations. The default provider reads SQLAlchemy
mapper inspection data; descriptors are built on every call and not cached.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Tuple, runtime_checkable

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import types as sqltypes
from sqlalchemy.orm import Mapper

from .core.naming import import_class, qualified_name
from .errors import InvalidEntityError

__all__ = [
    'Cardinality',
    'ScalarField',
    'Association',
    'EntityDescriptor',
    'MetadataProvider',
    'SQLAlchemyMetadataProvider',
    'storage_type_key',
    'STORAGE_TYPE_INFO_KEY',
]

logger = logging.getLogger(__name__)

STORAGE_TYPE_INFO_KEY = 'storage_type'


class Cardinality(str, enum.Enum):
    SINGLE = 'single'
    LIST = 'list'


@dataclass(frozen=True)
class ScalarField:
    name: str
    storage_type: str


@dataclass(frozen=True)
class Association:
    name: str
    target: str
    cardinality: Cardinality = Cardinality.SINGLE

    @property
    def is_list(self) -> bool:
        return self.cardinality is Cardinality.LIST


@dataclass(frozen=True)
class EntityDescriptor:
    class_name: str
    scalar_fields: Tuple[ScalarField, ...] = ()
    associations: Tuple[Association, ...] = ()


@runtime_checkable
class MetadataProvider(Protocol):
    def is_entity(self, class_name: str) -> bool: ...

    def get_descriptor(self, class_name: str) -> EntityDescriptor: ...

    def resolve_class(self, class_name: str) -> Optional[type]: ...


# Checked in order; subclasses must come before their bases (Enum is a String, Float a Numeric, ...)
_STORAGE_KEYS: Tuple[Tuple[type, str], ...] = (
    (sqltypes.Boolean, 'boolean'),
    (sqltypes.SmallInteger, 'smallint'),
    (sqltypes.BigInteger, 'bigint'),
    (sqltypes.Integer, 'integer'),
    (sqltypes.Float, 'float'),
    (sqltypes.Numeric, 'decimal'),
    (sqltypes.Enum, 'enum'),
    (sqltypes.Text, 'text'),
    (sqltypes.String, 'string'),
    (sqltypes.Uuid, 'uuid'),
    (sqltypes.ARRAY, 'array'),
    (sqltypes.JSON, 'json_array'),
    (sqltypes.DateTime, 'datetime'),
    (sqltypes.Date, 'date'),
    (sqltypes.Time, 'time'),
)


def storage_type_key(sqlatype: Any) -> str:
    """Map a SQLAlchemy column type to a storage type key.

    ``TypeDecorator`` types are unwrapped to their ``impl``. Types with no known
    key yield their lower-cased class name, which the scalar table then rejects.
    """
    if isinstance(sqlatype, sqltypes.TypeDecorator):
        inner = getattr(sqlatype, 'impl', None)
        if inner is not None and inner is not sqlatype:
            return storage_type_key(inner)
    for sa_type, key in _STORAGE_KEYS:
        if isinstance(sqlatype, sa_type):
            return key
    return type(sqlatype).__name__.lower()


class SQLAlchemyMetadataProvider:
    """MetadataProvider over SQLAlchemy declarative mappings.

    Args:
        base: Optional declarative base (or ``registry``). When given, class
            names are resolved against its mappers before falling back to import.
    """

    def __init__(self, base: Any = None):
        self._registry = getattr(base, 'registry', base)

    def resolve_class(self, class_name: str) -> Optional[type]:
        if self._registry is not None:
            for mapper in getattr(self._registry, 'mappers', ()):
                if qualified_name(mapper.class_) == class_name:
                    return mapper.class_
        return import_class(class_name)

    def _mapper(self, class_name: str) -> Optional[Mapper]:
        cls = self.resolve_class(class_name)
        if cls is None:
            return None
        insp = sa_inspect(cls, raiseerr=False)
        return insp if isinstance(insp, Mapper) else None

    def is_entity(self, class_name: str) -> bool:
        return self._mapper(class_name) is not None

    def get_descriptor(self, class_name: str) -> EntityDescriptor:
        mapper = self._mapper(class_name)
        if mapper is None:
            raise InvalidEntityError(class_name, 'No mapping information to process.')
        scalars = []
        for prop in mapper.column_attrs:
            column = prop.columns[0]
            info = getattr(column, 'info', None) or {}
            key = info.get(STORAGE_TYPE_INFO_KEY) or storage_type_key(column.type)
            scalars.append(ScalarField(prop.key, key))
        associations = []
        for rel in mapper.relationships:
            cardinality = Cardinality.LIST if rel.uselist else Cardinality.SINGLE
            associations.append(Association(rel.key, qualified_name(rel.mapper.class_), cardinality))
        logger.debug(
            "descriptor for %s: %d scalar fields, %d associations",
            class_name, len(scalars), len(associations),
        )
        return EntityDescriptor(class_name, tuple(scalars), tuple(associations))
