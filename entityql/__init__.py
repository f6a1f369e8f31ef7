"""entityql: GraphQL object types generated from persisted entity classes.

Public API:
- build_schema_type, SchemaMapper, MapperConfig
- register_field, blacklist (entity-side markers)
- TypeRegistry implementations and the error hierarchy
"""
from .config import MapperConfig, UnmappedTypePolicy
from .core.fields import ArgumentSpec, FieldRegistration, register_field, blacklist
from .core.resolution import attribute_accessor, convention_accessor
from .errors import (
    EntityQLError,
    ConfigurationError,
    InvalidEntityError,
    UnmappedStorageTypeError,
    UnresolvableRegisteredTypeError,
    DuplicateTypeNameError,
    MissingRegistryError,
)
from .mapper import SchemaMapper, build_schema_type
from .registry import TypeRegistry, InMemoryTypeRegistry, CallbackTypeRegistry

__all__ = [
    'build_schema_type', 'SchemaMapper', 'MapperConfig', 'UnmappedTypePolicy',
    'register_field', 'blacklist', 'ArgumentSpec', 'FieldRegistration',
    'attribute_accessor', 'convention_accessor',
    'TypeRegistry', 'InMemoryTypeRegistry', 'CallbackTypeRegistry',
    'EntityQLError', 'ConfigurationError', 'InvalidEntityError', 'UnmappedStorageTypeError',
    'UnresolvableRegisteredTypeError', 'DuplicateTypeNameError', 'MissingRegistryError',
]
