"""Leaf building blocks: naming, scalar coercion, field markers, resolution."""
from .naming import upper_camel, accessor_name, from_camel, qualified_name, unqualified_name
from .scalars import ScalarMapping, build_scalar_table, lookup_scalar
from .fields import ArgumentSpec, FieldRegistration, register_field, blacklist
from .resolution import FieldResolver, convention_accessor, attribute_accessor, is_deferred_collection

__all__ = [
    'upper_camel', 'accessor_name', 'from_camel', 'qualified_name', 'unqualified_name',
    'ScalarMapping', 'build_scalar_table', 'lookup_scalar',
    'ArgumentSpec', 'FieldRegistration', 'register_field', 'blacklist',
    'FieldResolver', 'convention_accessor', 'attribute_accessor', 'is_deferred_collection',
]
