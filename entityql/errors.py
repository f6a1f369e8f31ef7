"""Exception hierarchy for entityql.

Every failure raised while mapping entities derives from :class:`EntityQLError`.
Mapping problems are configuration errors to be fixed by the entity author, so
they also subclass ``ValueError`` like the rest of the GraphQL layer does.
"""
from __future__ import annotations

__all__ = [
    'EntityQLError',
    'ConfigurationError',
    'InvalidEntityError',
    'UnmappedStorageTypeError',
    'UnresolvableRegisteredTypeError',
    'DuplicateTypeNameError',
    'MissingRegistryError',
]


class EntityQLError(Exception):
    """Base class for all entityql errors."""


class ConfigurationError(EntityQLError, ValueError):
    """The entity graph or the mapper setup is invalid."""


class InvalidEntityError(ConfigurationError):
    """A class is not a mapped persistence entity."""

    def __init__(self, class_name: str, reason: str | None = None):
        self.class_name = class_name
        msg = f"Class {class_name} is not a valid entity."
        if reason:
            msg = f"{msg} {reason}"
        super().__init__(msg)


class UnmappedStorageTypeError(ConfigurationError):
    """A storage type key has no entry in the scalar coercion table."""

    def __init__(self, type_key: str, *, class_name: str | None = None, field_name: str | None = None):
        self.type_key = type_key
        self.class_name = class_name
        self.field_name = field_name
        where = ''
        if class_name and field_name:
            where = f" (field {field_name} of {class_name})"
        elif class_name:
            where = f" (in {class_name})"
        super().__init__(f"The storage type {type_key!r} has not been mapped{where}.")


class UnresolvableRegisteredTypeError(ConfigurationError):
    """A registered field names a return class that cannot be found."""

    def __init__(self, target: str, declaring_class: str):
        self.target = target
        self.declaring_class = declaring_class
        super().__init__(f"{target} is not defined in {declaring_class}")


class DuplicateTypeNameError(ConfigurationError):
    """Two different classes would produce the same schema type name."""

    def __init__(self, type_name: str, first: str, second: str):
        self.type_name = type_name
        super().__init__(
            f"Type name {type_name!r} is produced by both {first} and {second}; "
            "entity class names must be unique across the schema."
        )


class MissingRegistryError(EntityQLError, RuntimeError):
    """The pluggable type registry is missing its lookup or register half."""
