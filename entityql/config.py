from __future__ import annotations

import dataclasses
import enum
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .annotations import AnnotationSource, DeclarativeAnnotationSource
from .core.naming import NameConverter, to_camel
from .core.resolution import AccessorLookup, convention_accessor
from .metadata import MetadataProvider, SQLAlchemyMetadataProvider
from .registry import InMemoryTypeRegistry, TypeRegistry
from .types import GraphQLTypeLibrary, SchemaTypeLibrary

__all__ = ['UnmappedTypePolicy', 'MapperConfig', 'ENV_UNMAPPED_TYPES', 'ENV_AUTO_CAMEL_CASE']

ENV_UNMAPPED_TYPES = 'ENTITYQL_UNMAPPED_TYPES'
ENV_AUTO_CAMEL_CASE = 'ENTITYQL_AUTO_CAMEL_CASE'

_TRUTHY = ('1', 'true', 'yes', 'on')


class UnmappedTypePolicy(str, enum.Enum):
    """What to do with a scalar field whose storage type has no mapping."""

    RAISE = 'raise'
    OMIT = 'omit'


@dataclass
class MapperConfig:
    """Collaborators and switches for one schema build session.

    Attributes:
        metadata: Entity metadata source (SQLAlchemy mappings by default).
        annotations: Field registration / blacklist source.
        library: Schema type constructors (graphql-core by default).
        registry: Type cache shared by the whole build; pass your own to
            pre-seed it or to back it with an external store.
        proxy: Wraps every parent value before a field reads from it
            (authorization, logging, ...).
        accessor_lookup: Finds the default accessor for a field on a value.
        auto_camel_case: Convert field keys to lowerCamelCase before merging.
        name_converter: Explicit key converter; takes precedence over
            ``auto_camel_case`` when given.
        unmapped_types: Policy for scalar fields with an unknown storage type.
    """

    metadata: MetadataProvider = field(default_factory=SQLAlchemyMetadataProvider)
    annotations: AnnotationSource = field(default_factory=DeclarativeAnnotationSource)
    library: SchemaTypeLibrary = field(default_factory=GraphQLTypeLibrary)
    registry: TypeRegistry = field(default_factory=InMemoryTypeRegistry)
    proxy: Optional[Callable[[Any], Any]] = None
    accessor_lookup: AccessorLookup = convention_accessor
    auto_camel_case: bool = True
    name_converter: NameConverter = None
    unmapped_types: UnmappedTypePolicy = UnmappedTypePolicy.RAISE

    def __post_init__(self) -> None:
        self.unmapped_types = UnmappedTypePolicy(self.unmapped_types)

    @classmethod
    def from_env(cls, **overrides: Any) -> 'MapperConfig':
        """Build a config from ``ENTITYQL_*`` environment variables plus overrides."""
        env: dict[str, Any] = {}
        policy = os.getenv(ENV_UNMAPPED_TYPES)
        if policy and policy.strip():
            env['unmapped_types'] = UnmappedTypePolicy(policy.strip().lower())
        camel = os.getenv(ENV_AUTO_CAMEL_CASE)
        if camel is not None and camel.strip():
            env['auto_camel_case'] = camel.strip().lower() in _TRUTHY
        env.update(overrides)
        return cls(**env)

    def with_overrides(self, **overrides: Any) -> 'MapperConfig':
        return dataclasses.replace(self, **overrides)

    def field_key(self, name: str) -> str:
        """Normalised key for a scalar, association or registered field name."""
        if callable(self.name_converter):
            return self.name_converter(name)
        if self.auto_camel_case:
            return to_camel(name)
        return name
