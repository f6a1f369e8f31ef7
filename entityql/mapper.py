"""Recursive entity -> schema type mapping.

``SchemaMapper.map_entity`` produces one object type per entity class. The type
is created as a shell whose fields are a :class:`FieldThunk`; the shell goes into
the registry before the thunk ever runs, so associations that lead back to an
entity already being mapped resolve to the registered shell.

Field sources are merged by a fixed rule, see :data:`FIELD_SOURCE_PRECEDENCE`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from .config import MapperConfig, UnmappedTypePolicy
from .core.naming import qualified_name, unqualified_name
from .core.registrar import ExtendedFieldRegistrar, ResolvedRegistration
from .core.resolution import FieldResolver
from .core.scalars import build_scalar_table, identity, lookup_scalar
from .errors import DuplicateTypeNameError, InvalidEntityError, UnmappedStorageTypeError
from .metadata import EntityDescriptor
from .registry import TypeRegistry

__all__ = [
    'FIELD_SOURCE_PRECEDENCE',
    'FieldSpec',
    'FieldThunk',
    'merge_field_sources',
    'SchemaMapper',
    'build_schema_type',
]

# Project logger
_logger = logging.getLogger("entityql")

SCALAR_SOURCE = 'scalar'
ASSOCIATION_SOURCE = 'association'
EXTENDED_SOURCE = 'extended'

# Later sources overwrite earlier ones on key collision: a registered field always wins.
FIELD_SOURCE_PRECEDENCE: Tuple[str, ...] = (SCALAR_SOURCE, ASSOCIATION_SOURCE, EXTENDED_SOURCE)


@dataclass
class FieldSpec:
    """Library independent description of one generated field."""

    key: str
    type: Any
    resolve: FieldResolver
    args: Optional[Tuple[Tuple[str, Any, str], ...]] = None
    description: str = ''
    source: str = SCALAR_SOURCE


def merge_field_sources(sources: Mapping[str, Mapping[str, FieldSpec]]) -> Dict[str, FieldSpec]:
    """Merge per-source field maps following :data:`FIELD_SOURCE_PRECEDENCE`."""
    merged: Dict[str, FieldSpec] = {}
    for source in FIELD_SOURCE_PRECEDENCE:
        for key, spec in (sources.get(source) or {}).items():
            previous = merged.get(key)
            if previous is not None:
                _logger.debug("field %s: %s definition overrides %s", key, source, previous.source)
            merged[key] = spec
    return merged


class FieldThunk:
    """Once-computed cell holding the field map of a type.

    Handed to the type library as the type's ``fields``; nothing is computed
    until the first call. A failed computation is not cached.
    """

    def __init__(self, type_name: str, compute: Callable[[], Dict[str, Any]]):
        self.type_name = type_name
        self._compute = compute
        self._fields: Optional[Dict[str, Any]] = None

    @property
    def forced(self) -> bool:
        return self._fields is not None

    def force(self) -> Dict[str, Any]:
        if self._fields is None:
            _logger.debug("resolving fields of %s", self.type_name)
            self._fields = self._compute()
        return self._fields

    def __call__(self) -> Dict[str, Any]:
        return self.force()


class SchemaMapper:
    """Builds schema types for entity classes, one type per class per session.

    Args:
        config: Collaborators and switches; a default :class:`MapperConfig`
            (SQLAlchemy + graphql-core) when omitted.
        **overrides: Replace individual config attributes.
    """

    def __init__(self, config: Optional[MapperConfig] = None, **overrides: Any):
        config = config or MapperConfig()
        if overrides:
            config = config.with_overrides(**overrides)
        self.config = config
        self.library = config.library
        self.metadata = config.metadata
        self.scalar_table = build_scalar_table(self.library)
        self.registrar = ExtendedFieldRegistrar(config.annotations, self.scalar_table, self.metadata.resolve_class)
        self._thunks: Dict[str, FieldThunk] = {}
        self._class_names: Dict[str, str] = {}

    @property
    def registry(self) -> TypeRegistry:
        return self.config.registry

    # ---------- public API ----------
    def build(self, root: Any, *, eager: bool = True) -> Any:
        """Return the schema type for ``root`` (class or qualified class name).

        With ``eager`` every type reachable from the root has its fields
        computed before returning, so configuration errors surface here. When
        that fails, types registered by this call are dropped again.
        """
        before = set(self.registry.names())
        try:
            root_type = self.map_entity(root)
            if eager:
                self.force_all()
        except Exception:
            self._rollback([n for n in self.registry.names() if n not in before])
            raise
        return root_type

    def map_entity(self, entity: Any) -> Any:
        class_name = qualified_name(entity)
        if not self.metadata.is_entity(class_name):
            raise InvalidEntityError(class_name)
        type_name = unqualified_name(class_name)
        owner = self._class_names.setdefault(type_name, class_name)
        if owner != class_name:
            raise DuplicateTypeNameError(type_name, owner, class_name)
        return self.registry.get_or_create(type_name, lambda name: self._generate(name, class_name))

    def force_all(self) -> None:
        """Compute the fields of every type created so far, transitively."""
        pending = [t for t in self._thunks.values() if not t.forced]
        while pending:
            for thunk in pending:
                thunk.force()
            pending = [t for t in self._thunks.values() if not t.forced]

    def reset(self) -> None:
        """Start a new build session with an empty registry."""
        self.registry.clear()
        self._thunks.clear()
        self._class_names.clear()

    # ---------- type generation ----------
    def _generate(self, type_name: str, class_name: str) -> Any:
        thunk = FieldThunk(type_name, lambda: self._build_fields(class_name))
        self._thunks[type_name] = thunk
        return self.library.object_type(type_name, type_name, thunk)

    def _build_fields(self, class_name: str) -> Dict[str, Any]:
        descriptor = self.metadata.get_descriptor(class_name)
        entity_class = self.metadata.resolve_class(class_name)
        if entity_class is None:
            raise InvalidEntityError(class_name)
        blacklisted, registrations = self.registrar.discover(entity_class)
        merged = merge_field_sources({
            SCALAR_SOURCE: self._scalar_fields(descriptor, blacklisted),
            ASSOCIATION_SOURCE: self._association_fields(descriptor, blacklisted),
            EXTENDED_SOURCE: self._extended_fields(registrations),
        })
        return {key: self._to_library_field(spec) for key, spec in merged.items()}

    def _scalar_fields(self, descriptor: EntityDescriptor, blacklisted: FrozenSet[str]) -> Dict[str, FieldSpec]:
        fields: Dict[str, FieldSpec] = {}
        for scalar in descriptor.scalar_fields:
            if scalar.name in blacklisted:
                continue
            mapping = lookup_scalar(self.scalar_table, scalar.storage_type)
            if mapping is None:
                if self.config.unmapped_types is UnmappedTypePolicy.RAISE:
                    raise UnmappedStorageTypeError(
                        scalar.storage_type, class_name=descriptor.class_name, field_name=scalar.name
                    )
                _logger.warning(
                    "omitting field %s of %s: storage type %r is not mapped",
                    scalar.name, descriptor.class_name, scalar.storage_type,
                )
                continue
            key = self.config.field_key(scalar.name)
            fields[key] = FieldSpec(key, mapping.type, self._resolver(mapping.eval, field_key=scalar.name))
        return fields

    def _association_fields(self, descriptor: EntityDescriptor, blacklisted: FrozenSet[str]) -> Dict[str, FieldSpec]:
        fields: Dict[str, FieldSpec] = {}
        for association in descriptor.associations:
            if association.name in blacklisted:
                continue
            target_type = self._map_target(association.target, association.is_list)
            if target_type is None:
                continue
            key = self.config.field_key(association.name)
            fields[key] = FieldSpec(
                key, target_type, self._resolver(identity, field_key=association.name), source=ASSOCIATION_SOURCE
            )
        return fields

    def _extended_fields(self, registrations: Sequence[ResolvedRegistration]) -> Dict[str, FieldSpec]:
        fields: Dict[str, FieldSpec] = {}
        for resolved in registrations:
            registration = resolved.registration
            # (schema name, type, keyword the resolver receives)
            args = tuple(
                (
                    self.config.field_key(arg.name),
                    arg.mapping.type if arg.nullable else self.library.non_null(arg.mapping.type),
                    arg.name,
                )
                for arg in resolved.args
            )
            if resolved.scalar is not None:
                field_type = resolved.scalar.type
                if registration.is_list:
                    field_type = self.library.list_of(field_type)
                resolver = self._resolver(
                    resolved.scalar.eval, resolver=registration.resolver, many=registration.is_list,
                    field_key=registration.name,
                )
            else:
                field_type = self._map_target(resolved.target, registration.is_list)
                if field_type is None:
                    continue
                resolver = self._resolver(identity, resolver=registration.resolver, field_key=registration.name)
            key = self.config.field_key(registration.name)
            fields[key] = FieldSpec(
                key, field_type, resolver, args=args,
                description=registration.description, source=EXTENDED_SOURCE,
            )
        return fields

    def _map_target(self, class_name: Optional[str], is_list: bool) -> Optional[Any]:
        """Schema type for an association target; None when it is not an entity."""
        try:
            target_type = self.map_entity(class_name)
        except InvalidEntityError as exc:
            _logger.debug("skipping association to %s: %s", class_name, exc)
            return None
        return self.library.list_of(target_type) if is_list else target_type

    def _resolver(
        self,
        eval: Callable[[Any], Any],
        *,
        field_key: str,
        resolver: Optional[Callable[..., Any]] = None,
        many: bool = False,
    ) -> FieldResolver:
        return FieldResolver(
            eval,
            resolver=resolver,
            proxy=self.config.proxy,
            accessor_lookup=self.config.accessor_lookup,
            many=many,
            field_key=field_key,
        )

    def _to_library_field(self, spec: FieldSpec) -> Any:
        return self.library.field(spec.type, resolve=spec.resolve, args=spec.args, description=spec.description)

    def _rollback(self, names: List[str]) -> None:
        if not names:
            return
        _logger.debug("discarding types of failed build: %s", names)
        self.registry.discard(names)
        for name in names:
            if name in self.registry:
                # Still published; its pending fields must fail again on the next build
                _logger.warning("registry kept type %s of a failed build", name)
                continue
            self._thunks.pop(name, None)
            self._class_names.pop(name, None)


def build_schema_type(root: Any, config: Optional[MapperConfig] = None, **overrides: Any) -> Any:
    """Build the schema type graph rooted at ``root`` and return the root type.

    ``config.registry`` (exposed as the mapper's ``registry``) holds every type
    created along the way.
    """
    return SchemaMapper(config, **overrides).build(root)
