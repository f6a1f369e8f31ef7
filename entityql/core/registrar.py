"""Discovery of extended fields and blacklisted names for an entity class."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple, TYPE_CHECKING

from ..errors import UnmappedStorageTypeError, UnresolvableRegisteredTypeError
from .fields import FieldRegistration
from .naming import import_class, is_qualified, namespace_of, qualified_name
from .scalars import ScalarMapping, lookup_scalar

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from ..annotations import AnnotationSource

__all__ = ['ResolvedArgument', 'ResolvedRegistration', 'ExtendedFieldRegistrar']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedArgument:
    name: str
    mapping: ScalarMapping
    nullable: bool


@dataclass(frozen=True)
class ResolvedRegistration:
    """A registration with its return type resolved.

    Exactly one of ``scalar`` (scalar return) and ``target`` (qualified class
    name of an associated entity) is set.
    """

    registration: FieldRegistration
    scalar: Optional[ScalarMapping]
    target: Optional[str]
    args: Tuple[ResolvedArgument, ...]


class ExtendedFieldRegistrar:
    """Turn raw annotation data into resolved registrations.

    Args:
        annotations: Where registrations and blacklist markers come from.
        scalar_table: Storage key -> ScalarMapping table.
        resolve_class: Finds a class by qualified name (None when missing).
    """

    def __init__(
        self,
        annotations: 'AnnotationSource',
        scalar_table: Dict[str, ScalarMapping],
        resolve_class: Callable[[str], Optional[type]] = import_class,
    ):
        self.annotations = annotations
        self.scalar_table = scalar_table
        self.resolve_class = resolve_class

    def discover(self, entity_class: type) -> Tuple[FrozenSet[str], List[ResolvedRegistration]]:
        blacklisted = frozenset(self.annotations.get_blacklisted_fields(entity_class))
        declaring = qualified_name(entity_class)
        resolved = [
            self._resolve(registration, declaring)
            for registration in self.annotations.get_field_registrations(entity_class)
        ]
        if blacklisted or resolved:
            logger.debug(
                "%s: %d registered fields, blacklisted=%s",
                declaring, len(resolved), sorted(blacklisted),
            )
        return blacklisted, resolved

    def _resolve(self, registration: FieldRegistration, declaring: str) -> ResolvedRegistration:
        args = tuple(self._resolve_argument(a.name, a.type, a.nullable, declaring) for a in registration.args)
        scalar = lookup_scalar(self.scalar_table, registration.type)
        if scalar is not None:
            return ResolvedRegistration(registration, scalar, None, args)
        target = self.return_class_name(registration.type, declaring)
        return ResolvedRegistration(registration, None, target, args)

    def _resolve_argument(self, name: str, type_key: str, nullable: bool, declaring: str) -> ResolvedArgument:
        mapping = lookup_scalar(self.scalar_table, type_key)
        if mapping is None:
            raise UnmappedStorageTypeError(type_key, class_name=declaring, field_name=name)
        return ResolvedArgument(name, mapping, nullable)

    def return_class_name(self, type_key: Any, declaring: str) -> str:
        """Qualified class name for a non-scalar return type key.

        Class objects are taken as-is, dotted names are already qualified, bare
        names are looked up in the declaring entity's module.
        """
        if isinstance(type_key, type):
            return qualified_name(type_key)
        key = str(type_key)
        if is_qualified(key):
            class_name = key
        else:
            class_name = f"{namespace_of(declaring)}.{key}" if namespace_of(declaring) else key
        if self.resolve_class(class_name) is None:
            raise UnresolvableRegisteredTypeError(class_name, declaring)
        return class_name
