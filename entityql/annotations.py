"""Source of field registrations and blacklist markers for entity classes.

The mapper does not inspect classes for markers itself; it asks an
``AnnotationSource``. :class:`DeclarativeAnnotationSource` understands the
markers this package provides:

* ``@register_field(...)`` on methods (or property getters),
* ``__blacklist__ = ("password", ...)`` on the class or a base,
* ``info={"blacklist": True}`` on ``Column``/``mapped_column``/``relationship``,
  usually set through :func:`entityql.core.fields.blacklist`.
"""
from __future__ import annotations

from typing import Any, Dict, List, Protocol, Set, runtime_checkable

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper

from .core.fields import BLACKLIST_INFO_KEY, REGISTRATION_ATTR, FieldRegistration

__all__ = ['AnnotationSource', 'DeclarativeAnnotationSource', 'BLACKLIST_CLASS_ATTR']

BLACKLIST_CLASS_ATTR = '__blacklist__'


@runtime_checkable
class AnnotationSource(Protocol):
    def get_field_registrations(self, entity_class: type) -> List[FieldRegistration]: ...

    def get_blacklisted_fields(self, entity_class: type) -> List[str]: ...


def _registration_of(owner: type, attr: str, member: Any) -> FieldRegistration | None:
    if isinstance(member, (staticmethod, classmethod)):
        if getattr(member.__func__, REGISTRATION_ATTR, None) is not None:
            raise TypeError(f"{owner.__qualname__}.{attr}: registered fields must be instance methods or properties")
        return None
    if isinstance(member, property):
        member = member.fget
    return getattr(member, REGISTRATION_ATTR, None)


class DeclarativeAnnotationSource:
    def get_field_registrations(self, entity_class: type) -> List[FieldRegistration]:
        # Keyed by attribute so an override in a subclass replaces (or removes) the base registration
        found: Dict[str, FieldRegistration] = {}
        for klass in reversed(entity_class.__mro__):
            if klass is object:
                continue
            for attr, member in vars(klass).items():
                registration = _registration_of(klass, attr, member)
                if registration is not None:
                    found[attr] = registration
                elif attr in found:
                    del found[attr]
        return list(found.values())

    def get_blacklisted_fields(self, entity_class: type) -> List[str]:
        names: List[str] = []
        seen: Set[str] = set()

        def add(name: str) -> None:
            if name not in seen:
                seen.add(name)
                names.append(name)

        for klass in reversed(entity_class.__mro__):
            for name in vars(klass).get(BLACKLIST_CLASS_ATTR, ()) or ():
                add(name)
        mapper = sa_inspect(entity_class, raiseerr=False)
        if isinstance(mapper, Mapper):
            for prop in mapper.column_attrs:
                if (prop.info or {}).get(BLACKLIST_INFO_KEY) or any(
                    (getattr(col, 'info', None) or {}).get(BLACKLIST_INFO_KEY) for col in prop.columns
                ):
                    add(prop.key)
            for rel in mapper.relationships:
                if (rel.info or {}).get(BLACKLIST_INFO_KEY):
                    add(rel.key)
        return names
