"""Runtime value extraction for a single generated field.

A :class:`FieldResolver` is bound into every field the mapper builds. At query
time it picks the value either from an explicitly registered method or from the
conventional ``get<FieldName>`` accessor, then applies the field's coercion.
To-many collections handed out by the ORM are materialised once and coerced
element by element.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm.collections import collection_adapter
from sqlalchemy.orm.dynamic import AppenderMixin

from .naming import accessor_name, from_camel
from .scalars import identity

__all__ = [
    'AccessorLookup',
    'convention_accessor',
    'attribute_accessor',
    'is_deferred_collection',
    'materialize_collection',
    'FieldResolver',
]

AccessorLookup = Callable[[Any, str], Optional[Callable[[], Any]]]


def convention_accessor(value: Any, field_key: str) -> Optional[Callable[[], Any]]:
    """Return ``value.get<FieldKey>`` when it exists and is callable."""
    if value is None:
        return None
    fn = getattr(value, accessor_name(field_key), None)
    return fn if callable(fn) else None


def attribute_accessor(value: Any, field_key: str) -> Optional[Callable[[], Any]]:
    """Convention accessor first, then the plain attribute named by the key.

    Suited to ORM models that expose columns as attributes instead of getters.
    """
    fn = convention_accessor(value, field_key)
    if fn is not None or value is None:
        return fn
    for attr in (field_key, from_camel(field_key)):
        if hasattr(value, attr):
            return lambda attr=attr: getattr(value, attr)
    return None


def is_deferred_collection(value: Any) -> bool:
    """True for ORM-managed to-many collections (instrumented or dynamic)."""
    if value is None or isinstance(value, (str, bytes)):
        return False
    if isinstance(value, AppenderMixin):
        return True
    return _adapter_for(value) is not None


def _adapter_for(value: Any) -> Any:
    try:
        return collection_adapter(value)
    except AttributeError:
        return None


def materialize_collection(value: Any) -> List[Any]:
    adapter = _adapter_for(value) if not isinstance(value, AppenderMixin) else None
    if adapter is not None:
        return list(adapter)
    return list(value)


class FieldResolver:
    """Resolve one field of a generated type.

    Args:
        eval: Coercion applied to the raw value (per element for collections).
        resolver: Registered method; called as ``resolver(receiver, **args)``.
        proxy: Wraps the parent value before any access; only the receiver
            changes, never the method that gets invoked.
        accessor_lookup: Finds the default accessor on the receiver.
        many: The field is a list of scalars, coerce each element.
        field_key: Key used for the accessor convention when called by
            graphql-core.
    """

    def __init__(
        self,
        eval: Callable[[Any], Any] = identity,
        *,
        resolver: Optional[Callable[..., Any]] = None,
        proxy: Optional[Callable[[Any], Any]] = None,
        accessor_lookup: AccessorLookup = convention_accessor,
        many: bool = False,
        field_key: Optional[str] = None,
    ):
        self.eval = eval
        self.resolver = resolver
        self.proxy = proxy
        self.accessor_lookup = accessor_lookup
        self.many = many
        self.field_key = field_key

    def __call__(self, parent: Any, info: Any, **args: Any) -> Any:
        key = self.field_key or getattr(info, 'field_name', '')
        return self.resolve(parent, key, args)

    def resolve(self, parent: Any, field_key: str, args: Optional[Dict[str, Any]] = None) -> Any:
        raw = self._raw_value(parent, field_key, args or {})
        if is_deferred_collection(raw):
            return [self.eval(item) for item in materialize_collection(raw)]
        if self.many and _is_plain_iterable(raw):
            return [self.eval(item) for item in raw]
        return self.eval(raw)

    def _raw_value(self, parent: Any, field_key: str, args: Dict[str, Any]) -> Any:
        receiver = self.proxy(parent) if self.proxy is not None else parent
        if self.resolver is not None:
            return self.resolver(receiver, **args)
        accessor = self.accessor_lookup(receiver, field_key)
        if accessor is None:
            return None
        return accessor()


def _is_plain_iterable(value: Any) -> bool:
    if value is None or isinstance(value, (str, bytes, dict)):
        return False
    return isinstance(value, Iterable)
