"""Get-or-create cache of schema types for one build session.

The registry is what makes recursive mapping terminate: a type's shell is
stored under its name before anybody forces its fields, so a cycle that comes
back to the same entity finds the shell instead of building a second type.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .errors import MissingRegistryError

__all__ = ['TypeRegistry', 'InMemoryTypeRegistry', 'CallbackTypeRegistry']

logger = logging.getLogger(__name__)

TypeGenerator = Callable[[str], Any]


class TypeRegistry:
    """Base registry: ``get_or_create`` on top of ``lookup``/``register``.

    Not synchronised; concurrent builds sharing one registry need external locking.
    """

    def lookup(self, name: str) -> Optional[Any]:
        raise NotImplementedError

    def register(self, name: str, schema_type: Any) -> None:
        raise NotImplementedError

    def get_or_create(self, name: str, generator: TypeGenerator) -> Any:
        existing = self.lookup(name)
        if existing is not None:
            return existing
        # Generator failures propagate before anything is stored
        schema_type = generator(name)
        self.register(name, schema_type)
        logger.debug("registered type shell %s", name)
        return schema_type

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def discard(self, names: Iterable[str]) -> None:
        """Forget types; used to roll back a failed build."""
        raise NotImplementedError

    def names(self) -> List[str]:
        raise NotImplementedError

    def clear(self) -> None:
        """Start a new build session."""
        raise NotImplementedError


class InMemoryTypeRegistry(TypeRegistry):
    def __init__(self, types: Optional[Dict[str, Any]] = None):
        self._types: Dict[str, Any] = dict(types or {})

    def lookup(self, name: str) -> Optional[Any]:
        return self._types.get(name)

    def register(self, name: str, schema_type: Any) -> None:
        if name in self._types:
            raise ValueError(f"Type {name!r} is already registered")
        self._types[name] = schema_type

    def discard(self, names: Iterable[str]) -> None:
        for name in names:
            self._types.pop(name, None)

    def names(self) -> List[str]:
        return list(self._types)

    def clear(self) -> None:
        self._types.clear()

    def __len__(self) -> int:
        return len(self._types)

    def __getitem__(self, name: str) -> Any:
        return self._types[name]


class CallbackTypeRegistry(TypeRegistry):
    """Registry backed by an external lookup/register pair.

    Lets a larger schema-composition tool own the storage. ``lookup`` reports a
    miss by returning None or raising ``LookupError`` (KeyError included).
    """

    def __init__(
        self,
        lookup: Optional[Callable[[str], Any]] = None,
        register: Optional[Callable[[str, Any], None]] = None,
        *,
        unregister: Optional[Callable[[str], None]] = None,
    ):
        self._lookup = lookup
        self._register = register
        self._unregister = unregister
        self._seen: List[str] = []

    def _ensure(self) -> None:
        if not callable(self._lookup) or not callable(self._register):
            raise MissingRegistryError("Please define a registry first: both lookup and register are required")

    def lookup(self, name: str) -> Optional[Any]:
        self._ensure()
        try:
            return self._lookup(name)  # type: ignore[misc]
        except LookupError:
            return None

    def register(self, name: str, schema_type: Any) -> None:
        self._ensure()
        self._register(name, schema_type)  # type: ignore[misc]
        self._seen.append(name)

    def discard(self, names: Iterable[str]) -> None:
        """Unregister types; without ``unregister`` the external store keeps them."""
        if self._unregister is None:
            return
        names = list(names)
        for name in names:
            self._unregister(name)
        self._seen = [n for n in self._seen if n not in names]

    def names(self) -> List[str]:
        return list(self._seen)

    def clear(self) -> None:
        self.discard(list(self._seen))
        self._seen = []
