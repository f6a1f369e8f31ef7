from __future__ import annotations

import importlib
import re
from typing import Any, Callable, Optional

__all__ = [
    'NameConverter',
    'from_camel',
    'to_camel',
    'upper_camel',
    'accessor_name',
    'qualified_name',
    'unqualified_name',
    'namespace_of',
    'is_qualified',
    'import_class',
]

_camel_to_snake_pattern = re.compile(r'(?<!^)(?=[A-Z])')

NameConverter = Optional[Callable[[str], str]]

ACCESSOR_PREFIX = 'get'


def from_camel(name: str) -> str:
    """Convert lower/upper camelCase to snake_case."""
    if not name:
        return name
    return _camel_to_snake_pattern.sub('_', str(name)).lower()


def to_camel(name: str) -> str:
    """Convert snake_case to lowerCamelCase; names starting with "_" are kept as-is."""
    if not name or str(name).startswith("_"):
        return name
    parts = str(name).split('_')
    if not parts:
        return name
    return parts[0] + ''.join(p.capitalize() for p in parts[1:])


def upper_camel(name: str) -> str:
    """Convert snake_case or lowerCamelCase to UpperCamelCase.

    ``first_name`` and ``firstName`` both become ``FirstName``.
    """
    if not name:
        return name
    parts = [p for p in str(name).split('_') if p]
    return ''.join(p[0].upper() + p[1:] for p in parts)


def accessor_name(field_key: str) -> str:
    """Name of the conventional getter for a field (``first_name`` -> ``getFirstName``)."""
    return ACCESSOR_PREFIX + upper_camel(field_key)


def qualified_name(cls: Any) -> str:
    if isinstance(cls, str):
        return cls
    return f"{cls.__module__}.{cls.__qualname__}"


def unqualified_name(class_name: str) -> str:
    return class_name.rsplit('.', 1)[-1]


def namespace_of(class_name: str) -> str:
    if '.' not in class_name:
        return ''
    return class_name.rsplit('.', 1)[0]


def is_qualified(class_name: str) -> bool:
    return '.' in class_name


def import_class(class_name: str) -> Optional[type]:
    """Import a class from its dotted name; return None when it cannot be found.

    Nested classes are supported by trying progressively shorter module paths
    (``pkg.mod.Outer.Inner``).
    """
    parts = class_name.split('.')
    for split in range(len(parts) - 1, 0, -1):
        module_name = '.'.join(parts[:split])
        try:
            obj: Any = importlib.import_module(module_name)
        except ImportError:
            continue
        for attr in parts[split:]:
            obj = getattr(obj, attr, None)
            if obj is None:
                break
        if isinstance(obj, type):
            return obj
        return None
    return None
