from __future__ import annotations
from dataclasses import dataclass, field as dc_field
from typing import Any, Callable, Iterable, Optional, Tuple, Union

__all__ = [
    'REGISTRATION_ATTR',
    'BLACKLIST_INFO_KEY',
    'ArgumentSpec',
    'FieldRegistration',
    'register_field',
    'blacklist',
]

REGISTRATION_ATTR = '__entityql_field__'
BLACKLIST_INFO_KEY = 'blacklist'

NULLABLE_MARKER = 'nullable'


@dataclass(frozen=True)
class ArgumentSpec:
    """One declared argument of a registered field.

    Attributes:
        name: GraphQL argument name, passed to the resolver as a keyword.
        type: Scalar storage type key of the argument (e.g. ``"integer"``).
        nullable: Arguments are exposed as non-null unless this is set.
    """

    name: str
    type: str
    nullable: bool = False

    @classmethod
    def coerce(cls, raw: Any) -> 'ArgumentSpec':
        """Accept ``ArgumentSpec`` or ``(name, type[, "nullable" | bool])`` tuples."""
        if isinstance(raw, ArgumentSpec):
            return raw
        if isinstance(raw, (tuple, list)) and len(raw) in (2, 3):
            nullable = False
            if len(raw) == 3:
                flag = raw[2]
                nullable = flag is True or flag == NULLABLE_MARKER
            return cls(name=str(raw[0]), type=str(raw[1]), nullable=nullable)
        raise TypeError(f"Invalid argument declaration: {raw!r}")


@dataclass(frozen=True)
class FieldRegistration:
    """A field supplied by a method on the entity rather than by its metadata.

    Attributes:
        name: Field name; defaults to the declaring method's name.
        type: Return type key. Either a scalar storage key, an entity class, or
            an entity class name (dotted, or relative to the declaring module).
        is_list: The field returns a list of ``type``.
        args: Declared arguments, in order.
        resolver: The declaring method (plain function, receiver passed first).
        description: Optional field description.
    """

    name: str
    type: Any
    is_list: bool = False
    args: Tuple[ArgumentSpec, ...] = ()
    resolver: Optional[Callable[..., Any]] = dc_field(default=None, compare=False)
    description: str = ''


def register_field(
    type: Any,
    *,
    name: Optional[str] = None,
    is_list: bool = False,
    args: Iterable[Union[ArgumentSpec, tuple]] = (),
    description: str = '',
) -> Callable[[Any], Any]:
    """Expose an entity method (or property getter) as a schema field.

    Examples:
        class User(Base):
            @register_field('integer')
            def post_count(self): ...

            @register_field('Post', is_list=True, args=[('limit', 'integer', 'nullable')])
            def recent_posts(self, limit=None): ...

    The method keeps working as a normal method; the registration is attached
    to it and picked up by :class:`entityql.annotations.DeclarativeAnnotationSource`.
    """
    arg_specs = tuple(ArgumentSpec.coerce(a) for a in args)

    def deco(fn: Any) -> Any:
        if isinstance(fn, (staticmethod, classmethod)):
            raise TypeError(f"register_field needs an instance method or property, got {fn.__class__.__name__}")
        target = fn.fget if isinstance(fn, property) else fn
        if not callable(target):
            raise TypeError(f"register_field cannot decorate {fn!r}")
        registration = FieldRegistration(
            name=name or target.__name__,
            type=type,
            is_list=bool(is_list),
            args=arg_specs,
            resolver=target,
            description=description,
        )
        setattr(target, REGISTRATION_ATTR, registration)
        return fn

    return deco


def blacklist(attr: Any) -> Any:
    """Mark a mapped column or relationship as excluded from derived fields.

    Works with ``Column``, ``mapped_column`` and ``relationship`` constructs by
    setting ``info["blacklist"]``; returns the same object.
    """
    column = getattr(attr, 'column', None)
    info = getattr(column, 'info', None) if column is not None else None
    if info is None:
        info = getattr(attr, 'info', None)
    if not isinstance(info, dict):
        raise TypeError(f"Cannot blacklist {attr!r}: it has no info mapping")
    info[BLACKLIST_INFO_KEY] = True
    return attr
