"""Schema type construction backend.

The mapper never touches graphql-core directly; it goes through a
``SchemaTypeLibrary`` so that object types, wrappers and scalars can come from
another GraphQL implementation if needed. :class:`GraphQLTypeLibrary` is the
graphql-core backend used by default.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Sequence, Tuple, runtime_checkable

from graphql import (
    GraphQLArgument,
    GraphQLBoolean,
    GraphQLField,
    GraphQLFloat,
    GraphQLInt,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLString,
)

__all__ = ['SchemaTypeLibrary', 'GraphQLTypeLibrary']


@runtime_checkable
class SchemaTypeLibrary(Protocol):
    def int(self) -> Any: ...
    def float(self) -> Any: ...
    def string(self) -> Any: ...
    def boolean(self) -> Any: ...
    def list_of(self, of_type: Any) -> Any: ...
    def non_null(self, of_type: Any) -> Any: ...

    def object_type(self, name: str, description: str, fields: Callable[[], Mapping[str, Any]]) -> Any:
        """Build an object type whose ``fields`` callable is not invoked here."""
        ...

    def field(
        self,
        type_: Any,
        *,
        resolve: Callable[..., Any],
        args: Optional[Sequence[Tuple[str, Any, str]]] = None,
        description: str = '',
    ) -> Any:
        """Build a field; ``args`` items are ``(name, type, python_name)``."""
        ...


class GraphQLTypeLibrary:
    """graphql-core implementation of :class:`SchemaTypeLibrary`."""

    def int(self) -> Any:
        return GraphQLInt

    def float(self) -> Any:
        return GraphQLFloat

    def string(self) -> Any:
        return GraphQLString

    def boolean(self) -> Any:
        return GraphQLBoolean

    def list_of(self, of_type: Any) -> Any:
        return GraphQLList(of_type)

    def non_null(self, of_type: Any) -> Any:
        return GraphQLNonNull(of_type)

    def object_type(self, name: str, description: str, fields: Callable[[], Mapping[str, Any]]) -> GraphQLObjectType:
        # graphql-core keeps the callable and only evaluates it on first access of .fields
        return GraphQLObjectType(name=name, fields=fields, description=description)

    def field(
        self,
        type_: Any,
        *,
        resolve: Callable[..., Any],
        args: Optional[Sequence[Tuple[str, Any, str]]] = None,
        description: str = '',
    ) -> GraphQLField:
        gql_args: Optional[Dict[str, GraphQLArgument]] = None
        if args is not None:
            # out_name hands the value to the resolver under its Python keyword
            gql_args = {
                name: GraphQLArgument(arg_type, out_name=out_name if out_name != name else None)
                for name, arg_type, out_name in args
            }
        return GraphQLField(type_, args=gql_args, resolve=resolve, description=description or None)
