"""Type references - the checker's view of a type at a use site.

All types are frozen (immutable, hashable). The queries below answer the
questions every backend asks about a source type: is it optional, is it a
string-keyed map, which builtin is it. They never look at target syntax.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .syntax import Node, Parameter


# ============================================================
# TYPES
# ============================================================


@dataclass(frozen=True)
class TypeRef:
    """Base for all type references. Abstract."""


@dataclass(frozen=True)
class PrimitiveType(TypeRef):
    """Builtin source type: number, string, boolean, any, void, undefined, null."""

    name: str


@dataclass(frozen=True)
class NamedType(TypeRef):
    """User-declared class, interface or enum, possibly reached through an alias.

    struct marks a data-only interface (every member is a property).
    """

    name: str
    alias: str | None = None
    struct: bool = False


@dataclass(frozen=True)
class ArrayType(TypeRef):
    """T[] / Array<T>."""

    element: TypeRef


@dataclass(frozen=True)
class MapType(TypeRef):
    """String-keyed map: { [key: string]: T } / Record<string, T>."""

    element: TypeRef


@dataclass(frozen=True)
class UnionType(TypeRef):
    """A | B | ... - order is source order.

    Invariants:
    - len(members) >= 2
    """

    members: tuple[TypeRef, ...]


NUMBER = PrimitiveType("number")
STRING = PrimitiveType("string")
BOOLEAN = PrimitiveType("boolean")
ANY = PrimitiveType("any")
VOID = PrimitiveType("void")
UNDEFINED = PrimitiveType("undefined")
NULL = PrimitiveType("null")


def optional(typ: TypeRef) -> UnionType:
    """T | undefined."""
    return UnionType((typ, UNDEFINED))


# ============================================================
# QUERIES
# ============================================================


def is_absent(typ: TypeRef) -> bool:
    """True for the types that mean "no value"."""
    return typ == UNDEFINED or typ == NULL


def union_members(typ: TypeRef) -> list[TypeRef]:
    """Members of a union with nested unions flattened, in source order.

    A non-union type is its own single member.
    """
    if not isinstance(typ, UnionType):
        return [typ]
    result: list[TypeRef] = []
    for member in typ.members:
        for flat in union_members(member):
            if flat not in result:
                result.append(flat)
    return result


def non_absent_type(typ: TypeRef) -> TypeRef | None:
    """The single concrete member of a union, or None if zero or several remain.

    Non-union types are returned unchanged.
    """
    if not isinstance(typ, UnionType):
        return typ
    remaining = [m for m in union_members(typ) if not is_absent(m)]
    if len(remaining) != 1:
        return None
    return remaining[0]


def type_contains_undefined(typ: TypeRef) -> bool:
    """Whether the type admits undefined/null."""
    return any(is_absent(m) for m in union_members(typ))


def map_element_type(typ: TypeRef) -> TypeRef | None:
    """Element type of a string-keyed map, None for anything else."""
    if isinstance(typ, MapType):
        return typ.element
    return None


def builtin_type_name(typ: TypeRef) -> str | None:
    if isinstance(typ, PrimitiveType):
        return typ.name
    return None


def is_struct_type(typ: TypeRef | None) -> bool:
    return isinstance(typ, NamedType) and typ.struct


def parameter_accepts_undefined(param: Parameter, typ: TypeRef | None) -> bool:
    """Whether a caller may omit the argument for this parameter."""
    if param.initializer is not None:
        return True
    if param.question_token:
        return True
    if typ is not None:
        return type_contains_undefined(typ)
    return False


def describe(typ: TypeRef) -> str:
    """Source-language spelling of a type, for messages."""
    match typ:
        case PrimitiveType(name=name):
            return name
        case NamedType(name=name, alias=alias):
            return alias if alias else name
        case ArrayType(element=element):
            inner = describe(element)
            if isinstance(element, UnionType):
                inner = "(" + inner + ")"
            return inner + "[]"
        case MapType(element=element):
            return "{ [key: string]: " + describe(element) + " }"
        case UnionType(members=members):
            return " | ".join(describe(m) for m in members)
        case _:
            return "unknown"


# ============================================================
# CHECKER
# ============================================================


class TypeChecker:
    """Answers type queries for syntax nodes.

    The default implementation reads the `typ` annotations a typed frontend
    left on the tree. Frontends with a live checker subclass this and
    override the two queries.
    """

    def type_of_type_node(self, node: Node) -> TypeRef | None:
        """Resolve a type annotation node."""
        return getattr(node, "typ", None)

    def type_of_expression(self, node: Node) -> TypeRef | None:
        """Resolve the inferred type of an expression."""
        return getattr(node, "typ", None)
