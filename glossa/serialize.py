"""Serialization of syntax trees and types to JSON-compatible dicts.

A parser running in another process hands its typed tree over in this form.
Node dicts are keyed by "kind" (the SyntaxKind value); the checker's answer
for an expression or annotation travels along under "typ".
"""

from __future__ import annotations

from dataclasses import fields

from .diagnostics import SerializationError
from .syntax import NODE_CLASSES, Node, Pos, SyntaxKind
from .types import ArrayType, MapType, NamedType, PrimitiveType, TypeRef, UnionType


# ============================================================
# TYPES
# ============================================================


def type_to_dict(typ: TypeRef) -> dict[str, object]:
    """Serialize a TypeRef."""
    if isinstance(typ, PrimitiveType):
        return {"kind": "primitive", "name": typ.name}
    if isinstance(typ, NamedType):
        d: dict[str, object] = {"kind": "named", "name": typ.name}
        if typ.alias is not None:
            d["alias"] = typ.alias
        if typ.struct:
            d["struct"] = True
        return d
    if isinstance(typ, ArrayType):
        return {"kind": "array", "element": type_to_dict(typ.element)}
    if isinstance(typ, MapType):
        return {"kind": "map", "element": type_to_dict(typ.element)}
    if isinstance(typ, UnionType):
        return {"kind": "union", "members": [type_to_dict(m) for m in typ.members]}
    raise SerializationError(f"cannot serialize type {typ!r}")


def type_from_dict(data: object) -> TypeRef:
    """Rebuild a TypeRef from its dict form."""
    if not isinstance(data, dict):
        raise SerializationError(f"expected a type object, got {type(data).__name__}")
    kind = data.get("kind")
    try:
        match kind:
            case "primitive":
                return PrimitiveType(data["name"])
            case "named":
                return NamedType(data["name"], data.get("alias"), bool(data.get("struct", False)))
            case "array":
                return ArrayType(type_from_dict(data["element"]))
            case "map":
                return MapType(type_from_dict(data["element"]))
            case "union":
                members = tuple(type_from_dict(m) for m in data["members"])
                if len(members) < 2:
                    raise SerializationError("union needs at least two members")
                return UnionType(members)
    except KeyError as e:
        raise SerializationError(f"{kind} type is missing field {e.args[0]!r}") from None
    raise SerializationError(f"unknown type kind: {kind!r}")


# ============================================================
# NODES
# ============================================================


def node_to_dict(node: Node) -> dict[str, object]:
    """Serialize a syntax tree. Unknown positions and empty spans are omitted."""
    d: dict[str, object] = {"kind": node.kind.value}
    for f in fields(node):
        value = getattr(node, f.name)
        if f.name == "pos":
            if value.line > 0:
                d["pos"] = [value.line, value.col]
        elif f.name == "source":
            if value:
                d["source"] = value
        elif f.name == "typ":
            if value is not None:
                d["typ"] = type_to_dict(value)
        else:
            d[f.name] = _value_to_json(value)
    return d


def _value_to_json(value: object) -> object:
    if isinstance(value, Node):
        return node_to_dict(value)
    if isinstance(value, list):
        return [_value_to_json(v) for v in value]
    return value


def node_from_dict(data: object) -> Node:
    """Rebuild a syntax tree from its dict form."""
    if not isinstance(data, dict):
        raise SerializationError(f"expected a node object, got {type(data).__name__}")
    kind = data.get("kind")
    try:
        cls = NODE_CLASSES[SyntaxKind(kind)]
    except ValueError:
        raise SerializationError(f"unknown node kind: {kind!r}") from None
    known = {f.name for f in fields(cls)}
    kwargs: dict[str, object] = {}
    for key, value in data.items():
        if key == "kind":
            continue
        if key not in known:
            raise SerializationError(f"{kind} has no field {key!r}")
        if key == "pos":
            kwargs["pos"] = _pos_from_json(value)
        elif key == "typ":
            kwargs["typ"] = None if value is None else type_from_dict(value)
        else:
            kwargs[key] = _value_from_json(value)
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise SerializationError(f"invalid {kind} node: {e}") from None


def _pos_from_json(value: object) -> Pos:
    if not isinstance(value, list) or len(value) != 2:
        raise SerializationError(f"pos must be [line, col], got {value!r}")
    return Pos(int(value[0]), int(value[1]))


def _value_from_json(value: object) -> object:
    if isinstance(value, dict):
        return node_from_dict(value)
    if isinstance(value, list):
        return [_value_from_json(v) for v in value]
    return value
