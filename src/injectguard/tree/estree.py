"""Decode ESTree JSON (typescript-estree or Babel flavour) into tree nodes.

Offsets are read from ``range: [start, end]`` (typescript-estree) or from
``start``/``end`` (Babel).  A known node that lacks a required part decodes
to :class:`~injectguard.tree.nodes.OpaqueNode` instead of failing the whole
tree, so one malformed class only loses its own candidates.

Decoding does not recurse: every node dict is listed with an explicit stack
and decoded children first, so arbitrarily deep expression chains decode.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any, TypeAlias

from injectguard.core._types import Accessibility, MethodKind, Span
from injectguard.tree.nodes import (
    AssignmentExpression,
    AssignmentPattern,
    BlockStatement,
    ClassBody,
    ClassDeclaration,
    ExpressionStatement,
    FunctionExpression,
    Identifier,
    MemberExpression,
    MethodDefinition,
    Node,
    OpaqueNode,
    Program,
    PropertyDefinition,
    ThisExpression,
    TSParameterProperty,
)

logger = logging.getLogger("injectguard")

Raw: TypeAlias = dict[str, Any]
# Already decoded nodes, keyed by ``id()`` of their raw dict.
Decoded: TypeAlias = dict[int, Node]

# Keys that never hold child nodes; skipping them keeps opaque decoding cheap.
_SKIP_KEYS = frozenset({"type", "range", "loc", "start", "end", "comments", "tokens", "extra"})


class TreeError(ValueError):
    """Raised when input is not an ESTree node."""


def decode(raw: Any) -> Node:
    """Decode an ESTree JSON value into a :data:`Node`.

    Raises:
        :class:`TreeError`: If *raw* is not a dict with a string ``type``.

    """
    if not _is_node(raw):
        raise TreeError(f"Expected an ESTree node object, got {type(raw).__name__}")

    done: Decoded = {}
    for node in reversed(_preorder(raw)):
        done[id(node)] = _decode_one(node, done)
    return done[id(raw)]


def _is_node(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("type"), str)


def _raw_children(raw: Raw) -> Iterator[Raw]:
    for key, value in raw.items():
        if key in _SKIP_KEYS:
            continue
        if _is_node(value):
            yield value
        elif isinstance(value, list):
            yield from (item for item in value if _is_node(item))


def _preorder(root: Raw) -> list[Raw]:
    order: list[Raw] = []
    seen: set[int] = set()
    stack = [root]
    while stack:
        raw = stack.pop()
        if id(raw) in seen:
            continue
        seen.add(id(raw))
        order.append(raw)
        stack.extend(_raw_children(raw))
    return order


def _decode_one(raw: Raw, done: Decoded) -> Node:
    decoder = _DECODERS.get(raw["type"])
    if decoder is not None:
        try:
            return decoder(raw, done)
        except TreeError as exc:
            logger.debug("Malformed %s node decoded as opaque: %s", raw["type"], exc)
    return _opaque(raw, done)


def _opaque(raw: Raw, done: Decoded) -> OpaqueNode:
    children = tuple(done[id(child)] for child in _raw_children(raw))
    try:
        span = _span(raw)
    except TreeError:
        span = (0, 0)
    return OpaqueNode(type=raw["type"], children=children, span=span)


# --- Field helpers ---


def _span(raw: Raw) -> Span:
    rng = raw.get("range")
    if isinstance(rng, list | tuple) and len(rng) == 2 and all(isinstance(i, int) for i in rng):
        return (rng[0], rng[1])
    start, end = raw.get("start"), raw.get("end")
    if isinstance(start, int) and isinstance(end, int):
        return (start, end)
    raise TreeError(f"{raw['type']} node has no source offsets")


def _child(raw: Raw, key: str, done: Decoded) -> Node:
    value = raw.get(key)
    if not _is_node(value):
        raise TreeError(f"{raw['type']}.{key} is not a node")
    return done[id(value)]


def _optional_child(raw: Raw, key: str, done: Decoded) -> Node | None:
    value = raw.get(key)
    return done[id(value)] if _is_node(value) else None


def _children(raw: Raw, key: str, done: Decoded) -> tuple[Node, ...]:
    value = raw.get(key)
    if not isinstance(value, list):
        raise TreeError(f"{raw['type']}.{key} is not a list")
    return tuple(done[id(item)] for item in value if _is_node(item))


def _accessibility(raw: Raw) -> Accessibility:
    value = raw.get("accessibility") or ""
    try:
        return Accessibility(value)
    except ValueError:
        raise TreeError(f"Unknown accessibility {value!r}") from None


def _block(raw: Raw, key: str, done: Decoded) -> BlockStatement | None:
    body = _optional_child(raw, key, done)
    if body is None or isinstance(body, BlockStatement):
        return body
    raise TreeError(f"{raw['type']}.{key} is not a block")


# --- Node decoders ---


def _program(raw: Raw, done: Decoded) -> Program:
    return Program(body=_children(raw, "body", done), span=_span(raw))


def _class_declaration(raw: Raw, done: Decoded) -> ClassDeclaration:
    body = _child(raw, "body", done)
    if not isinstance(body, ClassBody):
        raise TreeError("ClassDeclaration.body is not a ClassBody")
    ident = _optional_child(raw, "id", done)
    return ClassDeclaration(
        body=body,
        id=ident if isinstance(ident, Identifier) else None,
        span=_span(raw),
    )


def _class_body(raw: Raw, done: Decoded) -> ClassBody:
    return ClassBody(body=_children(raw, "body", done), span=_span(raw))


def _method_kind(raw: Raw) -> MethodKind:
    try:
        return MethodKind(raw.get("kind", "method"))
    except ValueError:
        raise TreeError(f"Unknown method kind {raw.get('kind')!r}") from None


def _method_definition(raw: Raw, done: Decoded) -> MethodDefinition:
    value = _child(raw, "value", done)
    if not isinstance(value, FunctionExpression):
        raise TreeError(f"{raw['type']}.value is not a function")
    return MethodDefinition(
        key=_child(raw, "key", done),
        value=value,
        kind=_method_kind(raw),
        static=bool(raw.get("static", False)),
        span=_span(raw),
    )


def _class_method(raw: Raw, done: Decoded) -> MethodDefinition:
    """Babel ``ClassMethod``: params and body live on the member itself."""
    span = _span(raw)
    function = FunctionExpression(
        params=_children(raw, "params", done),
        body=_block(raw, "body", done),
        span=span,
    )
    return MethodDefinition(
        key=_child(raw, "key", done),
        value=function,
        kind=_method_kind(raw),
        static=bool(raw.get("static", False)),
        span=span,
    )


def _property_definition(raw: Raw, done: Decoded) -> PropertyDefinition:
    return PropertyDefinition(
        key=_child(raw, "key", done),
        value=_optional_child(raw, "value", done),
        accessibility=_accessibility(raw),
        readonly=bool(raw.get("readonly", False)),
        static=bool(raw.get("static", False)),
        span=_span(raw),
    )


def _function(raw: Raw, done: Decoded) -> FunctionExpression:
    return FunctionExpression(
        params=_children(raw, "params", done),
        body=_block(raw, "body", done),
        span=_span(raw),
    )


def _parameter_property(raw: Raw, done: Decoded) -> TSParameterProperty:
    return TSParameterProperty(
        parameter=_child(raw, "parameter", done),
        accessibility=_accessibility(raw),
        readonly=bool(raw.get("readonly", False)),
        span=_span(raw),
    )


def _assignment_pattern(raw: Raw, done: Decoded) -> AssignmentPattern:
    return AssignmentPattern(
        left=_child(raw, "left", done),
        right=_child(raw, "right", done),
        span=_span(raw),
    )


def _block_statement(raw: Raw, done: Decoded) -> BlockStatement:
    return BlockStatement(body=_children(raw, "body", done), span=_span(raw))


def _expression_statement(raw: Raw, done: Decoded) -> ExpressionStatement:
    return ExpressionStatement(expression=_child(raw, "expression", done), span=_span(raw))


def _assignment_expression(raw: Raw, done: Decoded) -> AssignmentExpression:
    operator = raw.get("operator")
    if not isinstance(operator, str):
        raise TreeError("AssignmentExpression.operator is not a string")
    return AssignmentExpression(
        operator=operator,
        left=_child(raw, "left", done),
        right=_child(raw, "right", done),
        span=_span(raw),
    )


def _member_expression(raw: Raw, done: Decoded) -> MemberExpression:
    return MemberExpression(
        object=_child(raw, "object", done),
        property=_child(raw, "property", done),
        computed=bool(raw.get("computed", False)),
        span=_span(raw),
    )


def _this_expression(raw: Raw, done: Decoded) -> ThisExpression:
    return ThisExpression(span=_span(raw))


def _identifier(raw: Raw, done: Decoded) -> Identifier:
    name = raw.get("name")
    if not isinstance(name, str):
        raise TreeError("Identifier.name is not a string")
    return Identifier(name=name, span=_span(raw))


_DECODERS: dict[str, Callable[[Raw, Decoded], Node]] = {
    "Program": _program,
    "ClassDeclaration": _class_declaration,
    "ClassBody": _class_body,
    "MethodDefinition": _method_definition,
    "TSAbstractMethodDefinition": _method_definition,
    "ClassMethod": _class_method,
    "TSDeclareMethod": _class_method,
    "PropertyDefinition": _property_definition,
    "ClassProperty": _property_definition,
    "FunctionExpression": _function,
    "TSEmptyBodyFunctionExpression": _function,
    "TSParameterProperty": _parameter_property,
    "AssignmentPattern": _assignment_pattern,
    "BlockStatement": _block_statement,
    "ExpressionStatement": _expression_statement,
    "AssignmentExpression": _assignment_expression,
    "MemberExpression": _member_expression,
    "ThisExpression": _this_expression,
    "Identifier": _identifier,
}
