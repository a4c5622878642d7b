"""Typed ESTree node model.

Only the node kinds the checks look at get a dataclass of their own; every
other ESTree node decodes to :class:`OpaqueNode`, which keeps its children so
traversal still reaches nested class declarations.  ``span`` holds the
``(start, end)`` source offsets of the node.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TypeAlias

from injectguard.core._types import Accessibility, MethodKind, Span


@dataclass(frozen=True, slots=True)
class Identifier:
    name: str
    span: Span = (0, 0)


@dataclass(frozen=True, slots=True)
class ThisExpression:
    span: Span = (0, 0)


@dataclass(frozen=True, slots=True)
class MemberExpression:
    object: Node
    property: Node
    computed: bool = False
    span: Span = (0, 0)


@dataclass(frozen=True, slots=True)
class AssignmentExpression:
    operator: str
    left: Node
    right: Node
    span: Span = (0, 0)


@dataclass(frozen=True, slots=True)
class AssignmentPattern:
    """Parameter with a default value (``name: T = value``)."""

    left: Node
    right: Node
    span: Span = (0, 0)


@dataclass(frozen=True, slots=True)
class ExpressionStatement:
    expression: Node
    span: Span = (0, 0)


@dataclass(frozen=True, slots=True)
class BlockStatement:
    body: tuple[Node, ...] = ()
    span: Span = (0, 0)


@dataclass(frozen=True, slots=True)
class TSParameterProperty:
    """Constructor parameter that also declares an instance field."""

    parameter: Node
    accessibility: Accessibility = Accessibility.NONE
    readonly: bool = False
    span: Span = (0, 0)


@dataclass(frozen=True, slots=True)
class FunctionExpression:
    params: tuple[Node, ...] = ()
    body: BlockStatement | None = None
    """``None`` for bodiless signatures (abstract methods, overloads)."""
    span: Span = (0, 0)


@dataclass(frozen=True, slots=True)
class MethodDefinition:
    key: Node
    value: FunctionExpression
    kind: MethodKind = MethodKind.METHOD
    static: bool = False
    span: Span = (0, 0)

    @property
    def name(self) -> str:
        return self.key.name if isinstance(self.key, Identifier) else "<computed>"


@dataclass(frozen=True, slots=True)
class PropertyDefinition:
    """Class field declaration (``ClassProperty`` in Babel trees)."""

    key: Node
    value: Node | None = None
    accessibility: Accessibility = Accessibility.NONE
    readonly: bool = False
    static: bool = False
    span: Span = (0, 0)


@dataclass(frozen=True, slots=True)
class ClassBody:
    body: tuple[Node, ...] = ()
    span: Span = (0, 0)


@dataclass(frozen=True, slots=True)
class ClassDeclaration:
    body: ClassBody
    id: Identifier | None = None
    span: Span = (0, 0)

    @property
    def name(self) -> str:
        return self.id.name if self.id is not None else "<anonymous>"


@dataclass(frozen=True, slots=True)
class Program:
    body: tuple[Node, ...] = ()
    span: Span = (0, 0)


@dataclass(frozen=True, slots=True)
class OpaqueNode:
    """Any ESTree node without a dedicated type, or one that failed to decode."""

    type: str
    children: tuple[Node, ...] = ()
    span: Span = (0, 0)


Node: TypeAlias = (
    Program
    | ClassDeclaration
    | ClassBody
    | MethodDefinition
    | PropertyDefinition
    | FunctionExpression
    | TSParameterProperty
    | AssignmentPattern
    | BlockStatement
    | ExpressionStatement
    | AssignmentExpression
    | MemberExpression
    | ThisExpression
    | Identifier
    | OpaqueNode
)


def node_type(node: Node) -> str:
    """ESTree type name of *node*."""
    if isinstance(node, OpaqueNode):
        return node.type
    return type(node).__name__


def iter_children(node: Node) -> Iterator[Node]:
    """Yield the direct children of *node* in source order."""
    match node:
        case Program(body=body) | ClassBody(body=body) | BlockStatement(body=body):
            yield from body
        case OpaqueNode(children=children):
            yield from children
        case ClassDeclaration(id=ident, body=body):
            if ident is not None:
                yield ident
            yield body
        case MethodDefinition(key=key, value=value):
            yield key
            yield value
        case PropertyDefinition(key=key, value=value):
            yield key
            if value is not None:
                yield value
        case FunctionExpression(params=params, body=body):
            yield from params
            if body is not None:
                yield body
        case TSParameterProperty(parameter=parameter):
            yield parameter
        case AssignmentPattern(left=left, right=right) | AssignmentExpression(
            left=left, right=right
        ):
            yield left
            yield right
        case ExpressionStatement(expression=expression):
            yield expression
        case MemberExpression(object=obj, property=prop):
            yield obj
            yield prop
        case ThisExpression() | Identifier():
            return


def walk(node: Node) -> Iterator[Node]:
    """Depth-first pre-order traversal of *node* and its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_children(current))))


def iter_classes(node: Node) -> Iterator[ClassDeclaration]:
    """Yield every class declaration under *node*, outermost first."""
    for current in walk(node):
        if isinstance(current, ClassDeclaration):
            yield current
