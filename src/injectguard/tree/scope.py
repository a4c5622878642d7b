"""Lexical scopes for method bodies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from injectguard.tree.nodes import FunctionExpression, Node


@dataclass(frozen=True, slots=True)
class Scope:
    """Function scope, created by the function node it belongs to."""

    block: FunctionExpression


class ScopeManager(Protocol):
    def acquire(self, node: Node) -> Scope | None:
        """Return the scope created by *node*, or ``None`` if it has none."""
        ...


class FunctionScopeManager:
    """Creates a scope for every function node that has a body.

    Bodiless signatures (abstract methods, overload declarations) have no
    scope to acquire.
    """

    def acquire(self, node: Node) -> Scope | None:
        if not isinstance(node, FunctionExpression) or node.body is None:
            return None
        return Scope(block=node)
