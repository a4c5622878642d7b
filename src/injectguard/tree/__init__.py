from injectguard.tree.estree import TreeError, decode
from injectguard.tree.nodes import Node, iter_classes, node_type, walk
from injectguard.tree.scope import FunctionScopeManager, Scope, ScopeManager

__all__ = [
    "FunctionScopeManager",
    "Node",
    "Scope",
    "ScopeManager",
    "TreeError",
    "decode",
    "iter_classes",
    "node_type",
    "walk",
]
