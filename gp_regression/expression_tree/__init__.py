"""Expression Tree Module

Postorder-encoded expression trees and their subtree addressing.
"""

from .core.node import Node, NodeType
from .core.operators import ARITHMETIC_OP_MAP, UNARY_OP_MAP
from .tree import Tree, subtree_start, subtree_length, child_indices, recompute

__all__ = [
    "Node", "NodeType",
    "ARITHMETIC_OP_MAP", "UNARY_OP_MAP",
    "Tree", "subtree_start", "subtree_length", "child_indices", "recompute"
]
