"""Core expression tree components."""

from .node import Node, NodeType, ARITHMETIC_TYPES, UNARY_TYPES, TERMINAL_TYPES, DEFAULT_ARITY
from .operators import ARITHMETIC_OP_MAP, UNARY_OP_MAP, finite_min_max, limit_to_range, sanitize_fast

__all__ = [
    'Node', 'NodeType', 'ARITHMETIC_TYPES', 'UNARY_TYPES', 'TERMINAL_TYPES', 'DEFAULT_ARITY',
    'ARITHMETIC_OP_MAP', 'UNARY_OP_MAP', 'finite_min_max', 'limit_to_range', 'sanitize_fast'
]
