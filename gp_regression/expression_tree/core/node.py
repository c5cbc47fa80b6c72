from enum import IntEnum
from typing import Dict, Optional


class NodeType(IntEnum):
  # Arithmetic
  ADD = 0
  SUB = 1
  MUL = 2
  DIV = 3
  # Unary functions
  LOG = 4
  EXP = 5
  SIN = 6
  COS = 7
  TAN = 8
  SQRT = 9
  CBRT = 10
  SQUARE = 11
  # Terminals
  CONSTANT = 12
  VARIABLE = 13


ARITHMETIC_TYPES = frozenset({NodeType.ADD, NodeType.SUB, NodeType.MUL, NodeType.DIV})
UNARY_TYPES = frozenset({
  NodeType.LOG, NodeType.EXP, NodeType.SIN, NodeType.COS,
  NodeType.TAN, NodeType.SQRT, NodeType.CBRT, NodeType.SQUARE
})
TERMINAL_TYPES = frozenset({NodeType.CONSTANT, NodeType.VARIABLE})

DEFAULT_ARITY: Dict[NodeType, int] = {
  **{t: 2 for t in ARITHMETIC_TYPES},
  **{t: 1 for t in UNARY_TYPES},
  **{t: 0 for t in TERMINAL_TYPES},
}

NODE_NAMES: Dict[NodeType, str] = {
  NodeType.ADD: '+', NodeType.SUB: '-', NodeType.MUL: '*', NodeType.DIV: '/',
  NodeType.LOG: 'log', NodeType.EXP: 'exp', NodeType.SIN: 'sin', NodeType.COS: 'cos',
  NodeType.TAN: 'tan', NodeType.SQRT: 'sqrt', NodeType.CBRT: 'cbrt', NodeType.SQUARE: 'square',
  NodeType.CONSTANT: 'constant', NodeType.VARIABLE: 'variable',
}


class Node:
  """One symbol of a postorder-encoded tree.

  `length`, `depth` and `height` are derived fields owned by the tree and
  only meaningful right after `recompute`.
  """

  __slots__ = ('type', 'value', 'hash_value', 'arity', 'length', 'depth', 'height')

  def __init__(self, node_type: NodeType, arity: Optional[int] = None,
               value: float = 0.0, hash_value: int = 0):
    node_type = NodeType(node_type)
    if arity is None:
      arity = DEFAULT_ARITY[node_type]
    if node_type in ARITHMETIC_TYPES and arity < 2:
      raise ValueError(f"{NODE_NAMES[node_type]} needs at least two operands, got arity {arity}")
    if node_type in UNARY_TYPES and arity != 1:
      raise ValueError(f"{NODE_NAMES[node_type]} is unary, got arity {arity}")
    if node_type in TERMINAL_TYPES and arity != 0:
      raise ValueError(f"{NODE_NAMES[node_type]} is a terminal, got arity {arity}")

    self.type = node_type
    self.value = float(value)
    self.hash_value = hash_value
    self.arity = arity
    self.length = 0
    self.depth = 1
    self.height = 1

  @classmethod
  def constant(cls, value: float) -> 'Node':
    return cls(NodeType.CONSTANT, value=value)

  @classmethod
  def variable(cls, hash_value: int, weight: float = 1.0) -> 'Node':
    return cls(NodeType.VARIABLE, value=weight, hash_value=hash_value)

  @property
  def is_leaf(self) -> bool:
    return self.arity == 0

  @property
  def is_constant(self) -> bool:
    return self.type == NodeType.CONSTANT

  @property
  def is_variable(self) -> bool:
    return self.type == NodeType.VARIABLE

  @property
  def is_coefficient(self) -> bool:
    """Constants and variable weights are both tunable"""
    return self.type in TERMINAL_TYPES

  @property
  def name(self) -> str:
    return NODE_NAMES[self.type]

  def copy(self) -> 'Node':
    node = Node.__new__(Node)
    node.type = self.type
    node.value = self.value
    node.hash_value = self.hash_value
    node.arity = self.arity
    node.length = self.length
    node.depth = self.depth
    node.height = self.height
    return node

  def __eq__(self, other) -> bool:
    if not isinstance(other, Node):
      return False
    return (self.type == other.type and self.arity == other.arity
            and self.value == other.value and self.hash_value == other.hash_value)

  def __hash__(self) -> int:
    return hash((self.type, self.arity, self.value, self.hash_value))

  def __repr__(self) -> str:
    if self.is_variable:
      return f"Node(variable {self.hash_value:#x}, w={self.value:.3f})"
    if self.is_constant:
      return f"Node(constant {self.value:.3f})"
    return f"Node({self.name}, arity={self.arity})"
