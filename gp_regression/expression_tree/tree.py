from typing import Iterator, List, Sequence

import numpy as np

from .core.node import Node


def subtree_start(tree: 'Tree', i: int) -> int:
  """Index of the first node of the subtree rooted at `i`"""
  return i - tree.nodes[i].length


def subtree_length(tree: 'Tree', i: int) -> int:
  """Number of nodes in the subtree rooted at `i`, itself included"""
  return tree.nodes[i].length + 1


def child_indices(tree: 'Tree', i: int) -> Iterator[int]:
  """Children of node `i`, first child first.

  The first child sits right before its parent; every following child ends
  right before the previous child's subtree starts.
  """
  nodes = tree.nodes
  c = i - 1
  for _ in range(nodes[i].arity):
    yield c
    c -= nodes[c].length + 1


def recompute(tree: 'Tree') -> 'Tree':
  """Rebuild length, height and depth of every node after a structural edit"""
  nodes = tree.nodes
  # children precede parents, so sizes and heights fill in one forward pass
  for i, node in enumerate(nodes):
    if node.arity == 0:
      node.length = 0
      node.height = 1
      continue
    length = 0
    height = 0
    for c in child_indices(tree, i):
      length += nodes[c].length + 1
      height = max(height, nodes[c].height)
    node.length = length
    node.height = height + 1

  # depths flow from the root down, so walk backwards
  if nodes:
    nodes[-1].depth = 1
  for i in range(len(nodes) - 1, -1, -1):
    depth = nodes[i].depth + 1
    for c in child_indices(tree, i):
      nodes[c].depth = depth
  return tree


class Tree:
  """Expression tree stored as a postorder sequence of nodes.

  The root is the last node. There are no child links: every subtree
  boundary follows from the `length` fields, which `recompute` keeps
  current.
  """

  __slots__ = ('nodes',)

  def __init__(self, nodes: Sequence[Node], update: bool = True):
    self.nodes: List[Node] = list(nodes)
    if update:
      recompute(self)

  def __len__(self) -> int:
    return len(self.nodes)

  def __getitem__(self, i: int) -> Node:
    return self.nodes[i]

  def __iter__(self) -> Iterator[Node]:
    return iter(self.nodes)

  def __eq__(self, other) -> bool:
    if not isinstance(other, Tree):
      return False
    return self.nodes == other.nodes

  def __hash__(self) -> int:
    return hash(tuple(self.nodes))

  def __repr__(self) -> str:
    return f"Tree(length={len(self)}, depth={self.depth()})"

  @property
  def root(self) -> Node:
    return self.nodes[-1]

  def depth(self) -> int:
    return max((n.depth for n in self.nodes), default=0)

  def visitation_length(self) -> int:
    """Sum of subtree sizes; equal-length trees differ by shape here"""
    return sum(n.length + 1 for n in self.nodes)

  def subtree_start(self, i: int) -> int:
    return subtree_start(self, i)

  def subtree_length(self, i: int) -> int:
    return subtree_length(self, i)

  def children(self, i: int) -> List[int]:
    return list(child_indices(self, i))

  def subtree(self, i: int) -> List[Node]:
    return [n.copy() for n in self.nodes[subtree_start(self, i):i + 1]]

  def copy(self) -> 'Tree':
    return Tree([n.copy() for n in self.nodes], update=False)

  def coefficients(self) -> np.ndarray:
    return np.array([n.value for n in self.nodes if n.is_coefficient], dtype=np.float64)

  def set_coefficients(self, values) -> None:
    values = np.asarray(values, dtype=np.float64).ravel()
    targets = [n for n in self.nodes if n.is_coefficient]
    if len(targets) != len(values):
      raise ValueError(f"Expected {len(targets)} coefficients, got {len(values)}")
    for node, v in zip(targets, values):
      node.value = float(v)

  def is_valid(self) -> bool:
    """Check the postorder invariant the evaluator and crossover rely on"""
    nodes = self.nodes
    if not nodes:
      return False
    # every node's subtree must start where its last child's subtree starts
    for i, node in enumerate(nodes):
      start = i - node.length
      if start < 0:
        return False
      covered = 0
      c = i - 1
      for _ in range(node.arity):
        if c < start:
          return False
        covered += nodes[c].length + 1
        c -= nodes[c].length + 1
      if covered != node.length or c != start - 1:
        return False
    return nodes[-1].length == len(nodes) - 1
