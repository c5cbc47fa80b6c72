"""
Crossover Operations Module

Budgeted subtree crossover on postorder trees: a branch of the second parent
replaces a branch of the first, and the child is guaranteed to stay within
the caller's length and depth limits.
"""

from typing import Optional

import numpy as np

from ..config import get_config
from ..expression_tree import Tree


def select_cut_point(rng: np.random.Generator, tree: Tree, internal_probability: float,
                     max_depth: int, max_length: int) -> Optional[int]:
    """Pick a branch whose size and height fit the budget.

    Internal nodes are tried first with probability `internal_probability`,
    in random order; otherwise, or when none fits, a uniformly random leaf
    is returned. Returns None for an exhausted budget.
    """
    if max_depth <= 0 or max_length <= 0:
        return None

    nodes = tree.nodes
    leaves = [i for i, n in enumerate(nodes) if n.is_leaf]
    internal = np.array([i for i, n in enumerate(nodes) if not n.is_leaf], dtype=np.int64)

    if rng.random() < internal_probability and internal.size:
        rng.shuffle(internal)
        for i in internal:
            node = nodes[i]
            if node.length + 1 <= max_length and node.height <= max_depth:
                return int(i)

    return leaves[int(rng.integers(len(leaves)))]


def cross(lhs: Tree, rhs: Tree, i: int, j: int) -> Tree:
    """Child of `lhs` with the branch at `i` replaced by `rhs`'s branch at `j`"""
    left, right = lhs.nodes, rhs.nodes
    nodes = [n.copy() for n in left[:i - left[i].length]]
    nodes.extend(n.copy() for n in right[j - right[j].length:j + 1])
    nodes.extend(n.copy() for n in left[i + 1:])
    return Tree(nodes)


class SubtreeCrossover:
    """Subtree crossover respecting global length and depth limits.

    The limits on the child hold only when `lhs` is within them already. Only
    the grafted branch is sized against them; the rest of `lhs` is kept as it
    is, so an over-deep `lhs` can still yield an over-deep child.
    """

    def __init__(self, internal_probability: Optional[float] = None,
                 max_depth: Optional[int] = None, max_length: Optional[int] = None):
        config = get_config()
        self.internal_probability = (config.internal_probability
                                     if internal_probability is None else internal_probability)
        self.max_depth = config.max_depth if max_depth is None else max_depth
        self.max_length = config.max_length if max_length is None else max_length
        if not 0.0 <= self.internal_probability <= 1.0:
            raise ValueError("internal_probability must be in [0, 1]")

    def __call__(self, rng: np.random.Generator, lhs: Tree, rhs: Tree) -> Tree:
        i = select_cut_point(rng, lhs, self.internal_probability, self.max_depth, self.max_length)
        if i is None:
            return lhs

        # what remains of lhs once the branch at i is gone
        cut = lhs[i]
        max_branch_depth = self.max_depth - (cut.depth - 1)
        partial_length = len(lhs) - (cut.length + 1)
        max_branch_length = self.max_length - partial_length

        j = select_cut_point(rng, rhs, self.internal_probability, max_branch_depth, max_branch_length)
        if j is None:
            return lhs
        return cross(lhs, rhs, i, j)
