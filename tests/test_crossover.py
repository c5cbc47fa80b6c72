"""Tests for budgeted subtree crossover."""

import numpy as np
import pytest

from gp_regression import Dataset, Node, NodeType, Range, SubtreeCrossover, Tree, cross, evaluate, select_cut_point
from gp_regression.config import configure

from conftest import random_tree

HASHES = [101, 202, 303]


def sin_tree(hash_value):
    return Tree([Node.variable(hash_value), Node(NodeType.SIN)])


def plus_tree(a):
    return Tree([Node.variable(a), Node.constant(1.0), Node(NodeType.ADD)])


class TestSelectCutPoint:

    @pytest.mark.parametrize("max_depth, max_length", [(0, 10), (10, 0), (0, 0), (-1, 5), (5, -3)])
    def test_degenerate_budget(self, rng, max_depth, max_length):
        tree = random_tree(rng, HASHES, max_depth=4)
        assert select_cut_point(rng, tree, 0.9, max_depth, max_length) is None

    def test_leaf_only_when_internal_probability_zero(self, rng):
        for _ in range(50):
            tree = random_tree(rng, HASHES, max_depth=5)
            i = select_cut_point(rng, tree, 0.0, 10, 100)
            assert tree[i].is_leaf

    def test_internal_preferred(self, rng):
        for _ in range(50):
            tree = random_tree(rng, HASHES, max_depth=5)
            i = select_cut_point(rng, tree, 1.0, 100, 1000)
            assert tree[i].is_leaf == (len(tree) == 1)

    def test_eligibility(self, rng):
        for _ in range(100):
            tree = random_tree(rng, HASHES, max_depth=6)
            max_depth = int(rng.integers(1, 5))
            max_length = int(rng.integers(1, 8))
            i = select_cut_point(rng, tree, 1.0, max_depth, max_length)
            assert tree[i].length + 1 <= max_length
            assert tree[i].height <= max_depth

    def test_tight_budget_falls_back_to_leaf(self, rng):
        tree = random_tree(rng, HASHES, max_depth=5)
        for _ in range(20):
            assert tree[select_cut_point(rng, tree, 1.0, 1, 1)].is_leaf


class TestCross:

    def test_splice(self):
        lhs = plus_tree(101)
        rhs = sin_tree(202)
        child = cross(lhs, rhs, 1, 1)
        assert [n.type for n in child] == [NodeType.VARIABLE, NodeType.VARIABLE, NodeType.SIN, NodeType.ADD]
        assert child.is_valid()
        assert child.depth() == 3

        ds = Dataset(np.array([[1.0, 0.5], [2.0, 1.5]]), ["a", "b"])
        a, b = (v.hash_value for v in ds.variables)
        lhs = Tree([Node.variable(a), Node.constant(1.0), Node(NodeType.ADD)])
        child = cross(lhs, sin_tree(b), 1, 1)
        np.testing.assert_allclose(evaluate(child, ds, Range(0, 2)), np.sin([0.5, 1.5]) + [1.0, 2.0])

    def test_child_owns_its_nodes(self, rng):
        lhs = random_tree(rng, HASHES, max_depth=4)
        rhs = random_tree(rng, HASHES, max_depth=4)
        before = (lhs.coefficients().copy(), rhs.coefficients().copy())
        child = cross(lhs, rhs, 0, len(rhs) - 1)
        child.set_coefficients(np.zeros(child.coefficients().size))
        np.testing.assert_array_equal(lhs.coefficients(), before[0])
        np.testing.assert_array_equal(rhs.coefficients(), before[1])

    def test_replace_root(self, rng):
        lhs = random_tree(rng, HASHES, max_depth=4)
        rhs = random_tree(rng, HASHES, max_depth=4)
        child = cross(lhs, rhs, len(lhs) - 1, len(rhs) - 1)
        assert child == rhs


class TestSubtreeCrossover:

    @pytest.mark.parametrize("max_depth, max_length", [(0, 20), (20, 0)])
    def test_degenerate_budget_returns_first_parent(self, rng, max_depth, max_length):
        lhs = random_tree(rng, HASHES, max_depth=4)
        rhs = random_tree(rng, HASHES, max_depth=4)
        assert SubtreeCrossover(0.9, max_depth, max_length)(rng, lhs, rhs) is lhs

    def test_budget_respected(self, rng):
        spliced = 0
        for _ in range(400):
            max_depth = int(rng.integers(1, 8))
            max_length = int(rng.integers(1, 40))
            lhs = random_tree(rng, HASHES, max_depth=int(rng.integers(1, max_depth + 1)))
            rhs = random_tree(rng, HASHES, max_depth=int(rng.integers(1, 9)))
            if len(lhs) > max_length:
                continue
            internal_probability = float(rng.random())
            child = SubtreeCrossover(internal_probability, max_depth, max_length)(rng, lhs, rhs)
            if child is lhs:
                continue
            spliced += 1
            assert child.is_valid()
            assert child.root.length + 1 <= max_length
            assert len(child) <= max_length
            assert child.depth() <= max_depth
        assert spliced > 50

    def test_budget_is_tight(self):
        # x + 1 with the constant swapped for sin(y) reaches exactly length 4, depth 3
        lhs = plus_tree(101)
        rhs = sin_tree(202)
        rng = np.random.default_rng(0)
        children = [SubtreeCrossover(0.5, 3, 4)(rng, lhs, rhs) for _ in range(50)]
        assert any(len(c) == 4 and c.depth() == 3 for c in children)
        assert all(c is lhs or (len(c) <= 4 and c.depth() <= 3) for c in children)

        # one node less and the sine branch no longer fits
        children = [SubtreeCrossover(0.5, 3, 3)(rng, lhs, rhs) for _ in range(50)]
        assert all(c is lhs or len(c) <= 3 for c in children)

    def test_same_seed_same_child(self):
        seed_rng = np.random.default_rng(99)
        lhs = random_tree(seed_rng, HASHES, max_depth=5)
        rhs = random_tree(seed_rng, HASHES, max_depth=5)
        crossover = SubtreeCrossover(0.9, 10, 60)
        a = crossover(np.random.default_rng(5), lhs, rhs)
        b = crossover(np.random.default_rng(5), lhs, rhs)
        assert a == b

    def test_defaults_from_config(self):
        configure(max_depth=7, max_length=33, internal_probability=0.5)
        crossover = SubtreeCrossover()
        assert (crossover.max_depth, crossover.max_length, crossover.internal_probability) == (7, 33, 0.5)

    def test_invalid_probability(self):
        with pytest.raises(ValueError):
            SubtreeCrossover(1.5, 5, 5)
