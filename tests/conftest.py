import numpy as np
import pytest

from gp_regression import Dataset, Node, NodeType, Tree, variable_hash
from gp_regression.config import reset_config
from gp_regression.logging_system import LogLevel, configure_logging

BINARY = [NodeType.ADD, NodeType.SUB, NodeType.MUL, NodeType.DIV]
UNARY = [NodeType.LOG, NodeType.EXP, NodeType.SIN, NodeType.COS,
         NodeType.TAN, NodeType.SQRT, NodeType.CBRT, NodeType.SQUARE]


def random_tree(rng, hashes, max_depth, unary=True):
    """Grow a random tree no deeper than max_depth (root at level 1)"""
    symbols = BINARY + UNARY if unary else BINARY

    def grow(level):
        if level >= max_depth or (level > 1 and rng.random() < 0.3):
            if rng.random() < 0.5:
                return [Node.constant(rng.normal())]
            return [Node.variable(hashes[int(rng.integers(len(hashes)))], rng.normal())]
        kind = symbols[int(rng.integers(len(symbols)))]
        if kind in UNARY:
            return grow(level + 1) + [Node(kind)]
        second = grow(level + 1)
        first = grow(level + 1)
        return second + first + [Node(kind)]

    return Tree(grow(1))


def linear_tree(x_hash, w, c):
    """w * x + c"""
    return Tree([Node.variable(x_hash, w), Node.constant(c), Node(NodeType.ADD)])


@pytest.fixture(autouse=True)
def _reset_globals():
    reset_config()
    configure_logging(LogLevel.SILENT)
    yield
    reset_config()
    configure_logging(LogLevel.SILENT)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def xy_dataset():
    x = np.array([1.0, 2.0, 3.0])
    return Dataset(np.column_stack([x, 2.0 * x + 1.0]), ["x", "y"])


@pytest.fixture
def x_hash():
    return variable_hash("x")


@pytest.fixture
def wide_dataset():
    rng = np.random.default_rng(7)
    values = rng.uniform(0.5, 3.0, size=(150, 3))
    return Dataset(values, ["a", "b", "c"])
