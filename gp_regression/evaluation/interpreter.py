"""
Batch interpreter for postorder trees.

Rows are processed in fixed-width batches over a `batch_size x len(tree)`
column buffer. The numeric field follows the parameters: plain float64 by
default, dual numbers when the caller passes a `Dual` parameter vector. The
interpreter itself never branches on the field.
"""

from typing import Optional

import numpy as np

from ..config import get_config
from ..dataset import Dataset, Range
from ..expression_tree import Tree, NodeType, ARITHMETIC_OP_MAP, UNARY_OP_MAP
from ..expression_tree.core.operators import FLOAT_MAX, sanitize_fast
from ..logging_system import log_critical
from .dual import Dual, primal


class UnknownNodeTypeError(RuntimeError):
  """A node type outside the grammar reached the interpreter"""


def _allocate(parameters, shape):
  if isinstance(parameters, Dual):
    return Dual.zeros(shape, parameters.n_params)
  return np.empty(shape, dtype=np.float64)


def sanitize(values):
  """Replace non-finite entries with the midpoint of the finite range.

  Finite entries are clamped into [min, max]; with no finite entry at all
  min and max stay at the extreme float bounds and the midpoint is 0.
  """
  if isinstance(values, np.ndarray) and values.dtype == np.float64 and values.ndim == 1:
    return sanitize_fast(values)

  finite = np.asarray(np.isfinite(values), dtype=bool)
  real = primal(values)
  if finite.any():
    lo = float(real[finite].min())
    hi = float(real[finite].max())
  else:
    lo, hi = FLOAT_MAX, -FLOAT_MAX
  values[finite & (real < lo)] = lo
  values[finite & (real > hi)] = hi
  values[~finite] = lo * 0.5 + hi * 0.5
  return values


def evaluate(tree: Tree, dataset: Dataset, rows: Range, parameters=None,
             batch_size: Optional[int] = None, out=None):
  """Evaluate `tree` over `rows` of `dataset`.

  Args:
    parameters: optional coefficient vector (float array or `Dual`) used
      instead of the node values, consumed in node order by constants and
      variable weights.
    batch_size: rows per batch, defaults to the configured width.
    out: optional preallocated result of length `rows.size`.

  Returns:
    Fully finite values, one per row of the range.
  """
  nodes = tree.nodes
  n_nodes = len(nodes)
  if batch_size is None:
    batch_size = get_config().batch_size
  if parameters is None:
    parameters = tree.coefficients()
  elif not isinstance(parameters, Dual):
    parameters = np.asarray(parameters, dtype=np.float64)

  n_rows = rows.size
  result = out if out is not None else _allocate(parameters, (n_rows,))
  buffer = _allocate(parameters, (batch_size, n_nodes))

  # resolve columns and parameter slots once, they do not change per batch
  columns = [None] * n_nodes
  slots = [None] * n_nodes
  idx = 0
  for i, node in enumerate(nodes):
    if node.is_coefficient:
      slots[i] = idx
      idx += 1
      if node.is_variable:
        columns[i] = dataset.values[:, dataset.get_index(node.hash_value)]

  with np.errstate(all='ignore'):
    for row in range(0, n_rows, batch_size):
      remaining = min(batch_size, n_rows - row)
      active = slice(0, remaining)

      for i, node in enumerate(nodes):
        kind = node.type

        if kind in ARITHMETIC_OP_MAP:
          op = ARITHMETIC_OP_MAP[kind]
          c = i - 1
          acc = buffer[active, c]
          for _ in range(node.arity - 1):
            c -= nodes[c].length + 1
            acc = op(acc, buffer[active, c])
          buffer[active, i] = acc
        elif kind in UNARY_OP_MAP:
          buffer[active, i] = UNARY_OP_MAP[kind](buffer[active, i - 1])
        elif kind == NodeType.CONSTANT:
          buffer[active, i] = parameters[slots[i]]
        elif kind == NodeType.VARIABLE:
          start = rows.start + row
          buffer[active, i] = parameters[slots[i]] * columns[i][start:start + remaining]
        else:
          log_critical(f"Unknown node type {kind!r} at index {i}")
          raise UnknownNodeTypeError(f"Unknown node type {kind!r}")

      # the root is the last column
      result[row:row + remaining] = buffer[active, n_nodes - 1]

  return sanitize(result)
