import numpy as np
import numba
from .node import NodeType

# Every entry is a numpy ufunc so the same table serves float arrays and
# dual numbers (see evaluation.dual.Dual.__array_ufunc__).
ARITHMETIC_OP_MAP = {
  NodeType.ADD: np.add,
  NodeType.SUB: np.subtract,
  NodeType.MUL: np.multiply,
  NodeType.DIV: np.divide,
}

UNARY_OP_MAP = {
  NodeType.LOG: np.log,
  NodeType.EXP: np.exp,
  NodeType.SIN: np.sin,
  NodeType.COS: np.cos,
  NodeType.TAN: np.tan,
  NodeType.SQRT: np.sqrt,
  NodeType.CBRT: np.cbrt,  # real cube root, keeps the sign
  NodeType.SQUARE: np.square,
}

FLOAT_MAX = float(np.finfo(np.float64).max)


@numba.njit(cache=True)
def finite_min_max(values):
  lo = FLOAT_MAX
  hi = -FLOAT_MAX
  for v in values:
    if not np.isfinite(v):
      continue
    if v < lo:
      lo = v
    if v > hi:
      hi = v
  return lo, hi


@numba.njit(cache=True)
def limit_to_range(values, lo, hi):
  # halves first: lo + hi overflows when both sit near the float limit
  mid = lo * 0.5 + hi * 0.5
  for i in range(values.shape[0]):
    v = values[i]
    if np.isfinite(v):
      if v < lo:
        values[i] = lo
      elif v > hi:
        values[i] = hi
    else:
      values[i] = mid


@numba.njit(cache=True)
def sanitize_fast(values):
  """In-place min/max sanitization of a float64 vector"""
  lo, hi = finite_min_max(values)
  limit_to_range(values, lo, hi)
  return values
