"""
Forward-mode dual numbers over numpy arrays.

A `Dual` carries a primal value array and a gradient array with one extra
trailing axis (one slot per seeded parameter). It takes part in numpy ufunc
dispatch, so code written against float arrays with `np.sin`, `np.cbrt`, the
arithmetic operators and `np.isfinite` runs unchanged on duals and yields
exact derivatives alongside the values.
"""

import numpy as np


def _primal(x):
  return x.value if isinstance(x, Dual) else np.asarray(x, dtype=np.float64)


def _expand(x):
  # broadcast a primal against the gradient's trailing parameter axis
  return np.asarray(x)[..., np.newaxis]


class Dual:
  __slots__ = ('value', 'grad')

  # numpy must hand mixed ndarray/Dual operations to us
  __array_priority__ = 100

  def __init__(self, value, grad):
    self.value = np.asarray(value, dtype=np.float64)
    self.grad = np.asarray(grad, dtype=np.float64)

  @classmethod
  def seed(cls, x) -> 'Dual':
    """Independent variables: each entry gets a unit gradient of its own"""
    x = np.asarray(x, dtype=np.float64).ravel()
    return cls(x.copy(), np.eye(x.size))

  @classmethod
  def zeros(cls, shape, n_params: int) -> 'Dual':
    if isinstance(shape, int):
      shape = (shape,)
    return cls(np.zeros(shape), np.zeros(tuple(shape) + (n_params,)))

  @property
  def n_params(self) -> int:
    return self.grad.shape[-1]

  @property
  def shape(self):
    return self.value.shape

  def __len__(self) -> int:
    return len(self.value)

  def __repr__(self) -> str:
    return f"Dual(value={self.value!r}, grad={self.grad!r})"

  def __getitem__(self, key) -> 'Dual':
    return Dual(self.value[key], self.grad[key])

  def __setitem__(self, key, other):
    if isinstance(other, Dual):
      self.value[key] = other.value
      self.grad[key] = other.grad
    else:
      self.value[key] = other
      self.grad[key] = 0.0

  def copy(self) -> 'Dual':
    return Dual(self.value.copy(), self.grad.copy())

  # arithmetic

  def __neg__(self) -> 'Dual':
    return Dual(-self.value, -self.grad)

  def __pos__(self) -> 'Dual':
    return self

  def __add__(self, other) -> 'Dual':
    if isinstance(other, Dual):
      return Dual(self.value + other.value, self.grad + other.grad)
    return Dual(self.value + _primal(other), self.grad + np.zeros_like(_expand(_primal(other))))

  __radd__ = __add__

  def __sub__(self, other) -> 'Dual':
    return self + (-other)

  def __rsub__(self, other) -> 'Dual':
    return (-self) + other

  def __mul__(self, other) -> 'Dual':
    if isinstance(other, Dual):
      return Dual(self.value * other.value,
                  self.grad * _expand(other.value) + other.grad * _expand(self.value))
    other = _primal(other)
    return Dual(self.value * other, self.grad * _expand(other))

  __rmul__ = __mul__

  def __truediv__(self, other) -> 'Dual':
    if isinstance(other, Dual):
      quotient = self.value / other.value
      return Dual(quotient,
                  (self.grad - other.grad * _expand(quotient)) / _expand(other.value))
    other = _primal(other)
    return Dual(self.value / other, self.grad / _expand(other))

  def __rtruediv__(self, other) -> 'Dual':
    other = _primal(other)
    quotient = other / self.value
    return Dual(quotient, -self.grad * _expand(quotient / self.value))

  # numpy ufunc protocol

  def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
    if method != '__call__' or kwargs:
      return NotImplemented
    if len(inputs) == 2:
      op = _BINARY.get(ufunc)
      if op is None:
        return NotImplemented
      return op(*inputs)
    handler = _UNARY.get(ufunc)
    if handler is None:
      return NotImplemented
    return handler(inputs[0])


def _chain(x: Dual, value, derivative) -> Dual:
  return Dual(value, x.grad * _expand(derivative))


def _log(x):
  return _chain(x, np.log(x.value), 1.0 / x.value)


def _exp(x):
  e = np.exp(x.value)
  return _chain(x, e, e)


def _sin(x):
  return _chain(x, np.sin(x.value), np.cos(x.value))


def _cos(x):
  return _chain(x, np.cos(x.value), -np.sin(x.value))


def _tan(x):
  t = np.tan(x.value)
  return _chain(x, t, 1.0 + t * t)


def _sqrt(x):
  s = np.sqrt(x.value)
  return _chain(x, s, 0.5 / s)


def _cbrt(x):
  c = np.cbrt(x.value)
  return _chain(x, c, 1.0 / (3.0 * c * c))


def _square(x):
  return _chain(x, x.value * x.value, 2.0 * x.value)


def _isfinite(x):
  return np.isfinite(x.value) & np.all(np.isfinite(x.grad), axis=-1)


def _lift(x):
  return x if isinstance(x, Dual) else _primal(x)


_UNARY = {
  np.log: _log,
  np.exp: _exp,
  np.sin: _sin,
  np.cos: _cos,
  np.tan: _tan,
  np.sqrt: _sqrt,
  np.cbrt: _cbrt,
  np.square: _square,
  np.negative: lambda x: -x,
  np.isfinite: _isfinite,
}

_BINARY = {
  np.add: lambda a, b: Dual.__add__(a, b) if isinstance(a, Dual) else Dual.__radd__(b, _lift(a)),
  np.subtract: lambda a, b: Dual.__sub__(a, b) if isinstance(a, Dual) else Dual.__rsub__(b, _lift(a)),
  np.multiply: lambda a, b: Dual.__mul__(a, b) if isinstance(a, Dual) else Dual.__rmul__(b, _lift(a)),
  np.divide: lambda a, b: Dual.__truediv__(a, b) if isinstance(a, Dual) else Dual.__rtruediv__(b, _lift(a)),
}


def primal(x) -> np.ndarray:
  """Real part of any field value"""
  return _primal(x)
