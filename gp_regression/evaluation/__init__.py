"""Tree evaluation: the batch interpreter and its numeric fields."""

from .dual import Dual, primal
from .interpreter import evaluate, sanitize, UnknownNodeTypeError

__all__ = ['Dual', 'primal', 'evaluate', 'sanitize', 'UnknownNodeTypeError']
