"""GP Regression Core

Computational core of a genetic-programming engine for symbolic regression:
postorder expression trees, a batch interpreter, coefficient local search,
fitness evaluators and budgeted subtree crossover.
"""

from .expression_tree import (
  Node, NodeType, Tree,
  subtree_start, subtree_length, child_indices, recompute
)
from .dataset import Dataset, Range, Problem, Variable, variable_hash
from .evaluation import Dual, evaluate, sanitize, UnknownNodeTypeError
from .constant_optimization import (
  OptimizationSummary, ParameterizedEvaluation,
  optimize, optimize_autodiff, optimize_numeric
)
from .fitness import (
  FitnessEvaluator, NormalizedMSEEvaluator, RSquaredEvaluator,
  FitnessResult, EvaluationCounters, evaluate_population
)
from .genetic_ops import SubtreeCrossover, select_cut_point, cross
from .config import EngineConfig, get_config, configure
from .logging_system import LogLevel, configure_logging, get_logger, set_log_level

__version__ = "0.1.0"
__all__ = [
  "Node", "NodeType", "Tree",
  "subtree_start", "subtree_length", "child_indices", "recompute",
  "Dataset", "Range", "Problem", "Variable", "variable_hash",
  "Dual", "evaluate", "sanitize", "UnknownNodeTypeError",
  "OptimizationSummary", "ParameterizedEvaluation",
  "optimize", "optimize_autodiff", "optimize_numeric",
  "FitnessEvaluator", "NormalizedMSEEvaluator", "RSquaredEvaluator",
  "FitnessResult", "EvaluationCounters", "evaluate_population",
  "SubtreeCrossover", "select_cut_point", "cross",
  "EngineConfig", "get_config", "configure",
  "LogLevel", "configure_logging", "get_logger", "set_log_level"
]
