"""
Fitness evaluation.

Maps a tree to a scalar where lower is better: optional local search on the
coefficients, one evaluation over the training range, then an error metric.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from sklearn.metrics import mean_squared_error, r2_score

from .config import get_config
from .constant_optimization import optimize
from .dataset import Problem
from .evaluation import evaluate
from .expression_tree import Tree

WORST_FITNESS = float(np.finfo(np.float64).max)


class EvaluationCounters:
    """Totals shared by evaluators running on several threads"""

    def __init__(self):
        self._lock = threading.Lock()
        self.fitness_evaluations = 0
        self.local_evaluations = 0

    def record(self, local_iterations: int):
        with self._lock:
            self.fitness_evaluations += 1
            self.local_evaluations += local_iterations

    def reset(self):
        with self._lock:
            self.fitness_evaluations = 0
            self.local_evaluations = 0

    def snapshot(self):
        with self._lock:
            return self.fitness_evaluations, self.local_evaluations


@dataclass
class FitnessResult:
    fitness: float
    local_iterations: int = 0


def normalized_mean_squared_error(estimated, target) -> float:
    with np.errstate(all='ignore'):
        return float(mean_squared_error(target, estimated) / np.var(target))


def r_squared(estimated, target) -> float:
    return float(r2_score(target, estimated, force_finite=False))


class FitnessEvaluator:
    """Base class: local search, evaluation, metric"""

    def __init__(self, problem: Problem, iterations: Optional[int] = None,
                 counters: Optional[EvaluationCounters] = None, autodiff: Optional[bool] = None):
        config = get_config()
        if iterations is None:
            iterations = config.local_iterations
        if autodiff is None:
            autodiff = config.autodiff
        if iterations < 0:
            raise ValueError("iterations must be non-negative")
        self.problem = problem
        self.iterations = iterations
        self.counters = counters
        self.autodiff = autodiff

    def metric(self, estimated: np.ndarray, target: np.ndarray) -> float:
        raise NotImplementedError

    def evaluate(self, tree: Tree) -> FitnessResult:
        problem = self.problem
        rows = problem.training_range
        target = problem.target_values(rows)

        local_iterations = 0
        if self.iterations > 0:
            summary = optimize(tree, problem.dataset, target, rows, self.iterations,
                               write_back=True, autodiff=self.autodiff)
            local_iterations = summary.iterations

        estimated = evaluate(tree, problem.dataset, rows)
        result = FitnessResult(self.metric(estimated, target), local_iterations)
        if self.counters is not None:
            self.counters.record(local_iterations)
        return result

    def __call__(self, tree: Tree) -> float:
        return self.evaluate(tree).fitness


class NormalizedMSEEvaluator(FitnessEvaluator):
    def metric(self, estimated, target) -> float:
        nmse = normalized_mean_squared_error(estimated, target)
        if not np.isfinite(nmse):
            return WORST_FITNESS
        return nmse


class RSquaredEvaluator(FitnessEvaluator):
    lower_bound = 0.0
    upper_bound = 1.0

    def metric(self, estimated, target) -> float:
        with np.errstate(all='ignore'):
            r2 = r_squared(estimated, target)
        if not np.isfinite(r2):
            r2 = 0.0
        r2 = min(max(r2, self.lower_bound), self.upper_bound)
        return self.upper_bound - r2 + self.lower_bound


def evaluate_population(evaluator: FitnessEvaluator, trees: Sequence[Tree],
                        max_workers: Optional[int] = None) -> List[float]:
    """Evaluate independent trees concurrently, results in input order"""
    if max_workers == 1:
        return [evaluator(tree) for tree in trees]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(evaluator, trees))
