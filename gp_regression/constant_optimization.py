"""
Local search over tree coefficients.

Constants and variable weights are refined by nonlinear least squares
(scipy's trust-region reflective solver). The residual function is the batch
interpreter minus the target; its jacobian comes either from the same
interpreter run on dual numbers or from finite differences.
"""

import threading
import warnings
from contextlib import contextmanager
from dataclasses import dataclass

import numpy as np
from scipy.optimize import least_squares
from threadpoolctl import threadpool_limits

from .dataset import Dataset, Range
from .evaluation import Dual, evaluate
from .expression_tree import Tree
from .logging_system import LogLevel, get_logger

_limit_lock = threading.Lock()
_limit_users = 0
_limiter = None


@contextmanager
def single_threaded_blas():
    """Hold BLAS at one thread while any solve is running.

    threadpoolctl limits are process wide, so concurrent solves share one
    limiter and the original limits come back when the last solve exits.
    """
    global _limit_users, _limiter
    with _limit_lock:
        if _limit_users == 0:
            _limiter = threadpool_limits(limits=1)
        _limit_users += 1
    try:
        yield
    finally:
        with _limit_lock:
            _limit_users -= 1
            if _limit_users == 0:
                _limiter.restore_original_limits()
                _limiter = None


@dataclass
class OptimizationSummary:
    iterations: int = 0
    initial_cost: float = 0.0
    final_cost: float = 0.0
    converged: bool = False
    message: str = ""


class ParameterizedEvaluation:
    """Residual functor: tree output for candidate coefficients minus target"""

    def __init__(self, tree: Tree, dataset: Dataset, target, rows: Range, batch_size=None):
        target = np.asarray(target, dtype=np.float64)
        if target.shape != (rows.size,):
            raise ValueError(f"Expected {rows.size} target values, got {target.shape}")
        self.tree = tree
        self.dataset = dataset
        self.target = target
        self.rows = rows
        self.batch_size = batch_size

    @property
    def num_residuals(self) -> int:
        return self.rows.size

    def __call__(self, parameters):
        # works for float vectors and for Dual vectors alike
        estimated = evaluate(self.tree, self.dataset, self.rows, parameters, batch_size=self.batch_size)
        return estimated - self.target

    def jacobian(self, parameters) -> np.ndarray:
        return self(Dual.seed(parameters)).grad


def optimize(tree: Tree, dataset: Dataset, target, rows: Range, iterations: int = 50,
             write_back: bool = True, report: bool = False, autodiff: bool = True,
             batch_size=None) -> OptimizationSummary:
    """Fit the coefficients of `tree` to `target` over `rows`.

    Running out of iterations is not an error: the summary reports whatever
    the solver reached. A fit that starts or ends on non-finite values is
    reported as not converged and leaves the tree alone; otherwise the tree
    only changes when `write_back` is set.
    """
    coefficients = tree.coefficients()
    if coefficients.size == 0 or iterations < 1 or rows.size == 0:
        return OptimizationSummary()

    logger = get_logger()
    if report:
        logger.coefficients("x_0", coefficients, force=True)

    residual = ParameterizedEvaluation(tree, dataset, target, rows, batch_size=batch_size)
    with np.errstate(over='ignore'):
        initial = residual(coefficients)
        initial_cost = 0.5 * float(np.dot(initial, initial))

    if not (np.all(np.isfinite(coefficients)) and np.isfinite(initial_cost)):
        logger.debug(f"Local search skipped, initial cost {initial_cost}")
        return OptimizationSummary(initial_cost=initial_cost, final_cost=initial_cost,
                                   message="non-finite starting point")

    # callers already parallelize over the population
    try:
        with single_threaded_blas(), warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            result = least_squares(
                residual,
                coefficients,
                jac=residual.jacobian if autodiff else '2-point',
                method='trf',
                max_nfev=iterations,
            )
    except (np.linalg.LinAlgError, ValueError) as exc:
        # non-finite jacobians make the solver's decompositions give up
        logger.info(f"Local search failed: {exc}", LogLevel.DETAILED)
        return OptimizationSummary(initial_cost=initial_cost, final_cost=initial_cost, message=str(exc))

    finite = bool(np.all(np.isfinite(result.x)) and np.isfinite(result.cost))
    if not finite:
        logger.info(f"Local search diverged after {result.nfev} evaluations", LogLevel.DETAILED)
    summary = OptimizationSummary(
        iterations=int(result.njev) if result.njev is not None else int(result.nfev),
        initial_cost=initial_cost,
        final_cost=float(result.cost) if finite else initial_cost,
        converged=finite and bool(result.status > 0),
        message=str(result.message) if finite else "solver diverged",
    )

    if report:
        logger.optimization_report(summary.iterations, summary.initial_cost, summary.final_cost,
                                   summary.converged, summary.message, force=True)
        logger.coefficients("x_final", result.x, force=True)

    # a diverged solve leaves the coefficients alone
    if write_back and finite:
        tree.set_coefficients(result.x)
    return summary


def optimize_autodiff(tree: Tree, dataset: Dataset, target, rows: Range, *args, **kwargs) -> OptimizationSummary:
    return optimize(tree, dataset, target, rows, *args, autodiff=True, **kwargs)


def optimize_numeric(tree: Tree, dataset: Dataset, target, rows: Range, *args, **kwargs) -> OptimizationSummary:
    return optimize(tree, dataset, target, rows, *args, autodiff=False, **kwargs)
