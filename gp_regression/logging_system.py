"""
Logging System for the GP Regression Core

Centralized logger with verbosity levels. The evaluation core is quiet by
default; local search reports and fatal evaluator conditions go through here.
"""

import logging
import sys
from typing import Optional, Sequence
from enum import Enum
from datetime import datetime


class LogLevel(Enum):
    """Enumeration of logging levels"""
    SILENT = 0      # No output except critical errors
    MINIMAL = 1     # Warnings and critical info
    MODERATE = 2    # Key milestones
    DETAILED = 3    # Local search reports
    VERBOSE = 4     # All information including debug details


class GPRegressionLogger:
    """
    Centralized logger with level-aware filtering
    """

    def __init__(self, log_level: LogLevel = LogLevel.MINIMAL,
                 log_to_file: bool = False, log_file_path: Optional[str] = None):
        self.log_level = log_level
        self.log_to_file = log_to_file

        self.logger = logging.getLogger('gp_regression')
        self.logger.setLevel(logging.DEBUG)
        self.logger.handlers.clear()
        self.logger.propagate = False

        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

        if self.log_level != LogLevel.SILENT:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if log_to_file:
            if log_file_path is None:
                log_file_path = f"gp_regression_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
            file_handler = logging.FileHandler(log_file_path)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def _should_log(self, required_level: LogLevel) -> bool:
        return self.log_level.value >= required_level.value

    def critical(self, message: str):
        """Logged whenever a handler is attached"""
        self.logger.critical(message)

    def info(self, message: str, required_level: LogLevel = LogLevel.MODERATE):
        if self._should_log(required_level):
            self.logger.info(message)

    def debug(self, message: str):
        if self._should_log(LogLevel.VERBOSE):
            self.logger.debug(message)

    def coefficients(self, label: str, values: Sequence[float], force: bool = False):
        """Log a coefficient vector, e.g. before and after local search"""
        if force or self._should_log(LogLevel.DETAILED):
            formatted = " ".join(f"{v:.6g}" for v in values)
            self.logger.info(f"{label}: {formatted}")

    def optimization_report(self, iterations: int, initial_cost: float, final_cost: float,
                            converged: bool, message: str = "", force: bool = False):
        """Brief one-line local search report"""
        if not (force or self._should_log(LogLevel.DETAILED)):
            return
        status = "CONVERGENCE" if converged else "NO_CONVERGENCE"
        line = (f"Local search: iterations={iterations} "
                f"initial_cost={initial_cost:.6e} final_cost={final_cost:.6e} "
                f"termination={status}")
        if message:
            line += f" ({message})"
        self.logger.info(line)


_global_logger: Optional[GPRegressionLogger] = None


def get_logger() -> GPRegressionLogger:
    """Get or create the global logger instance"""
    global _global_logger
    if _global_logger is None:
        _global_logger = GPRegressionLogger()
    return _global_logger


def set_log_level(level: LogLevel):
    """Set the global logging level"""
    global _global_logger
    if _global_logger is None:
        _global_logger = GPRegressionLogger(log_level=level)
    else:
        _global_logger.log_level = level


def configure_logging(log_level: LogLevel = LogLevel.MINIMAL,
                      log_to_file: bool = False,
                      log_file_path: Optional[str] = None) -> GPRegressionLogger:
    """Configure the global logging system"""
    global _global_logger
    _global_logger = GPRegressionLogger(
        log_level=log_level,
        log_to_file=log_to_file,
        log_file_path=log_file_path
    )
    return _global_logger


def log_critical(message: str):
    get_logger().critical(message)
