"""
Engine configuration.

Defaults shared by the evaluator, local search and crossover. Every value can
still be overridden per call; the module-level instance only supplies what a
caller leaves out.
"""

from dataclasses import dataclass, replace
from typing import Optional

from .logging_system import LogLevel, set_log_level


@dataclass
class EngineConfig:
    batch_size: int = 64              # rows per evaluator batch, match the target's vector width
    local_iterations: int = 0         # local search iterations per fitness evaluation (0 disables)
    max_depth: int = 10
    max_length: int = 50
    internal_probability: float = 0.9 # chance crossover tries an internal node first
    autodiff: bool = True             # dual-number jacobian instead of finite differences
    log_level: LogLevel = LogLevel.MINIMAL

    def __post_init__(self):
        if not isinstance(self.batch_size, int) or self.batch_size <= 0:
            raise ValueError("batch_size must be a positive integer")
        if not isinstance(self.local_iterations, int) or self.local_iterations < 0:
            raise ValueError("local_iterations must be a non-negative integer")
        if self.max_depth < 0 or self.max_length < 0:
            raise ValueError("max_depth and max_length must be non-negative")
        if not 0.0 <= self.internal_probability <= 1.0:
            raise ValueError("internal_probability must be in [0, 1]")
        if not isinstance(self.log_level, LogLevel):
            raise TypeError("log_level must be a LogLevel")


_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get or create the default configuration"""
    global _config
    if _config is None:
        _config = EngineConfig()
    return _config


def configure(config: Optional[EngineConfig] = None, **overrides) -> EngineConfig:
    """Replace the default configuration, optionally overriding single fields"""
    global _config
    base = config if config is not None else get_config()
    _config = replace(base, **overrides)
    set_log_level(_config.log_level)
    return _config


def reset_config():
    global _config
    _config = None
