"""
Genetic Operations Package

Recombination operators over postorder-encoded trees.
"""

from .crossover_operations import SubtreeCrossover, select_cut_point, cross

__all__ = [
    'SubtreeCrossover',
    'select_cut_point',
    'cross'
]
