"""
Dataset, row ranges and problem definition.

Columns are addressed by a stable 64-bit id derived from the column name, so
trees keep referring to the same data no matter how the columns are ordered.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

import numpy as np


def variable_hash(name: str) -> int:
    digest = hashlib.blake2b(name.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "little")


@dataclass(frozen=True)
class Range:
    """Half-open row window [start, start + size)"""
    start: int
    size: int

    def __post_init__(self):
        if self.start < 0 or self.size < 0:
            raise ValueError(f"Invalid range [{self.start}, {self.start + self.size})")

    @property
    def end(self) -> int:
        return self.start + self.size

    def slice(self) -> slice:
        return slice(self.start, self.end)

    def __len__(self) -> int:
        return self.size


@dataclass(frozen=True)
class Variable:
    name: str
    hash_value: int
    index: int


class Dataset:
    """Read-only table of named float64 columns"""

    def __init__(self, values, names: Optional[Sequence[str]] = None):
        values = np.array(values, dtype=np.float64, copy=True)
        if values.ndim == 1:
            values = values.reshape(-1, 1)
        if values.ndim != 2:
            raise ValueError("values must be a 2-D array")
        if names is None:
            names = [f"X{i}" for i in range(values.shape[1])]
        names = list(names)
        if len(names) != values.shape[1]:
            raise ValueError(f"Got {len(names)} names for {values.shape[1]} columns")
        if len(set(names)) != len(names):
            raise ValueError("Column names must be unique")

        values.setflags(write=False)
        self._values = values
        self._variables: List[Variable] = [
            Variable(name, variable_hash(name), i) for i, name in enumerate(names)
        ]
        self._by_hash: Dict[int, Variable] = {v.hash_value: v for v in self._variables}
        self._by_name: Dict[str, Variable] = {v.name: v for v in self._variables}

    @classmethod
    def from_frame(cls, frame) -> "Dataset":
        """Build from a pandas DataFrame, keeping its column names"""
        return cls(frame.to_numpy(dtype=np.float64), [str(c) for c in frame.columns])

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def rows(self) -> int:
        return self._values.shape[0]

    @property
    def cols(self) -> int:
        return self._values.shape[1]

    @property
    def variables(self) -> List[Variable]:
        return list(self._variables)

    def variable(self, key: Union[str, int]) -> Variable:
        if isinstance(key, str):
            return self._by_name[key]
        return self._by_hash[key]

    def get_index(self, hash_value: int) -> int:
        """Column index of a variable id; KeyError when it does not resolve"""
        return self._by_hash[hash_value].index

    def variable_name(self, hash_value: int) -> str:
        return self._by_hash[hash_value].name

    def get_values(self, key: Union[str, int], rows: Optional[Range] = None) -> np.ndarray:
        column = self._values[:, self.variable(key).index]
        if rows is None:
            return column
        return column[rows.slice()]

    def full_range(self) -> Range:
        return Range(0, self.rows)


@dataclass
class Problem:
    """A dataset, the column to predict and the training and test windows"""
    dataset: Dataset
    target: str
    training_range: Range
    test_range: Optional[Range] = None

    def __post_init__(self):
        self.dataset.variable(self.target)
        for rows in (self.training_range, self.test_range):
            if rows is not None and rows.end > self.dataset.rows:
                raise ValueError(f"Range [{rows.start}, {rows.end}) exceeds {self.dataset.rows} rows")

    def target_values(self, rows: Optional[Range] = None) -> np.ndarray:
        return self.dataset.get_values(self.target, rows if rows is not None else self.training_range)
