"""Tests for datasets, ranges, configuration and logging setup."""

import numpy as np
import pandas as pd
import pytest

from gp_regression import Dataset, EngineConfig, Range, configure, get_config, variable_hash
from gp_regression.logging_system import LogLevel, get_logger


class TestRange:

    def test_bounds(self):
        rows = Range(3, 4)
        assert rows.end == 7
        assert len(rows) == 4
        assert rows.slice() == slice(3, 7)

    def test_negative(self):
        with pytest.raises(ValueError):
            Range(-1, 2)
        with pytest.raises(ValueError):
            Range(0, -2)


class TestDataset:

    def test_hash_is_stable(self):
        assert variable_hash("x") == variable_hash("x")
        assert variable_hash("x") != variable_hash("y")

    def test_lookup(self):
        ds = Dataset(np.arange(6.0).reshape(3, 2), ["a", "b"])
        b = variable_hash("b")
        assert ds.get_index(b) == 1
        assert ds.variable_name(b) == "b"
        np.testing.assert_array_equal(ds.get_values("b"), [1.0, 3.0, 5.0])
        np.testing.assert_array_equal(ds.get_values(b, Range(1, 2)), [3.0, 5.0])
        assert ds.rows == 3 and ds.cols == 2
        assert ds.full_range() == Range(0, 3)

    def test_read_only(self):
        ds = Dataset(np.zeros((2, 2)), ["a", "b"])
        with pytest.raises(ValueError):
            ds.values[0, 0] = 1.0

    def test_unknown_id(self):
        ds = Dataset(np.zeros((2, 1)), ["a"])
        with pytest.raises(KeyError):
            ds.get_index(variable_hash("nope"))

    def test_name_mismatch(self):
        with pytest.raises(ValueError):
            Dataset(np.zeros((2, 2)), ["a"])
        with pytest.raises(ValueError):
            Dataset(np.zeros((2, 2)), ["a", "a"])

    def test_from_frame(self):
        frame = pd.DataFrame({"x": [1.0, 2.0], "y": [3.0, 4.0]})
        ds = Dataset.from_frame(frame)
        assert [v.name for v in ds.variables] == ["x", "y"]
        np.testing.assert_array_equal(ds.get_values("y"), [3.0, 4.0])


class TestConfig:

    def test_defaults(self):
        config = get_config()
        assert config.batch_size == 64
        assert config.local_iterations == 0
        assert config.autodiff

    @pytest.mark.parametrize("field, value", [
        ("batch_size", 0), ("local_iterations", -1), ("internal_probability", 1.5), ("max_depth", -1)
    ])
    def test_validation(self, field, value):
        with pytest.raises(ValueError):
            EngineConfig(**{field: value})

    def test_configure_sets_log_level(self):
        configure(log_level=LogLevel.VERBOSE)
        assert get_logger().log_level == LogLevel.VERBOSE
        assert get_config().log_level == LogLevel.VERBOSE
