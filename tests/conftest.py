import logging
import numpy as np
import pytest
from unittest.mock import MagicMock

from modules.data_manager import Dataset


@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def regression_dataset():
    """60 rows of a noisy linear target over three features; last 15 rows are the test split."""
    rng = np.random.default_rng(0)
    x = rng.normal(size=(60, 3))
    y = x @ np.array([1.5, -2.0, 0.5]) + 0.1 * rng.normal(size=60)
    return Dataset.from_arrays(x, y, test_size=0.25, test_sampling='last')


@pytest.fixture
def classification_dataset():
    """Two well separated classes, alternating rows so every fold sees both."""
    rng = np.random.default_rng(1)
    labels = np.tile([0.0, 1.0], 40)
    x = rng.normal(size=(80, 2)) + labels[:, None] * 4.0
    return Dataset.from_arrays(x, labels, test_size=0.25, test_sampling='last')
