import numpy as np
from dataclasses import dataclass
from typing import Optional

from utils.exceptions import DataValidationError
from utils import constants


def _frozen(values) -> np.ndarray:
    array = np.ascontiguousarray(np.asarray(values, dtype=np.float32).ravel())
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class Dataset:
    """
    Flattened, row-major numeric features and labels split into train/test partitions.

    Every array is one-dimensional: ``x_train`` holds ``num_train_rows * num_features``
    values, ``y_train`` holds ``num_train_rows * num_labels`` values, and likewise for the
    test partition. Instances are read-only; deriving a fold builds a new Dataset.
    """
    x_train: np.ndarray
    y_train: np.ndarray
    x_test: np.ndarray
    y_test: np.ndarray
    num_features: int
    num_labels: int
    num_rows: int
    num_train_rows: int
    num_test_rows: int
    num_distinct_labels: int

    def __post_init__(self):
        for name in ('x_train', 'y_train', 'x_test', 'y_test'):
            object.__setattr__(self, name, _frozen(getattr(self, name)))

        if self.num_features < 1:
            raise DataValidationError(f"num_features must be >= 1, got {self.num_features}")
        if self.num_labels < 1:
            raise DataValidationError(f"num_labels must be >= 1, got {self.num_labels}")
        if self.num_rows != self.num_train_rows + self.num_test_rows:
            raise DataValidationError(
                f"num_rows ({self.num_rows}) != num_train_rows ({self.num_train_rows}) "
                f"+ num_test_rows ({self.num_test_rows})"
            )

        expected = {
            'x_train': self.num_train_rows * self.num_features,
            'y_train': self.num_train_rows * self.num_labels,
            'x_test': self.num_test_rows * self.num_features,
            'y_test': self.num_test_rows * self.num_labels,
        }
        for name, size in expected.items():
            actual = len(getattr(self, name))
            if actual != size:
                raise DataValidationError(f"{name} has {actual} values, expected {size}")

    def __str__(self) -> str:
        return (
            f"Dataset {{ num_features: {self.num_features}, num_labels: {self.num_labels}, "
            f"num_distinct_labels: {self.num_distinct_labels}, num_rows: {self.num_rows}, "
            f"num_train_rows: {self.num_train_rows}, num_test_rows: {self.num_test_rows} }}"
        )

    # Matrix views used by backends
    def train_matrix(self) -> np.ndarray:
        return self.x_train.reshape(self.num_train_rows, self.num_features)

    def train_labels(self) -> np.ndarray:
        if self.num_labels == 1:
            return self.y_train
        return self.y_train.reshape(self.num_train_rows, self.num_labels)

    @classmethod
    def from_arrays(cls,
                    x,
                    y,
                    test_size: float = constants.DEFAULT_TEST_SIZE,
                    test_sampling: str = constants.DEFAULT_TEST_SAMPLING,
                    seed: Optional[int] = None) -> "Dataset":
        """
        Partition a feature matrix and label vector/matrix into a Dataset.

        ``test_size`` above 1 is an absolute row count, otherwise a fraction of the rows
        (rounded to nearest). ``test_sampling`` picks which rows become the test partition:
        the last rows, the first rows, or a seeded random subset.
        """
        x = np.asarray(x, dtype=np.float32)
        y = np.asarray(y, dtype=np.float32)
        if x.ndim == 1:
            x = x.reshape(-1, 1)
        if y.ndim == 1:
            y = y.reshape(-1, 1)
        if x.ndim != 2 or y.ndim != 2:
            raise DataValidationError("Features and labels must be at most two-dimensional.")
        if len(x) != len(y):
            raise DataValidationError(f"Feature rows ({len(x)}) and label rows ({len(y)}) differ.")
        if test_sampling not in constants.TEST_SAMPLING_MODES:
            raise DataValidationError(
                f"Unknown test_sampling {test_sampling!r}. Expected one of {list(constants.TEST_SAMPLING_MODES)}."
            )

        num_rows = len(x)
        if test_size > 1.0:
            num_test_rows = int(test_size)
        else:
            num_test_rows = int(np.floor(num_rows * test_size + 0.5))

        num_train_rows = num_rows - num_test_rows
        if num_train_rows <= 0:
            raise DataValidationError(
                f"test_size = {num_test_rows} is too large. There are only {num_rows} samples."
            )

        if test_sampling == 'random':
            order = np.random.default_rng(seed).permutation(num_rows)
            x, y = x[order], y[order]
        elif test_sampling == 'first':
            order = np.r_[np.arange(num_test_rows, num_rows), np.arange(num_test_rows)]
            x, y = x[order], y[order]

        return cls(
            x_train=x[:num_train_rows],
            y_train=y[:num_train_rows],
            x_test=x[num_train_rows:],
            y_test=y[num_train_rows:],
            num_features=x.shape[1],
            num_labels=y.shape[1],
            num_rows=num_rows,
            num_train_rows=num_train_rows,
            num_test_rows=num_test_rows,
            num_distinct_labels=int(len(np.unique(y[:, 0]))),
        )
