"""
SplitEngine for the Model Search Trainer.

Builds the k-fold cross-validation views of a Dataset. Folds are contiguous,
near-equal blocks of the training partition taken in row order (unshuffled
``KFold``, no stratification), so the reported scores only depend on the row
order produced upstream. The held-out test partition is never used here.
"""
import logging
import numpy as np
from typing import Iterator, Optional, Tuple

from sklearn.model_selection import KFold

from modules.data_manager.dataset import Dataset
from utils.exceptions import DataValidationError


class SplitEngine:
    """
    Derives cross-validation folds from a Dataset's training rows.

    Block sizes differ by at most one row: the first ``num_train_rows % cv`` blocks
    receive the extra rows.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def _splits(self, dataset: Dataset, cv: int):
        if cv < 2:
            raise DataValidationError(f"Cross validation needs at least 2 folds, got cv={cv}")
        if dataset.num_train_rows < cv:
            raise DataValidationError(
                f"Cannot build {cv} folds from {dataset.num_train_rows} training rows."
            )
        return KFold(n_splits=cv).split(dataset.train_matrix())

    def fold(self, dataset: Dataset, k: int, cv: int) -> Dataset:
        """Return a new Dataset training on every block except ``k`` and testing on block ``k``."""
        splits = list(self._splits(dataset, cv))
        if not 0 <= k < cv:
            raise DataValidationError(f"Fold index {k} is outside [0, {cv})")
        train_idx, test_idx = splits[k]
        return self._build_fold(dataset, k, cv, train_idx, test_idx)

    def folds(self, dataset: Dataset, cv: int) -> Iterator[Tuple[int, Dataset]]:
        for k, (train_idx, test_idx) in enumerate(self._splits(dataset, cv)):
            yield k, self._build_fold(dataset, k, cv, train_idx, test_idx)

    def _build_fold(self, dataset: Dataset, k: int, cv: int,
                    train_idx: np.ndarray, test_idx: np.ndarray) -> Dataset:
        x = dataset.train_matrix()
        y = dataset.y_train.reshape(dataset.num_train_rows, dataset.num_labels)

        self.logger.debug(
            f"Fold {k}/{cv}: train rows={len(train_idx)}, test rows [{test_idx[0]}, {test_idx[-1] + 1})"
        )

        return Dataset(
            x_train=x[train_idx],
            y_train=y[train_idx],
            x_test=x[test_idx],
            y_test=y[test_idx],
            num_features=dataset.num_features,
            num_labels=dataset.num_labels,
            num_rows=dataset.num_train_rows,
            num_train_rows=len(train_idx),
            num_test_rows=len(test_idx),
            num_distinct_labels=dataset.num_distinct_labels,
        )
