import numpy as np
import pytest
from sklearn.model_selection import KFold

from modules.data_manager import Dataset
from modules.split_engine import SplitEngine
from utils.exceptions import DataValidationError


@pytest.fixture
def dataset():
    # 10 training rows (labels 0..9) and 2 test rows (labels 100, 101)
    x = np.arange(24, dtype=np.float32).reshape(12, 2)
    y = np.r_[np.arange(10), [100, 101]].astype(np.float32)
    return Dataset.from_arrays(x, y, test_size=2)


@pytest.mark.parametrize("cv, sizes", [(3, [4, 3, 3]), (4, [3, 3, 2, 2]), (5, [2, 2, 2, 2, 2])])
def test_fold_blocks_near_equal_and_contiguous(dataset, cv, sizes):
    blocks = [fold.y_test.tolist() for _, fold in SplitEngine().folds(dataset, cv)]
    assert [len(b) for b in blocks] == sizes
    assert sum(blocks, []) == [float(i) for i in range(10)]

def test_fold_partitions_training_rows(dataset, mock_logger):
    fold = SplitEngine(mock_logger).fold(dataset, 1, 3)

    assert fold.y_test.tolist() == [4.0, 5.0, 6.0]
    assert fold.y_train.tolist() == [0.0, 1.0, 2.0, 3.0, 7.0, 8.0, 9.0]
    assert fold.num_rows == dataset.num_train_rows
    assert fold.num_train_rows == 7
    assert fold.num_test_rows == 3
    assert fold.num_features == dataset.num_features
    assert fold.num_distinct_labels == dataset.num_distinct_labels

def test_fold_never_touches_source(dataset):
    before = dataset.y_train.copy()
    SplitEngine().fold(dataset, 0, 2)
    np.testing.assert_array_equal(dataset.y_train, before)
    assert dataset.y_test.tolist() == [100.0, 101.0]

def test_folds_cover_every_training_row_once(dataset):
    held_out = np.concatenate([fold.y_test for _, fold in SplitEngine().folds(dataset, 4)])
    assert sorted(held_out.tolist()) == list(range(10))
    assert 100.0 not in held_out

def test_fold_keeps_features_aligned(dataset):
    fold = SplitEngine().fold(dataset, 0, 5)
    # row i has features [2i, 2i+1]
    assert fold.x_test.reshape(fold.num_test_rows, fold.num_features)[:, 0].tolist() == [0.0, 2.0]

@pytest.mark.parametrize("k, cv, message", [
    (0, 1, "at least 2 folds"),
    (3, 3, "outside"),
    (-1, 3, "outside"),
    (0, 11, "Cannot build 11 folds"),
    (-1, 11, "Cannot build 11 folds"),
])
def test_invalid_fold_requests(dataset, k, cv, message):
    with pytest.raises(DataValidationError, match=message):
        SplitEngine().fold(dataset, k, cv)

@pytest.mark.parametrize("num_rows, cv", [(10, 3), (17, 5), (45, 4)])
def test_folds_match_unshuffled_kfold(num_rows, cv):
    x = np.arange(num_rows, dtype=np.float32).reshape(-1, 1)
    ds = Dataset.from_arrays(x, np.arange(num_rows), test_size=0)

    expected = [test_idx.tolist() for _, test_idx in KFold(n_splits=cv).split(x)]
    held_out = [fold.y_test.astype(int).tolist() for _, fold in SplitEngine().folds(ds, cv)]
    assert held_out == expected
