import numpy as np
import pytest

from modules.evaluation_engine import score, regression_metrics, classification_metrics
from utils.enums import Task
from utils.exceptions import ScoringError


def test_regression_exactness():
    y = np.array([1.0, 2.5, -3.0, 4.0])
    metrics = regression_metrics(y, y.copy())
    assert metrics == {'r2': 1.0, 'mean_absolute_error': 0.0, 'mean_squared_error': 0.0}

def test_regression_values():
    metrics = regression_metrics([1.0, 2.0, 3.0], [1.0, 2.0, 4.0])
    assert metrics['mean_absolute_error'] == pytest.approx(1 / 3)
    assert metrics['mean_squared_error'] == pytest.approx(1 / 3)
    assert metrics['r2'] == pytest.approx(0.5)

def test_binary_classification_exactness():
    y = np.array([0, 1, 1, 0, 1], dtype=float)
    metrics = classification_metrics(y, y.copy(), num_distinct_labels=2)

    assert list(metrics)[:2] == ['roc_auc', 'log_loss']
    assert metrics['accuracy'] == 1.0
    assert metrics['f1'] == 1.0
    assert metrics['mcc'] == pytest.approx(1.0)
    assert metrics['roc_auc'] == 1.0

def test_binary_predictions_are_rounded():
    metrics = classification_metrics([0, 1, 1, 0], [0.2, 0.7, 0.9, 0.4], num_distinct_labels=2)
    assert metrics['accuracy'] == 1.0

def test_multiclass_uses_macro_average():
    y_true = [0, 1, 2, 2]
    y_pred = [0, 1, 1, 2]
    metrics = classification_metrics(y_true, y_pred, num_distinct_labels=3)

    assert 'roc_auc' not in metrics
    assert metrics['accuracy'] == pytest.approx(0.75)
    assert metrics['recall'] == pytest.approx((1 + 1 + 0.5) / 3)

def test_score_dispatches_on_task():
    assert 'r2' in score(Task.regression, [1.0, 2.0], [1.0, 2.0], 2)
    assert 'f1' in score('classification', [0.0, 1.0], [0.0, 1.0], 2)

@pytest.mark.parametrize("y_true, y_pred, message", [
    ([1.0, 2.0], [1.0], "differ in length"),
    ([], [], "empty"),
    ([1.0, np.nan], [1.0, 2.0], "finite"),
    ([3.0, 3.0, 3.0], [1.0, 2.0, 3.0], "zero variance"),
])
def test_regression_degenerate_inputs(y_true, y_pred, message):
    with pytest.raises(ScoringError, match=message):
        regression_metrics(y_true, y_pred)

def test_single_class_ground_truth_is_fatal_for_binary():
    with pytest.raises(ScoringError, match="roc_auc"):
        classification_metrics([1.0, 1.0], [1.0, 0.0], num_distinct_labels=2)
