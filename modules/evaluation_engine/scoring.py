"""
Task-specific metrics computed from predictions vs ground truth.

Degenerate inputs (length mismatch, empty or non-finite values, constant ground
truth) raise ScoringError instead of producing NaN or silently coerced scores.
"""
import numpy as np
from typing import Dict

from sklearn.metrics import (
    accuracy_score,
    f1_score,
    log_loss,
    matthews_corrcoef,
    mean_absolute_error,
    mean_squared_error,
    precision_score,
    r2_score,
    recall_score,
    roc_auc_score,
)

from utils.enums import Task
from utils.exceptions import ScoringError


def _validate(y_true, y_pred):
    y_true = np.asarray(y_true, dtype=np.float64).ravel()
    y_pred = np.asarray(y_pred, dtype=np.float64).ravel()
    if y_true.size != y_pred.size:
        raise ScoringError(f"Predictions ({y_pred.size}) and ground truth ({y_true.size}) differ in length.")
    if y_true.size == 0:
        raise ScoringError("Cannot score an empty test set.")
    if not (np.isfinite(y_true).all() and np.isfinite(y_pred).all()):
        raise ScoringError("Predictions and ground truth must be finite.")
    return y_true, y_pred


def regression_metrics(y_true, y_pred) -> Dict[str, float]:
    y_true, y_pred = _validate(y_true, y_pred)
    if np.ptp(y_true) == 0:
        raise ScoringError("r2 is undefined: the ground truth has zero variance.")

    return {
        'r2': float(r2_score(y_true, y_pred)),
        'mean_absolute_error': float(mean_absolute_error(y_true, y_pred)),
        'mean_squared_error': float(mean_squared_error(y_true, y_pred)),
    }


def classification_metrics(y_true, y_pred, num_distinct_labels: int) -> Dict[str, float]:
    """
    Confusion-matrix metrics on rounded class labels.

    For binary problems the raw predictions are also read as probabilities of
    class 1 to compute ``roc_auc`` and ``log_loss``.
    """
    y_true, y_pred = _validate(y_true, y_pred)
    metrics = {}

    if num_distinct_labels == 2:
        positive = y_true == 1
        if positive.all() or not positive.any():
            raise ScoringError("roc_auc is undefined: only one class is present in the ground truth.")
        probabilities = np.clip(y_pred, 0.0, 1.0)
        metrics['roc_auc'] = float(roc_auc_score(positive, probabilities))
        metrics['log_loss'] = float(log_loss(positive, probabilities, labels=[False, True]))

    labels_true = np.rint(y_true).astype(np.int64)
    labels_pred = np.rint(y_pred).astype(np.int64)
    labels = np.union1d(labels_true, labels_pred)
    if num_distinct_labels == 2 and set(labels.tolist()) <= {0, 1}:
        average = 'binary'
    else:
        average = 'macro'

    metrics['f1'] = float(f1_score(labels_true, labels_pred, average=average, zero_division=0))
    metrics['precision'] = float(precision_score(labels_true, labels_pred, average=average, zero_division=0))
    metrics['recall'] = float(recall_score(labels_true, labels_pred, average=average, zero_division=0))
    metrics['accuracy'] = float(accuracy_score(labels_true, labels_pred))
    metrics['mcc'] = float(matthews_corrcoef(labels_true, labels_pred))
    return metrics


def score(task: Task, y_true, y_pred, num_distinct_labels: int) -> Dict[str, float]:
    """Dispatch to the metric suite of ``task``."""
    if Task.parse(task) == Task.regression:
        return regression_metrics(y_true, y_pred)
    return classification_metrics(y_true, y_pred, num_distinct_labels)
