"""
LightGBM learning-API backend (``native`` runtime).

Trains an ``lgb.Booster`` with ``lgb.train``. Classification uses the
``multiclass`` objective and predicts the most probable class index.
"""
import lightgbm as lgb
import numpy as np
from typing import Any, Dict

from modules.data_manager.dataset import Dataset
from modules.model_factory.booster_backend import matches_kind
from modules.model_factory.estimator import Estimator, register_estimator
from utils.enums import Runtime, Task
from utils.exceptions import HyperparameterError, ModelTrainingError

DEFAULT_BOOST_ROUNDS = 100

BOOSTER_PARAMS = {
    'boosting': ('gbdt', 'rf', 'dart'),
    'learning_rate': float,
    'num_leaves': int,
    'max_depth': int,
    'min_data_in_leaf': int,
    'min_child_samples': int,
    'min_sum_hessian_in_leaf': float,
    'bagging_fraction': float,
    'bagging_freq': int,
    'feature_fraction': float,
    'lambda_l1': float,
    'lambda_l2': float,
    'reg_alpha': float,
    'reg_lambda': float,
    'min_gain_to_split': float,
    'max_bin': int,
    'extra_trees': bool,
    'drop_rate': float,
    'seed': int,
    'num_threads': int,
    'verbose': int,
}

# Aliases of the number of boosting rounds; not forwarded as booster parameters.
ROUND_PARAMS = ('n_estimators', 'num_iterations', 'num_boost_round')


def booster_parameters(hyperparams: Dict[str, Any]) -> Dict[str, Any]:
    """Validate ``hyperparams`` and translate them into LightGBM training parameters."""
    params = {'verbose': -1}
    for key, value in hyperparams.items():
        if key in ROUND_PARAMS:
            if not matches_kind(int, value) or value < 1:
                raise HyperparameterError(f"Invalid value for hyperparameter {key!r}: {value!r}")
            continue
        kind = BOOSTER_PARAMS.get(key)
        if kind is None:
            raise HyperparameterError(f"Unknown hyperparameter {key!r}: {value!r}")
        if not matches_kind(kind, value):
            raise HyperparameterError(f"Invalid value for hyperparameter {key!r}: {value!r}")
        params[key] = value
    return params


def boost_rounds(hyperparams: Dict[str, Any]) -> int:
    for key in ROUND_PARAMS:
        if key in hyperparams:
            return int(hyperparams[key])
    return DEFAULT_BOOST_ROUNDS


@register_estimator('lightgbm', Runtime.native)
class LightGBMEstimator(Estimator):
    """A trained ``lightgbm.Booster``."""

    def __init__(self, booster: lgb.Booster, num_features: int, num_labels: int = 1,
                 task: Task = Task.regression):
        super().__init__(num_features, num_labels)
        self.booster = booster
        self.task = Task.parse(task)

    def _predict_rows(self, rows: np.ndarray) -> np.ndarray:
        preds = self.booster.predict(rows)
        if self.task == Task.classification:
            return np.argmax(preds, axis=1)
        return preds

    def _payload(self) -> Dict[str, Any]:
        return {'booster': self.booster.model_to_string(), 'task': self.task.value}

    @classmethod
    def _from_payload(cls, payload: Dict[str, Any]) -> "LightGBMEstimator":
        booster = lgb.Booster(model_str=payload['booster'])
        return cls(booster, payload['num_features'], payload['num_labels'], payload['task'])


def fit(dataset: Dataset, hyperparams: Dict[str, Any], *, task: Task) -> LightGBMEstimator:
    if dataset.num_labels > 1:
        raise ModelTrainingError(f"LightGBM trains a single label column, got {dataset.num_labels}.")

    params = booster_parameters(hyperparams)
    if task == Task.classification:
        params['objective'] = 'multiclass'
        params['num_class'] = dataset.num_distinct_labels
    else:
        params['objective'] = 'regression'

    train_set = lgb.Dataset(dataset.train_matrix(), label=dataset.train_labels())
    booster = lgb.train(params, train_set, num_boost_round=boost_rounds(hyperparams))
    return LightGBMEstimator(booster, dataset.num_features, dataset.num_labels, task)


def fit_regression(dataset: Dataset, hyperparams: Dict[str, Any]) -> LightGBMEstimator:
    return fit(dataset, hyperparams, task=Task.regression)


def fit_classification(dataset: Dataset, hyperparams: Dict[str, Any]) -> LightGBMEstimator:
    return fit(dataset, hyperparams, task=Task.classification)
