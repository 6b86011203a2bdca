"""
XGBoost learning-API backend (``native`` runtime).

Trains a ``Booster`` directly on ``DMatrix`` objects. Hyperparameters are checked
against a typed table before training: a name the selected booster does not use,
or a value of the wrong type, is rejected.
"""
import numpy as np
import xgboost as xgb
from typing import Any, Dict

from modules.data_manager.dataset import Dataset
from modules.model_factory.estimator import Estimator, register_estimator
from utils.enums import Runtime, Task
from utils.exceptions import HyperparameterError

DEFAULT_BOOST_ROUNDS = 10

# Value kinds: float, int, bool, or a tuple of accepted strings.
TREE_PARAMS = {
    'eta': float,
    'learning_rate': float,
    'gamma': float,
    'max_depth': int,
    'min_child_weight': float,
    'max_delta_step': float,
    'subsample': float,
    'colsample_bytree': float,
    'colsample_bylevel': float,
    'colsample_bynode': float,
    'lambda': float,
    'alpha': float,
    'tree_method': ('auto', 'exact', 'approx', 'hist'),
    'scale_pos_weight': float,
    'refresh_leaf': bool,
    'process_type': ('default', 'update'),
    'grow_policy': ('depthwise', 'lossguide'),
    'max_leaves': int,
    'max_bin': int,
}

LINEAR_PARAMS = {
    'lambda': float,
    'alpha': float,
    'updater': ('shotgun', 'coord_descent'),
}

DART_PARAMS = {
    **TREE_PARAMS,
    'rate_drop': float,
    'one_drop': bool,
    'skip_drop': float,
    'sample_type': ('uniform', 'weighted'),
    'normalize_type': ('tree', 'forest'),
}

# Valid for every booster; not forwarded as booster parameters.
COMMON_PARAMS = {
    'booster': ('gbtree', 'linear', 'gblinear', 'dart'),
    'n_estimators': int,
    'boost_rounds': int,
    'seed': int,
    'nthread': int,
}

BOOSTER_PARAMS = {
    'gbtree': TREE_PARAMS,
    'gblinear': LINEAR_PARAMS,
    'dart': DART_PARAMS,
}


def matches_kind(kind, value) -> bool:
    if isinstance(kind, tuple):
        return isinstance(value, str) and value in kind
    if kind is bool:
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if kind is int:
        return isinstance(value, (int, np.integer))
    return isinstance(value, (int, float, np.integer, np.floating))


def booster_parameters(hyperparams: Dict[str, Any]) -> Dict[str, Any]:
    """Validate ``hyperparams`` and translate them into XGBoost training parameters."""
    booster = hyperparams.get('booster', 'gbtree')
    if not matches_kind(COMMON_PARAMS['booster'], booster):
        raise HyperparameterError(f"Unknown hyperparameter 'booster': {booster!r}")
    booster = 'gblinear' if booster == 'linear' else booster
    table = BOOSTER_PARAMS[booster]

    params = {'booster': booster}
    for key, value in hyperparams.items():
        kind = COMMON_PARAMS.get(key, table.get(key))
        if kind is None:
            raise HyperparameterError(f"Unknown hyperparameter {key!r}: {value!r}")
        if not matches_kind(kind, value):
            raise HyperparameterError(f"Invalid value for hyperparameter {key!r}: {value!r}")
        if key in ('booster', 'n_estimators', 'boost_rounds'):
            continue
        params[key] = value
    return params


def boost_rounds(hyperparams: Dict[str, Any]) -> int:
    # n_estimators is an alias of boost_rounds
    if 'n_estimators' in hyperparams:
        return int(hyperparams['n_estimators'])
    return int(hyperparams.get('boost_rounds', DEFAULT_BOOST_ROUNDS))


@register_estimator('xgboost', Runtime.native)
class BoosterEstimator(Estimator):
    """A trained ``xgboost.Booster``."""

    def __init__(self, booster: xgb.Booster, num_features: int, num_labels: int = 1):
        super().__init__(num_features, num_labels)
        self.booster = booster

    def _predict_rows(self, rows: np.ndarray) -> np.ndarray:
        return self.booster.predict(xgb.DMatrix(rows))

    def _payload(self) -> Dict[str, Any]:
        return {'booster': bytes(self.booster.save_raw(raw_format='ubj'))}

    @classmethod
    def _from_payload(cls, payload: Dict[str, Any]) -> "BoosterEstimator":
        booster = xgb.Booster()
        booster.load_model(bytearray(payload['booster']))
        return cls(booster, payload['num_features'], payload['num_labels'])


def fit(dataset: Dataset, hyperparams: Dict[str, Any], *, task: Task) -> BoosterEstimator:
    params = booster_parameters(hyperparams)
    if task == Task.classification:
        params['objective'] = 'multi:softmax'
        params['num_class'] = dataset.num_distinct_labels
    else:
        params['objective'] = 'reg:squarederror'

    dtrain = xgb.DMatrix(dataset.train_matrix(), label=dataset.train_labels())
    booster = xgb.train(params, dtrain, num_boost_round=boost_rounds(hyperparams))
    return BoosterEstimator(booster, dataset.num_features, dataset.num_labels)


def fit_regression(dataset: Dataset, hyperparams: Dict[str, Any]) -> BoosterEstimator:
    return fit(dataset, hyperparams, task=Task.regression)


def fit_classification(dataset: Dataset, hyperparams: Dict[str, Any]) -> BoosterEstimator:
    return fit(dataset, hyperparams, task=Task.classification)
