"""
scikit-learn backend (``python`` runtime).

Every algorithm maps to an estimator class per task. Hyperparameters are passed
to the constructor after their names have been checked against its signature;
scikit-learn validates value types itself at the start of ``fit``.
"""
import functools
import inspect
import lightgbm as lgb
import numpy as np
import xgboost as xgb
from typing import Any, Dict

from sklearn.base import BaseEstimator
from sklearn.ensemble import (
    AdaBoostClassifier,
    AdaBoostRegressor,
    BaggingClassifier,
    BaggingRegressor,
    ExtraTreesClassifier,
    ExtraTreesRegressor,
    GradientBoostingClassifier,
    GradientBoostingRegressor,
    HistGradientBoostingClassifier,
    HistGradientBoostingRegressor,
    RandomForestClassifier,
    RandomForestRegressor,
)
from sklearn.gaussian_process import GaussianProcessClassifier, GaussianProcessRegressor
from sklearn.kernel_ridge import KernelRidge
from sklearn.linear_model import (
    ARDRegression,
    BayesianRidge,
    ElasticNet,
    HuberRegressor,
    Lars,
    Lasso,
    LassoLars,
    LinearRegression,
    LogisticRegression,
    OrthogonalMatchingPursuit,
    Perceptron,
    QuantileRegressor,
    RANSACRegressor,
    Ridge,
    RidgeClassifier,
    SGDClassifier,
    SGDRegressor,
    TheilSenRegressor,
)
from sklearn.multioutput import MultiOutputRegressor
from sklearn.svm import SVC, SVR, LinearSVC, LinearSVR, NuSVC, NuSVR
from sklearn.utils._param_validation import InvalidParameterError

from modules.data_manager.dataset import Dataset
from modules.model_factory.estimator import Estimator, register_estimator
from utils.enums import Runtime, Task
from utils.exceptions import HyperparameterError, ModelTrainingError


REGRESSORS = {
    'linear': LinearRegression,
    'lasso': Lasso,
    'svm': SVR,
    'elastic_net': ElasticNet,
    'ridge': Ridge,
    'random_forest': RandomForestRegressor,
    'xgboost': xgb.XGBRegressor,
    'xgboost_random_forest': xgb.XGBRFRegressor,
    'lightgbm': lgb.LGBMRegressor,
    'orthogonal_matching_pursuit': OrthogonalMatchingPursuit,
    'bayesian_ridge': BayesianRidge,
    'automatic_relevance_determination': ARDRegression,
    'stochastic_gradient_descent': SGDRegressor,
    'ransac': RANSACRegressor,
    'theil_sen': TheilSenRegressor,
    'huber': HuberRegressor,
    'quantile': QuantileRegressor,
    'kernel_ridge': KernelRidge,
    'gaussian_process': GaussianProcessRegressor,
    'nu_svm': NuSVR,
    'ada_boost': AdaBoostRegressor,
    'bagging': BaggingRegressor,
    'extra_trees': ExtraTreesRegressor,
    'gradient_boosting_trees': GradientBoostingRegressor,
    'hist_gradient_boosting': HistGradientBoostingRegressor,
    'least_angle': Lars,
    'lasso_least_angle': LassoLars,
    'linear_svm': LinearSVR,
}

CLASSIFIERS = {
    'linear': LogisticRegression,
    'svm': SVC,
    'ridge': RidgeClassifier,
    'random_forest': RandomForestClassifier,
    'xgboost': xgb.XGBClassifier,
    'xgboost_random_forest': xgb.XGBRFClassifier,
    'lightgbm': lgb.LGBMClassifier,
    'stochastic_gradient_descent': SGDClassifier,
    'perceptron': Perceptron,
    'gaussian_process': GaussianProcessClassifier,
    'nu_svm': NuSVC,
    'ada_boost': AdaBoostClassifier,
    'bagging': BaggingClassifier,
    'extra_trees': ExtraTreesClassifier,
    'gradient_boosting_trees': GradientBoostingClassifier,
    'hist_gradient_boosting': HistGradientBoostingClassifier,
    'linear_svm': LinearSVC,
}

ESTIMATOR_CLASSES = {
    Task.regression: REGRESSORS,
    Task.classification: CLASSIFIERS,
}

# Regressors that fit several label columns at once; the rest are wrapped.
MULTI_OUTPUT_REGRESSORS = {
    'linear', 'lasso', 'elastic_net', 'ridge', 'random_forest', 'extra_trees',
    'kernel_ridge', 'gaussian_process', 'orthogonal_matching_pursuit',
    'least_angle', 'lasso_least_angle', 'xgboost', 'xgboost_random_forest',
}


def accepted_hyperparameters(model_class) -> set:
    """Names accepted by ``model_class``'s constructor."""
    sig = inspect.signature(model_class.__init__)
    names = {
        p.name for p in sig.parameters.values()
        if p.kind in (p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY) and p.name != 'self'
    }
    # XGBoost and LightGBM wrappers take **kwargs; their get_params() lists the real names.
    if any(p.kind == p.VAR_KEYWORD for p in sig.parameters.values()):
        names |= set(model_class().get_params(deep=False))
    return names


def validate_hyperparameters(model_class, hyperparams: Dict[str, Any]) -> None:
    accepted = accepted_hyperparameters(model_class)
    for key, value in hyperparams.items():
        if key not in accepted:
            raise HyperparameterError(f"Unknown hyperparameter for {model_class.__name__}: {key!r} = {value!r}")


@register_estimator('sklearn', Runtime.python)
class SklearnEstimator(Estimator):
    """A fitted scikit-learn compatible model."""

    def __init__(self, model: BaseEstimator, num_features: int, num_labels: int = 1):
        super().__init__(num_features, num_labels)
        self.model = model

    def _predict_rows(self, rows: np.ndarray) -> np.ndarray:
        return self.model.predict(rows)

    def _payload(self) -> Dict[str, Any]:
        return {'model': self.model}

    @classmethod
    def _from_payload(cls, payload: Dict[str, Any]) -> "SklearnEstimator":
        model = payload['model']
        if not isinstance(model, BaseEstimator):
            raise ModelTrainingError("Invalid model type in estimator payload")
        return cls(model, payload['num_features'], payload['num_labels'])


def fit(dataset: Dataset, hyperparams: Dict[str, Any], *, task: Task, algorithm: str) -> SklearnEstimator:
    model_class = ESTIMATOR_CLASSES[task][algorithm]
    validate_hyperparameters(model_class, hyperparams)

    model = model_class(**hyperparams)
    if task == Task.regression and dataset.num_labels > 1 and algorithm not in MULTI_OUTPUT_REGRESSORS:
        model = MultiOutputRegressor(model)

    try:
        model.fit(dataset.train_matrix(), dataset.train_labels())
    except InvalidParameterError as e:
        raise HyperparameterError(f"Invalid hyperparameter for {model_class.__name__}: {e}") from e

    return SklearnEstimator(model, dataset.num_features, dataset.num_labels)


def fit_function(task: Task, algorithm: str):
    """Entry point with the uniform ``fit(dataset, hyperparams)`` signature."""
    entry = functools.partial(fit, task=task, algorithm=algorithm)
    entry.__name__ = f"sklearn_{algorithm}_{task.value}"
    return entry
