"""
Model Factory Module
====================

Responsibility:
- The Estimator capability contract (fit / predict / predict_batch / to_bytes / from_bytes).
- scikit-learn (``python``) and XGBoost and LightGBM Booster (``native``) backends.
- The single (runtime, task, algorithm) -> fit function lookup table.
"""

from .estimator import Estimator, ESTIMATOR_TYPES
from .model_factory import ModelFactory

__all__ = ['Estimator', 'ESTIMATOR_TYPES', 'ModelFactory']
