"""
Model Store Module
==================

Responsibility:
- Filesystem records for trained models and their lifecycle status.
- Persistence of the winning estimator, metrics, hyperparameters and search summary.
- Loading stored estimators back for prediction.
"""

from .model_store import ModelStore

__all__ = ['ModelStore']
