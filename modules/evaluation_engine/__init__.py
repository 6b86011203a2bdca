"""
Evaluation Engine Module
========================

Responsibility:
- Regression metrics (r2, mean absolute / squared error).
- Classification metrics (f1, precision, recall, accuracy, mcc; roc_auc and log_loss for binary tasks).
"""

from .scoring import score, regression_metrics, classification_metrics

__all__ = ['score', 'regression_metrics', 'classification_metrics']
