"""
Training Engine Module
======================

Responsibility:
- Registers a model record before training starts.
- Runs the hyperparameter search for the configured model.
- Persists the winning estimator, metrics and hyperparameters.
- Marks the record failed when anything goes wrong.
"""

from .training_engine import TrainingEngine

__all__ = ['TrainingEngine']
