"""
Prediction Engine Module
========================

Responsibility:
- Loads stored models through the ModelStore.
- Batch prediction on flattened feature values or DataFrames.
- Optional Parquet export of predictions.
"""

from .prediction_engine import PredictionEngine

__all__ = ['PredictionEngine']
