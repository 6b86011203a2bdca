"""
Data Manager Module
===================

Responsibility:
- The flat, row-major Dataset value shared by every engine.
- Train/test partitioning (first / last / random sampling).
- Loading of tabular files (CSV, Excel, Parquet) into a Dataset.
"""

from .dataset import Dataset
from .data_manager import DataManager

__all__ = ['Dataset', 'DataManager']
