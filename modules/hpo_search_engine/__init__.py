"""
HPO Search Engine
=================

Responsibility:
- Expansion of fixed and searched hyperparameters into configurations (grid / random).
- Sequential fit + score passes over k contiguous folds or the dataset's own split.
- Single-pass winner selection and the per-configuration search report.
- Cooperative cancellation between passes.
"""

from .model_spec import ModelSpec
from .search_space import build_search_space, grid_size, search_space_size
from .search_report import PassResult, SearchOutcome, build_search_report, select_best
from .hpo_search_engine import HPOSearchEngine, SearchState

__all__ = [
    'HPOSearchEngine',
    'SearchState',
    'ModelSpec',
    'build_search_space',
    'grid_size',
    'search_space_size',
    'PassResult',
    'SearchOutcome',
    'build_search_report',
    'select_best',
]
