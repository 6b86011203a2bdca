"""
Winner selection and the diagnostic search report.

The winner is a single pass, not a configuration average: the pass with the
strictly highest raw target metric wins and its own fitted estimator is kept.
"""
import numpy as np
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from modules.model_factory.estimator import Estimator


@dataclass
class PassResult:
    """One fit + score cycle for a (fold, configuration) pair."""
    fold: int
    config_index: int
    hyperparams: Dict[str, Any]
    metrics: Dict[str, float]
    fit_time: float
    score_time: float
    estimator: Optional[Estimator] = field(default=None, repr=False)


@dataclass
class SearchOutcome:
    """What the search hands to persistence."""
    estimator: Estimator
    metrics: Dict[str, Any]
    hyperparams: Dict[str, Any]
    report: Optional[Dict[str, Any]] = None
    passes: List[PassResult] = field(default_factory=list, repr=False)


def select_best(passes: Sequence[PassResult], target_metric: str) -> int:
    """Index of the pass with the strictly highest ``target_metric``; ties keep the first."""
    best_index = 0
    best_metric = float('-inf')
    for i, result in enumerate(passes):
        metric = result.metrics[target_metric]
        if metric > best_metric:
            best_index = i
            best_metric = metric
    return best_index


def build_search_report(passes: Sequence[PassResult],
                        configurations: Sequence[Dict[str, Any]],
                        n_splits: int,
                        target_metric: str,
                        best_config_index: int) -> Dict[str, Any]:
    """
    Aggregate every pass into per-configuration and per-fold statistics.

    Standard deviations are population deviations across the folds of each configuration.
    """
    n_configs = len(configurations)
    fit_times = np.zeros((n_configs, n_splits))
    score_times = np.zeros((n_configs, n_splits))
    test_scores = np.zeros((n_configs, n_splits))

    for result in passes:
        fit_times[result.config_index, result.fold] = result.fit_time
        score_times[result.config_index, result.fold] = result.score_time
        test_scores[result.config_index, result.fold] = result.metrics[target_metric]

    report: Dict[str, Any] = {
        'params': [dict(c) for c in configurations],
        'n_splits': n_splits,
        'best_index': best_config_index,
        'mean_fit_time': fit_times.mean(axis=1).tolist(),
        'std_fit_time': fit_times.std(axis=1).tolist(),
        'mean_score_time': score_times.mean(axis=1).tolist(),
        'std_score_time': score_times.std(axis=1).tolist(),
        'mean_test_score': test_scores.mean(axis=1).tolist(),
        'std_test_score': test_scores.std(axis=1).tolist(),
    }
    for k in range(n_splits):
        report[f'split{k}_test_score'] = test_scores[:, k].tolist()

    for name in configurations[best_config_index]:
        report[f'param_{name}'] = [c.get(name) for c in configurations]

    return report
