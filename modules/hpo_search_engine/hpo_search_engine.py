import gc
import json
import logging
import signal
import time
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from modules.data_manager.dataset import Dataset
from modules.evaluation_engine.scoring import score
from modules.hpo_search_engine.model_spec import ModelSpec
from modules.hpo_search_engine.search_report import PassResult, SearchOutcome, build_search_report, select_best
from modules.hpo_search_engine.search_space import build_search_space
from modules.model_factory import ModelFactory
from modules.model_factory.estimator import FitFunction
from modules.split_engine import SplitEngine
from utils.cancellation import CancellationToken, cancellation_hook
from utils.error_handling import handle_engine_errors
from utils.exceptions import ConfigurationError, DataValidationError
from utils.file_io import NumpyEncoder
from utils import constants


class SearchState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


class HPOSearchEngine:
    """
    Hyperparameter search with optional k-fold cross validation.

    Passes run strictly one after another: folds outer, configurations inner.
    Any error, including external cancellation, aborts the whole search and
    nothing is returned for persistence.
    """

    def __init__(self, config: dict, logger: logging.Logger, split_engine: Optional[SplitEngine] = None):
        self.config = config
        self.logger = logger
        self.split_engine = split_engine or SplitEngine(logger)
        self.search_seed = config.get('_internal_seeds', {}).get('search')
        self.cancel_signals = self._resolve_signals(
            config.get('execution', {}).get('cancel_signals', ['SIGTERM'])
        )
        self.state = SearchState.IDLE
        self.passes: List[PassResult] = []

    @staticmethod
    def _resolve_signals(names) -> List[int]:
        signals = []
        for name in names:
            signum = getattr(signal, name, None)
            if not isinstance(signum, signal.Signals):
                raise ConfigurationError(f"Unknown cancellation signal: {name}")
            signals.append(signum)
        return signals

    @handle_engine_errors("Hyperparameter Search")
    def execute(self, dataset: Dataset, model_spec: ModelSpec,
                token: Optional[CancellationToken] = None) -> SearchOutcome:
        """
        Fit and score every (fold, configuration) pass and select the winner.

        Args:
            dataset: Source dataset; folds are derived from its training rows when cv >= 2.
            model_spec: Algorithm, task, runtime and hyperparameter search settings.
            token: Optional cancellation token shared with the caller.

        Returns:
            SearchOutcome holding the winning estimator, metrics and hyperparameters.
        """
        search_args = model_spec.resolve_search_args()
        n_iter, cv = search_args['n_iter'], search_args['cv']

        # Configuration errors surface here, before any fit.
        configurations = build_search_space(
            model_spec.hyperparams,
            model_spec.search_params,
            model_spec.search,
            n_iter=n_iter,
            seed=self.search_seed,
        )
        fit = ModelFactory.get_fit_function(model_spec.runtime, model_spec.task, model_spec.algorithm)

        if cv < 2 and dataset.num_test_rows == 0:
            raise DataValidationError("The dataset has no test rows to score against; use cv >= 2 or a test_size > 0.")

        n_splits = cv if cv >= 2 else 1
        self.logger.info(f"Hyperparameter searches: {len(configurations)}, cross validation folds: {cv}")

        token = token or CancellationToken()
        self.passes = []
        self.state = SearchState.RUNNING
        try:
            with cancellation_hook(token, self.cancel_signals, self.logger):
                for fold, view in self._views(dataset, cv):
                    for config_index, hyperparams in enumerate(configurations):
                        result = self._run_pass(fit, model_spec, view, fold, config_index, hyperparams, token)
                        self.passes.append(result)
                        gc.collect()
        except BaseException:
            self.state = SearchState.ABORTED
            self.passes = []
            gc.collect()
            raise

        self.state = SearchState.COMPLETED
        return self._finalize(model_spec, configurations, n_splits)

    def _views(self, dataset: Dataset, cv: int) -> Iterator[Tuple[int, Dataset]]:
        if cv < 2:
            # 0 or 1 folds: use the dataset's own train/test split
            yield 0, dataset
        else:
            yield from self.split_engine.folds(dataset, cv)

    def _run_pass(self, fit: FitFunction, model_spec: ModelSpec, view: Dataset, fold: int,
                  config_index: int, hyperparams: Dict[str, Any], token: CancellationToken) -> PassResult:
        token.raise_if_cancelled()
        self.logger.info(f"k = {fold}, hyperparameters: {json.dumps(hyperparams, cls=NumpyEncoder)}")

        start = time.perf_counter()
        estimator = fit(view, hyperparams)
        fit_time = time.perf_counter() - start
        token.raise_if_cancelled()

        start = time.perf_counter()
        y_hat = estimator.predict_batch(view.x_test)
        metrics = score(model_spec.task, view.y_test, y_hat, view.num_distinct_labels)
        score_time = time.perf_counter() - start
        token.raise_if_cancelled()

        metrics['fit_time'] = fit_time
        metrics['score_time'] = score_time
        self.logger.info(f"k = {fold}, metrics: {json.dumps(metrics, cls=NumpyEncoder)}")

        return PassResult(
            fold=fold,
            config_index=config_index,
            hyperparams=hyperparams,
            metrics=metrics,
            fit_time=fit_time,
            score_time=score_time,
            estimator=estimator,
        )

    def _finalize(self, model_spec: ModelSpec, configurations: List[Dict[str, Any]], n_splits: int) -> SearchOutcome:
        if len(self.passes) == 1:
            only = self.passes[0]
            return SearchOutcome(
                estimator=only.estimator,
                metrics=dict(only.metrics),
                hyperparams=dict(only.hyperparams),
                passes=list(self.passes),
            )

        target_metric = constants.TARGET_METRICS[model_spec.task.value]
        best = select_best(self.passes, target_metric)
        winner = self.passes[best]
        report = build_search_report(self.passes, configurations, n_splits, target_metric, winner.config_index)

        metrics: Dict[str, Any] = dict(winner.metrics)
        metrics[constants.SEARCH_RESULTS_KEY] = report

        # Only the winner's estimator is handed on
        for i, result in enumerate(self.passes):
            if i != best:
                result.estimator = None
        gc.collect()

        self.logger.info(
            f"Best pass: k = {winner.fold}, configuration {winner.config_index} "
            f"({target_metric} = {winner.metrics[target_metric]:.4f}), "
            f"hyperparameters: {json.dumps(winner.hyperparams, cls=NumpyEncoder)}"
        )
        return SearchOutcome(
            estimator=winner.estimator,
            metrics=metrics,
            hyperparams=dict(winner.hyperparams),
            report=report,
            passes=list(self.passes),
        )
