import logging
import time
from typing import Any, Dict, Optional, Tuple

from modules.base.base_engine import BaseEngine
from modules.data_manager.dataset import Dataset
from modules.hpo_search_engine import HPOSearchEngine, ModelSpec, SearchOutcome
from modules.model_factory import ModelFactory
from modules.model_store import ModelStore
from utils.cancellation import CancellationToken
from utils.enums import Status
from utils.error_handling import handle_engine_errors
from utils import constants

class TrainingEngine(BaseEngine):
    """
    Trains a model end to end: registers it, runs the hyperparameter search and
    persists the winning pass.

    The record is marked ``failed`` on any error (cancellation included) and the
    error is re-raised unchanged.
    """

    def __init__(self, config: dict, logger: logging.Logger,
                 search_engine: Optional[HPOSearchEngine] = None,
                 store: Optional[ModelStore] = None):
        super().__init__(config, logger)
        self.search_engine = search_engine or HPOSearchEngine(config, logger)
        self.store = store or ModelStore(self.output_dir, logger)
        self.save_models = config.get('outputs', {}).get('save_models', True)

    def _get_engine_directory_name(self) -> str:
        return constants.MODELS_DIR

    @handle_engine_errors("Training")
    def execute(self, dataset: Dataset, model_spec: Optional[ModelSpec] = None,
                token: Optional[CancellationToken] = None,
                columns: Optional[Dict[str, Any]] = None) -> Tuple[Optional[str], SearchOutcome]:
        """
        Train the configured model on ``dataset``.

        Args:
            dataset: Partitioned numeric data.
            model_spec: Model to train; built from the configuration when omitted.
            token: Cancellation token forwarded to the search.
            columns: Optional ``{'features': [...], 'labels': [...]}`` names kept in the record.

        Returns:
            (model_id, outcome). ``model_id`` is None when ``outputs.save_models`` is off.
        """
        model_spec = model_spec or ModelSpec.from_config(self.config)
        if model_spec.runtime is None:
            model_spec.runtime = ModelFactory.default_runtime(model_spec.algorithm)

        self.logger.info(
            f"Training {model_spec.algorithm} ({model_spec.task}, {model_spec.runtime} runtime) on {dataset}"
        )
        start_time = time.time()

        if not self.save_models:
            outcome = self.search_engine.execute(dataset, model_spec, token)
            self.logger.info(f"Training completed in {time.time() - start_time:.2f} seconds (not persisted).")
            return None, outcome

        model_id = self.store.create(model_spec, dataset, columns)
        try:
            outcome = self.search_engine.execute(dataset, model_spec, token)
            self.store.save_outcome(model_id, outcome)
        except BaseException:
            self.store.mark_status(model_id, Status.failed)
            raise

        self.logger.info(f"Training completed in {time.time() - start_time:.2f} seconds. Model id: {model_id}")
        return model_id, outcome
