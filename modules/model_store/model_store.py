import json
import logging
import time
import uuid
import pandas as pd
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from modules.data_manager.dataset import Dataset
from modules.hpo_search_engine.model_spec import ModelSpec
from modules.hpo_search_engine.search_report import SearchOutcome
from modules.model_factory import Estimator, ModelFactory
from utils.enums import Status
from utils.exceptions import ModelTrainingError
from utils.file_io import NumpyEncoder, read_json, save_dataframe, write_json
from utils import constants


def _timestamp() -> str:
    return time.strftime("%Y-%m-%d %H:%M:%S")


class ModelStore:
    """
    Filesystem persistence for trained models.

    Each model lives in ``<root>/<model_id>/``:
    ``model.json`` (the record and its status), ``estimator.bin``,
    ``metrics.json``, ``hyperparams.json`` and, when a search ran,
    ``search_results.parquet``.
    """

    def __init__(self, root: Path, logger: Optional[logging.Logger] = None):
        self.root = Path(root)
        self.logger = logger or logging.getLogger(__name__)

    def model_dir(self, model_id: str) -> Path:
        return self.root / model_id

    def create(self, model_spec: ModelSpec, dataset: Dataset,
               columns: Optional[Dict[str, Any]] = None) -> str:
        """Register a new model in the ``in_progress`` state and return its id."""
        model_id = f"{model_spec.algorithm}_{time.strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"
        runtime = model_spec.runtime or ModelFactory.default_runtime(model_spec.algorithm)

        record = {
            'id': model_id,
            **model_spec.to_dict(),
            'runtime': runtime.value,
            'num_features': dataset.num_features,
            'num_labels': dataset.num_labels,
            'num_distinct_labels': dataset.num_distinct_labels,
            'feature_columns': list((columns or {}).get('features', [])),
            'label_columns': list((columns or {}).get('labels', [])),
            'status': Status.in_progress.value,
            'created_at': _timestamp(),
            'updated_at': _timestamp(),
        }
        write_json(record, self.model_dir(model_id) / constants.MODEL_RECORD_FILE)
        self.logger.info(f"Model record created: {model_id}")
        return model_id

    def read_record(self, model_id: str) -> Dict[str, Any]:
        path = self.model_dir(model_id) / constants.MODEL_RECORD_FILE
        if not path.exists():
            raise ModelTrainingError(f"No stored model with id {model_id!r} under {self.root}")
        return read_json(path)

    def mark_status(self, model_id: str, status: Status) -> Dict[str, Any]:
        record = self.read_record(model_id)
        record['status'] = Status.parse(status).value
        record['updated_at'] = _timestamp()
        write_json(record, self.model_dir(model_id) / constants.MODEL_RECORD_FILE)
        self.logger.info(f"Model {model_id} status: {record['status']}")
        return record

    def save_outcome(self, model_id: str, outcome: SearchOutcome) -> Path:
        """Persist the winning estimator, its metrics and hyperparameters, then mark the model successful."""
        model_dir = self.model_dir(model_id)
        self.read_record(model_id)

        with open(model_dir / constants.ESTIMATOR_FILE, 'wb') as f:
            f.write(outcome.estimator.to_bytes())
        write_json(outcome.metrics, model_dir / constants.METRICS_FILE)
        write_json(outcome.hyperparams, model_dir / constants.HYPERPARAMS_FILE)

        if outcome.report is not None:
            save_dataframe(self.report_frame(outcome.report), model_dir / constants.SEARCH_RESULTS_FILE)

        self.mark_status(model_id, Status.successful)
        self.logger.info(f"Model artifacts saved to {model_dir}")
        return model_dir

    @staticmethod
    def report_frame(report: Dict[str, Any]) -> pd.DataFrame:
        """
        One row per configuration.

        Hyperparameter values are stored as JSON text since candidates of one
        name may mix types, which Parquet columns cannot hold.
        """
        n_configs = len(report['params'])
        frame = pd.DataFrame({'config_index': range(n_configs)})
        frame['params'] = [json.dumps(p, cls=NumpyEncoder) for p in report['params']]

        for key, values in report.items():
            if key in ('params', 'n_splits', 'best_index'):
                continue
            if key.startswith('param_'):
                frame[key] = [json.dumps(v, cls=NumpyEncoder) for v in values]
            else:
                frame[key] = values

        frame['is_best'] = frame['config_index'] == report['best_index']
        frame.attrs['n_splits'] = report['n_splits']
        return frame

    def load(self, model_id: str) -> Tuple[Dict[str, Any], Estimator]:
        """Return the model record and its deserialized estimator."""
        record = self.read_record(model_id)
        if record['status'] != Status.successful.value:
            raise ModelTrainingError(f"Model {model_id!r} is not usable (status: {record['status']}).")

        path = self.model_dir(model_id) / constants.ESTIMATOR_FILE
        if not path.exists():
            raise ModelTrainingError(f"Estimator file missing for model {model_id!r}: {path}")
        estimator = ModelFactory.load(path.read_bytes())
        return record, estimator

    def read_metrics(self, model_id: str) -> Dict[str, Any]:
        return read_json(self.model_dir(model_id) / constants.METRICS_FILE)
