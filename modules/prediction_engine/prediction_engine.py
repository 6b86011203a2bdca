import pandas as pd
import numpy as np
import logging
from typing import Any, Dict, List, Optional

from modules.base.base_engine import BaseEngine
from modules.model_store import ModelStore
from utils.exceptions import PredictionError
from utils.error_handling import handle_engine_errors
from utils.file_io import save_dataframe
from utils import constants

class PredictionEngine(BaseEngine):
    """
    Generates predictions from a stored model.
    Ensures the input has the feature layout the model was trained on.
    """

    def __init__(self, config: dict, logger: logging.Logger, store: Optional[ModelStore] = None):
        super().__init__(config, logger)
        self.store = store or ModelStore(self.base_dir / constants.MODELS_DIR, logger)

    def _get_engine_directory_name(self) -> str:
        return constants.PREDICTIONS_DIR

    @handle_engine_errors("Prediction")
    def execute(self, model_id: str, features) -> np.ndarray:
        """
        Predict a flattened, row-major batch of feature values.

        Returns one value per row (per label for multi-output models).
        """
        _, estimator = self.store.load(model_id)
        return estimator.predict_batch(features)

    @handle_engine_errors("Prediction")
    def predict_frame(self, model_id: str, data_df: pd.DataFrame) -> pd.DataFrame:
        """
        Predict every row of ``data_df``.

        When the model record carries feature names they select and order the
        columns; otherwise every column is used as-is.
        """
        record, estimator = self.store.load(model_id)
        features = self._select_features(record, data_df)

        self.logger.info(f"Generating predictions with {model_id} for {len(features)} rows...")
        values = features.astype(np.float32).to_numpy()
        if not np.isfinite(values).all():
            raise PredictionError("Input features contain missing or infinite values.")

        preds = estimator.predict_batch(values.ravel()).reshape(len(features), record['num_labels'])

        label_cols = record.get('label_columns') or [f"label_{i}" for i in range(record['num_labels'])]
        results_df = pd.DataFrame(
            {f"pred_{name}": preds[:, i] for i, name in enumerate(label_cols)},
            index=data_df.index,
        )
        results_df.insert(0, 'row_index', data_df.index)

        if self.config.get('outputs', {}).get('save_predictions', True):
            excel_copy = self.config.get('outputs', {}).get('save_excel_copy', False)
            save_path = self.output_dir / f"predictions_{model_id}.parquet"
            save_dataframe(results_df, save_path, excel_copy=excel_copy, index=False)
            self.logger.info(f"Predictions saved to {save_path}")

        return results_df

    @staticmethod
    def _select_features(record: Dict[str, Any], data_df: pd.DataFrame) -> pd.DataFrame:
        feature_cols: List[str] = record.get('feature_columns') or []
        if feature_cols:
            missing = [c for c in feature_cols if c not in data_df.columns]
            if missing:
                raise PredictionError(f"Missing features required by the model: {missing}")
            features = data_df[feature_cols]
        else:
            features = data_df

        if features.shape[1] != record['num_features']:
            raise PredictionError(
                f"Model expects {record['num_features']} features, input has {features.shape[1]}."
            )
        non_numeric = [
            c for c in features.columns
            if not (pd.api.types.is_numeric_dtype(features[c]) or pd.api.types.is_bool_dtype(features[c]))
        ]
        if non_numeric:
            raise PredictionError(f"Non-numeric feature columns: {non_numeric}")
        return features
