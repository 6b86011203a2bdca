import pandas as pd
import numpy as np
import logging
from pathlib import Path
from typing import List, Optional

from modules.data_manager.dataset import Dataset
from utils.exceptions import DataValidationError
from utils.error_handling import handle_engine_errors
from utils.file_io import read_dataframe
from utils import constants

class DataManager:
    """
    Turns a tabular file into the flat numeric Dataset consumed by the search.

    Only column selection, type coercion and the train/test partition happen here;
    feature engineering is the responsibility of whoever produced the file.
    """

    def __init__(self, config: dict, logger: logging.Logger):
        self.config = config
        self.logger = logger
        self.data_cfg = config.get('data', {})
        self.data: Optional[pd.DataFrame] = None
        self.feature_columns: List[str] = []
        self.label_columns: List[str] = []

    @handle_engine_errors("Data Management")
    def execute(self) -> Dataset:
        """Load the configured file and partition it into a Dataset."""
        self.logger.info("Starting Data Manager execution...")
        self.load_data()
        return self.to_dataset(self.data)

    def load_data(self) -> pd.DataFrame:
        file_path = Path(self.data_cfg['file_path'])
        if not file_path.exists():
            raise DataValidationError(f"Data file not found: {file_path}")

        self.logger.info(f"Loading data from {file_path}")
        try:
            self.data = read_dataframe(file_path)
        except ValueError as e:
            raise DataValidationError(str(e)) from e

        if self.data.empty:
            raise DataValidationError("Loaded dataframe is empty.")
        self._check_memory_budget(self.data)
        return self.data

    def _check_memory_budget(self, df: pd.DataFrame) -> None:
        """Reject frames larger than ``resources.max_memory_mb`` (set by the ConfigurationManager)."""
        limit_mb = self.config.get('resources', {}).get('max_memory_mb')
        if limit_mb is None:
            return
        used_mb = df.memory_usage(deep=True).sum() / (1024 * 1024)
        self.logger.debug(f"Loaded data uses {used_mb:.2f}MB (limit: {limit_mb}MB)")
        if used_mb > limit_mb:
            raise DataValidationError(
                f"Loaded data uses {used_mb:.1f}MB, above resources.max_memory_mb ({limit_mb}MB)."
            )

    def to_dataset(self, df: pd.DataFrame) -> Dataset:
        label_cols = list(self.data_cfg.get('label_columns', []))
        feature_cols = self._resolve_feature_columns(df, label_cols)

        self.validate_columns(df, feature_cols + label_cols)
        self.feature_columns, self.label_columns = feature_cols, label_cols
        x = self._to_numeric(df, feature_cols)
        y = self._to_numeric(df, label_cols)

        seeds = self.config.get('_internal_seeds', {})
        dataset = Dataset.from_arrays(
            x,
            y,
            test_size=self.data_cfg.get('test_size', constants.DEFAULT_TEST_SIZE),
            test_sampling=self.data_cfg.get('test_sampling', constants.DEFAULT_TEST_SAMPLING),
            seed=seeds.get('split', self.data_cfg.get('seed')),
        )
        self.logger.info(f"{dataset}")
        return dataset

    def _resolve_feature_columns(self, df: pd.DataFrame, label_cols: List[str]) -> List[str]:
        if not label_cols:
            raise DataValidationError("At least one label column must be configured.")
        configured = self.data_cfg.get('feature_columns')
        if configured:
            return list(configured)
        features = [c for c in df.columns if c not in label_cols]
        if not features:
            raise DataValidationError("No feature columns left after removing label columns.")
        return features

    def validate_columns(self, df: pd.DataFrame, columns: List[str]) -> None:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise DataValidationError(f"Missing required columns: {missing}")

        subset = df[columns]
        non_numeric = [
            c for c in columns
            if not (pd.api.types.is_numeric_dtype(subset[c]) or pd.api.types.is_bool_dtype(subset[c]))
        ]
        if non_numeric:
            raise DataValidationError(f"Non-numeric columns cannot be used: {non_numeric}")

        nan_counts = subset.isna().sum()
        if nan_counts.any():
            bad = nan_counts[nan_counts > 0].to_dict()
            raise DataValidationError(f"Missing values found: {bad}")

    @staticmethod
    def _to_numeric(df: pd.DataFrame, columns: List[str]) -> np.ndarray:
        values = df[columns].astype(np.float32).to_numpy()
        if not np.isfinite(values).all():
            raise DataValidationError(f"Infinite values found in columns {columns}")
        return values
