import numpy as np
import pandas as pd
import pytest

from modules.prediction_engine import PredictionEngine
from modules.training_engine import TrainingEngine
from utils.exceptions import ModelTrainingError, PredictionError


@pytest.fixture
def trained(tmp_path, mock_logger, regression_dataset):
    config = {
        'project': {'task': 'regression'},
        'model': {'algorithm': 'linear'},
        'outputs': {'base_results_dir': str(tmp_path)},
    }
    model_id, outcome = TrainingEngine(config, mock_logger).execute(
        regression_dataset, columns={'features': ['a', 'b', 'c'], 'labels': ['y']}
    )
    return config, model_id, outcome


def test_execute_matches_trained_estimator(trained, mock_logger, regression_dataset):
    config, model_id, outcome = trained
    preds = PredictionEngine(config, mock_logger).execute(model_id, regression_dataset.x_test)
    np.testing.assert_array_equal(preds, outcome.estimator.predict_batch(regression_dataset.x_test))

def test_predict_frame_orders_columns_and_saves(trained, mock_logger, regression_dataset, tmp_path):
    config, model_id, outcome = trained
    rows = regression_dataset.x_test.reshape(-1, regression_dataset.num_features)
    # columns deliberately shuffled and an extra column added
    df = pd.DataFrame({'c': rows[:, 2], 'extra': 1.0, 'a': rows[:, 0], 'b': rows[:, 1]})

    results = PredictionEngine(config, mock_logger).predict_frame(model_id, df)

    np.testing.assert_allclose(results['pred_y'].to_numpy(), outcome.estimator.predict_batch(rows.ravel()))
    assert (tmp_path / "03_ModelPredictions" / f"predictions_{model_id}.parquet").exists()

def test_predict_frame_missing_feature(trained, mock_logger):
    config, model_id, _ = trained
    with pytest.raises(PredictionError, match="Missing features"):
        PredictionEngine(config, mock_logger).predict_frame(model_id, pd.DataFrame({'a': [1.0], 'b': [2.0]}))

def test_execute_rejects_ragged_batch(trained, mock_logger):
    config, model_id, _ = trained
    with pytest.raises(PredictionError, match="multiple of 3"):
        PredictionEngine(config, mock_logger).execute(model_id, [1.0, 2.0, 3.0, 4.0])

def test_unknown_model(trained, mock_logger):
    config, _, _ = trained
    with pytest.raises(ModelTrainingError):
        PredictionEngine(config, mock_logger).execute("missing", [1.0, 2.0, 3.0])
