import json
import numpy as np
import pandas as pd
import pytest
from pathlib import Path

import main

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "config" / "schema.json"


@pytest.fixture
def run_files(tmp_path):
    rng = np.random.default_rng(5)
    x = rng.normal(size=(40, 2))
    df = pd.DataFrame({'a': x[:, 0], 'b': x[:, 1], 'target': x @ np.array([2.0, -1.0])})
    data_path = tmp_path / "data.csv"
    df.to_csv(data_path, index=False)

    config = {
        "project": {"name": "cli", "task": "regression"},
        "data": {"file_path": str(data_path), "label_columns": ["target"], "test_size": 0.25, "seed": 3},
        "model": {"algorithm": "ridge", "search": "grid", "search_params": {"alpha": [0.1, 1.0]},
                  "search_args": {"cv": 2}},
        "outputs": {"base_results_dir": str(tmp_path / "results")},
        "logging": {"level": "INFO", "log_to_file": False},
    }
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(config))
    return config_path, data_path, tmp_path


def test_parse_defaults_to_train():
    args = main.parse_arguments(["--dry-run"])
    assert args.command == 'train'
    assert args.dry_run

def test_parse_predict():
    args = main.parse_arguments(["predict", "--model-dir", "m", "--model-id", "x", "--input", "f.csv"])
    assert args.command == 'predict'
    assert args.model_id == 'x'

def test_dry_run_writes_config_artifacts(run_files):
    config_path, _, tmp_path = run_files
    assert main.main(["train", "--config", str(config_path), "--schema", str(SCHEMA_PATH), "--dry-run"]) == 0
    assert (tmp_path / "results" / "01_RunConfiguration" / "config_used.json").exists()
    assert not list((tmp_path / "results" / "02_TrainedModels").iterdir())

def test_train_then_predict(run_files):
    config_path, data_path, tmp_path = run_files
    assert main.main(["--config", str(config_path), "--schema", str(SCHEMA_PATH)]) == 0

    models_dir = tmp_path / "results" / "02_TrainedModels"
    (model_dir,) = list(models_dir.iterdir())
    assert json.loads((model_dir / "model.json").read_text())['status'] == 'successful'

    code = main.main(["predict", "--model-dir", str(models_dir), "--model-id", model_dir.name,
                      "--input", str(data_path)])
    assert code == 0
    assert (tmp_path / "results" / "03_ModelPredictions" / f"predictions_{model_dir.name}.parquet").exists()

def test_configuration_error_exit_code(tmp_path):
    assert main.main(["--config", str(tmp_path / "missing.json"), "--schema", str(SCHEMA_PATH)]) == 1

def test_cancellation_exit_code(run_files, monkeypatch):
    config_path, _, _ = run_files

    def cancelled(self, *args, **kwargs):
        from utils.exceptions import SearchCancelledError
        raise SearchCancelledError("Search aborted: received signal 15")

    monkeypatch.setattr(main.TrainingEngine, "execute", cancelled)
    assert main.main(["--config", str(config_path), "--schema", str(SCHEMA_PATH)]) == 130
