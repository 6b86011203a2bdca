import json
import pytest
from unittest.mock import MagicMock

from modules.hpo_search_engine import ModelSpec
from modules.training_engine import TrainingEngine
from utils.cancellation import CancellationToken
from utils.exceptions import HyperparameterError, SearchCancelledError


@pytest.fixture
def train_config(tmp_path):
    return {
        'project': {'name': 'unit', 'task': 'regression'},
        'model': {
            'algorithm': 'ridge',
            'search': 'grid',
            'search_params': {'alpha': [0.1, 1.0]},
            'search_args': {'cv': 2},
        },
        'outputs': {'base_results_dir': str(tmp_path), 'save_models': True},
        '_internal_seeds': {'split': 1, 'search': 1001},
    }


def _record(engine, model_id):
    return json.loads((engine.output_dir / model_id / "model.json").read_text())


def test_train_persists_successful_model(train_config, regression_dataset, mock_logger):
    engine = TrainingEngine(train_config, mock_logger)
    model_id, outcome = engine.execute(regression_dataset, columns={'features': ['a', 'b', 'c'], 'labels': ['y']})

    assert engine.output_dir.name == "02_TrainedModels"
    assert _record(engine, model_id)['status'] == 'successful'
    hyperparams = json.loads((engine.output_dir / model_id / "hyperparams.json").read_text())
    assert hyperparams == outcome.hyperparams

def test_model_spec_argument_overrides_config(train_config, regression_dataset, mock_logger):
    engine = TrainingEngine(train_config, mock_logger)
    model_id, outcome = engine.execute(regression_dataset, ModelSpec('regression', 'xgboost', hyperparams={'max_depth': 2}))

    record = _record(engine, model_id)
    assert record['algorithm'] == 'xgboost'
    assert record['runtime'] == 'native'
    assert outcome.report is None

def test_failure_marks_record_failed(train_config, regression_dataset, mock_logger):
    train_config['model'] = {'algorithm': 'ridge', 'hyperparams': {'depth': 3}}
    engine = TrainingEngine(train_config, mock_logger)

    with pytest.raises(HyperparameterError):
        engine.execute(regression_dataset)

    records = list(engine.output_dir.glob("*/model.json"))
    assert len(records) == 1
    assert json.loads(records[0].read_text())['status'] == 'failed'

def test_cancellation_marks_record_failed(train_config, regression_dataset, mock_logger):
    token = CancellationToken()
    token.cancel("shutdown")
    engine = TrainingEngine(train_config, mock_logger)

    with pytest.raises(SearchCancelledError):
        engine.execute(regression_dataset, token=token)

    record = json.loads(next(engine.output_dir.glob("*/model.json")).read_text())
    assert record['status'] == 'failed'

def test_save_models_off_skips_store(train_config, regression_dataset, mock_logger):
    train_config['outputs']['save_models'] = False
    store = MagicMock()
    engine = TrainingEngine(train_config, mock_logger, store=store)

    model_id, outcome = engine.execute(regression_dataset)

    assert model_id is None
    assert outcome.estimator is not None
    store.create.assert_not_called()
