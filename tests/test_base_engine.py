import pytest
from unittest.mock import Mock
from modules.base.base_engine import BaseEngine

# Concrete implementation for testing purposes
class ConcreteTestEngine(BaseEngine):
    def __init__(self, config, logger, engine_dir_name):
        self._engine_dir_name_value = engine_dir_name
        super().__init__(config, logger)

    def _get_engine_directory_name(self) -> str:
        return self._engine_dir_name_value

    def execute(self, *args, **kwargs):
        pass # Not relevant for BaseEngine tests

@pytest.fixture
def mock_logger():
    """Provides a mock logger instance."""
    return Mock()

@pytest.fixture
def base_config(tmp_path):
    return {
        'outputs': {
            'base_results_dir': str(tmp_path)
        }
    }

def test_base_engine_directory_creation(base_config, mock_logger, tmp_path):
    engine = ConcreteTestEngine(base_config, mock_logger, "02_TrainedModels")

    expected_dir = tmp_path / "02_TrainedModels"
    assert engine.output_dir == expected_dir
    assert expected_dir.is_dir()
    mock_logger.info.assert_called_with(f"Output directory for ConcreteTestEngine: {expected_dir}")

def test_base_engine_skip_dir_creation(tmp_path, mock_logger):
    config = {'outputs': {'base_results_dir': str(tmp_path), 'skip_dir_creation': True}}
    engine = ConcreteTestEngine(config, mock_logger, "SKIPPED")

    assert engine.output_dir == tmp_path / "SKIPPED"
    assert not engine.output_dir.exists()
    mock_logger.info.assert_not_called()

def test_base_engine_default_results_dir(mock_logger, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    engine = ConcreteTestEngine({}, mock_logger, "ENGINE")
    assert str(engine.base_dir) == "results"
    assert (tmp_path / "results" / "ENGINE").is_dir()

def test_base_engine_is_abstract(base_config, mock_logger):
    with pytest.raises(TypeError):
        BaseEngine(base_config, mock_logger)
