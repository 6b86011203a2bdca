import pytest

from modules.hpo_search_engine import ModelSpec
from utils.enums import Runtime, Search, Task
from utils.exceptions import ConfigurationError


def test_from_config():
    config = {
        'project': {'task': 'classification'},
        'model': {
            'algorithm': 'xgboost',
            'runtime': 'native',
            'search': 'random',
            'search_params': {'max_depth': [2, 3]},
        },
    }
    spec = ModelSpec.from_config(config)

    assert spec.task is Task.classification
    assert spec.runtime is Runtime.native
    assert spec.search is Search.random
    assert spec.hyperparams == {}
    assert spec.to_dict()['search'] == 'random'

def test_search_arg_defaults():
    assert ModelSpec('regression', 'ridge').resolve_search_args() == {'n_iter': 10, 'cv': 1}
    assert ModelSpec('regression', 'ridge', search='grid').resolve_search_args() == {'n_iter': 10, 'cv': 5}

def test_explicit_search_args():
    spec = ModelSpec('regression', 'ridge', search='random', search_args={'n_iter': 3, 'cv': 0})
    assert spec.resolve_search_args() == {'n_iter': 3, 'cv': 0}

@pytest.mark.parametrize("search_args, message", [
    ({'folds': 3}, "Unknown search_args"),
    ({'cv': '3'}, "must be an integer"),
    ({'cv': True}, "must be an integer"),
    ({'n_iter': 0}, "n_iter"),
    ({'cv': -1}, "'cv' must be >= 0"),
])
def test_invalid_search_args(search_args, message):
    with pytest.raises(ConfigurationError, match=message):
        ModelSpec('regression', 'ridge', search_args=search_args).resolve_search_args()

def test_mappings_must_be_objects():
    with pytest.raises(ConfigurationError, match="hyperparams must be a JSON object"):
        ModelSpec('regression', 'ridge', hyperparams=[1, 2])

def test_algorithm_required():
    with pytest.raises(ConfigurationError, match="algorithm"):
        ModelSpec('regression', '')
