import pytest
from utils.exceptions import (
    ModelSearchException,
    ConfigurationError,
    HyperparameterError,
    UnsupportedAlgorithmError,
    DataValidationError,
    ScoringError,
    SearchCancelledError,
)

def test_exception_inheritance():
    err = ConfigurationError("Test error")
    assert isinstance(err, ModelSearchException)
    assert isinstance(err, Exception)
    assert str(err) == "Test error"

@pytest.mark.parametrize("exc_class", [HyperparameterError, UnsupportedAlgorithmError])
def test_configuration_subclasses(exc_class):
    assert issubclass(exc_class, ConfigurationError)

@pytest.mark.parametrize("exc_class", [DataValidationError, ScoringError, SearchCancelledError])
def test_runtime_errors_share_base(exc_class):
    assert issubclass(exc_class, ModelSearchException)
    assert not issubclass(exc_class, ConfigurationError)
