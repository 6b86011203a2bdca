"""
Custom exception hierarchy for the Model Search Trainer.
"""

class ModelSearchException(Exception):
    """Base exception for all system errors."""
    pass

class ConfigurationError(ModelSearchException):
    """Configuration validation failed."""
    pass

class HyperparameterError(ConfigurationError):
    """A hyperparameter name or value is not accepted by the backend."""
    pass

class UnsupportedAlgorithmError(ConfigurationError):
    """No backend implements the requested runtime/task/algorithm combination."""
    pass

class DataValidationError(ModelSearchException):
    """Data validation failed."""
    pass

class ModelTrainingError(ModelSearchException):
    """Model training failed."""
    pass

class ScoringError(ModelSearchException):
    """Metrics could not be computed from the predictions."""
    pass

class PredictionError(ModelSearchException):
    """Prediction generation failed."""
    pass

class SearchCancelledError(ModelSearchException):
    """The search was cancelled from outside while a pass was running."""
    pass
