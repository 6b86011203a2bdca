import abc
import io
import joblib
import numpy as np
from typing import Any, Callable, Dict, Type

from modules.data_manager.dataset import Dataset
from utils.enums import Runtime
from utils.exceptions import ModelTrainingError, PredictionError

# Signature of every backend entry point resolved by ModelFactory.
FitFunction = Callable[[Dataset, Dict[str, Any]], "Estimator"]

# Closed set of estimator variants keyed by kind, filled in by the backend modules.
ESTIMATOR_TYPES: Dict[str, Type["Estimator"]] = {}


def register_estimator(kind: str, runtime: Runtime):
    def decorator(cls):
        ESTIMATOR_TYPES[kind] = cls
        cls.kind = kind
        cls.runtime = runtime
        return cls
    return decorator


class Estimator(abc.ABC):
    """
    A trained model behind the uniform capability contract.

    Backends implement ``predict_batch`` and the payload hooks; everything else
    (single-row prediction, byte serialization, dispatch on load) lives here.
    """

    kind: str
    runtime: Runtime

    def __init__(self, num_features: int, num_labels: int = 1):
        self.num_features = num_features
        self.num_labels = num_labels

    def predict(self, features) -> float:
        """Predict a single row."""
        preds = self.predict_batch(features)
        if preds.size == 0:
            raise PredictionError("Cannot predict from an empty row.")
        return float(preds[0])

    def predict_batch(self, features) -> np.ndarray:
        """
        Predict a flattened, row-major batch of rows.

        Returns one value per row (``num_labels`` values per row for multi-output
        models, flattened in row order).
        """
        rows = self._as_rows(features)
        if len(rows) == 0:
            return np.empty(0, dtype=np.float64)
        return np.asarray(self._predict_rows(rows), dtype=np.float64).ravel()

    @abc.abstractmethod
    def _predict_rows(self, rows: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    @abc.abstractmethod
    def _payload(self) -> Dict[str, Any]:
        """Picklable state needed to rebuild this estimator."""
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def _from_payload(cls, payload: Dict[str, Any]) -> "Estimator":
        raise NotImplementedError

    def _as_rows(self, features) -> np.ndarray:
        flat = np.asarray(features, dtype=np.float32).ravel()
        if flat.size % self.num_features != 0:
            raise PredictionError(
                f"Expected a multiple of {self.num_features} feature values, got {flat.size}."
            )
        return flat.reshape(-1, self.num_features)

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        payload = {
            'kind': self.kind,
            'runtime': self.runtime.value,
            'num_features': self.num_features,
            'num_labels': self.num_labels,
            **self._payload(),
        }
        joblib.dump(payload, buffer)
        return buffer.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> "Estimator":
        """Rebuild an estimator serialized by ``to_bytes``, whatever its runtime."""
        try:
            payload = joblib.load(io.BytesIO(data))
        except Exception as e:
            raise ModelTrainingError(f"Failed to load estimator: {e}") from e

        if not isinstance(payload, dict) or 'kind' not in payload:
            raise ModelTrainingError("Invalid estimator payload")

        estimator_cls = ESTIMATOR_TYPES.get(payload['kind'])
        if estimator_cls is None:
            raise ModelTrainingError(f"No estimator type registered for kind {payload['kind']!r}")
        if cls is not Estimator and not issubclass(estimator_cls, cls):
            raise ModelTrainingError(f"Payload holds a {estimator_cls.__name__}, not a {cls.__name__}")
        return estimator_cls._from_payload(payload)
