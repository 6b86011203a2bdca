from typing import Dict, List, Optional, Tuple

from modules.model_factory import booster_backend, lightgbm_backend, sklearn_backend
from modules.model_factory.estimator import Estimator, FitFunction
from utils.enums import Runtime, Task
from utils.exceptions import UnsupportedAlgorithmError

class ModelFactory:
    """
    Resolves (runtime, task, algorithm) to a backend fit entry point.

    The whole lookup lives in one table, so an unsupported combination fails in
    exactly one place with a message naming it.
    """

    # Algorithms that default to the native runtime when none is requested
    NATIVE_DEFAULTS = {'xgboost', 'lightgbm'}

    FIT_FUNCTIONS: Dict[Tuple[Runtime, Task, str], FitFunction] = {
        (Runtime.native, Task.regression, 'xgboost'): booster_backend.fit_regression,
        (Runtime.native, Task.classification, 'xgboost'): booster_backend.fit_classification,
        (Runtime.native, Task.regression, 'lightgbm'): lightgbm_backend.fit_regression,
        (Runtime.native, Task.classification, 'lightgbm'): lightgbm_backend.fit_classification,
        **{
            (Runtime.python, task, algorithm): sklearn_backend.fit_function(task, algorithm)
            for task, classes in sklearn_backend.ESTIMATOR_CLASSES.items()
            for algorithm in classes
        },
    }

    @classmethod
    def default_runtime(cls, algorithm: str) -> Runtime:
        """Recommended runtime for ``algorithm`` unless the caller knows better."""
        return Runtime.native if algorithm in cls.NATIVE_DEFAULTS else Runtime.python

    @classmethod
    def get_fit_function(cls, runtime: Optional[Runtime], task: Task, algorithm: str) -> FitFunction:
        runtime = Runtime.parse(runtime) if runtime is not None else cls.default_runtime(algorithm)
        task = Task.parse(task)
        fit = cls.FIT_FUNCTIONS.get((runtime, task, algorithm))
        if fit is None:
            raise UnsupportedAlgorithmError(
                f"{algorithm} does not support {task} on the {runtime} runtime. "
                f"Available: {cls.get_available_models(runtime, task)}"
            )
        return fit

    @classmethod
    def get_available_models(cls, runtime: Runtime, task: Task) -> List[str]:
        """Return the algorithms implemented for ``runtime`` and ``task``."""
        return sorted(a for (r, t, a) in cls.FIT_FUNCTIONS if r == runtime and t == task)

    @staticmethod
    def load(data: bytes) -> Estimator:
        """Deserialize an estimator produced by any backend."""
        return Estimator.from_bytes(data)
