import itertools
import math
import numpy as np
from typing import Any, Dict, List, Mapping, Optional

from utils.enums import Search
from utils.exceptions import ConfigurationError
from utils import constants

Hyperparams = Dict[str, Any]


def _candidate_lists(hyperparams: Mapping[str, Any], search_params: Mapping[str, Any]):
    names: List[str] = []
    candidates: List[List[Any]] = []

    for name, value in hyperparams.items():
        names.append(name)
        candidates.append([value])

    for name, values in search_params.items():
        if name in hyperparams:
            raise ConfigurationError(
                f"`{name}` cannot be present in both hyperparams and search_params. Please choose one or the other."
            )
        if not isinstance(values, (list, tuple)):
            raise ConfigurationError(f"search_params `{name}` must be a list of candidate values, got {values!r}")
        if len(values) == 0:
            raise ConfigurationError(f"search_params `{name}` has no candidate values")
        names.append(name)
        candidates.append(list(values))

    return names, candidates


def grid_size(hyperparams: Mapping[str, Any], search_params: Mapping[str, Any]) -> int:
    """Number of configurations in the full grid, without building it."""
    _, candidates = _candidate_lists(hyperparams, search_params)
    return math.prod(len(c) for c in candidates)


def search_space_size(hyperparams: Mapping[str, Any],
                      search_params: Mapping[str, Any],
                      search: Optional[Search] = None,
                      n_iter: int = constants.DEFAULT_N_ITER) -> int:
    """Number of configurations ``build_search_space`` returns for these arguments."""
    total = grid_size(hyperparams, search_params)
    if search == Search.random:
        return min(n_iter, total)
    return total


def _grid_member(names: List[str], candidates: List[List[Any]], index: int) -> Hyperparams:
    # Mixed-radix decoding of a grid position; the last name is the fastest digit.
    values = []
    for options in reversed(candidates):
        index, digit = divmod(index, len(options))
        values.append(options[digit])
    return dict(zip(names, reversed(values)))


def build_search_space(hyperparams: Optional[Mapping[str, Any]] = None,
                       search_params: Optional[Mapping[str, Any]] = None,
                       search: Optional[Search] = None,
                       n_iter: int = constants.DEFAULT_N_ITER,
                       seed: Optional[int] = None) -> List[Hyperparams]:
    """
    Expand fixed and searched hyperparameters into the configurations to try.

    The grid is the Cartesian product of one candidate list per name, in insertion
    order (fixed names first, then searched names; the first name varies slowest).
    Random search draws ``min(n_iter, len(grid))`` distinct grid positions and decodes
    only those, so a large grid is never materialised. Without any names the result
    is a single empty configuration.
    """
    hyperparams = hyperparams or {}
    search_params = search_params or {}
    names, candidates = _candidate_lists(hyperparams, search_params)

    if search == Search.random:
        if n_iter < 1:
            raise ConfigurationError(f"n_iter must be >= 1, got {n_iter}")
        total = math.prod(len(c) for c in candidates)
        rng = np.random.default_rng(seed)
        picks = rng.choice(total, size=min(n_iter, total), replace=False)
        return [_grid_member(names, candidates, int(i)) for i in picks]

    return [dict(zip(names, values)) for values in itertools.product(*candidates)]
