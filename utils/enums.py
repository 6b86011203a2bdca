"""Closed vocabularies shared by configuration, backends and the model store."""

from enum import Enum
from typing import Optional, Union

from utils.exceptions import ConfigurationError


class _StrEnum(str, Enum):

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Union[str, "_StrEnum"]):
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            choices = [member.value for member in cls]
            raise ConfigurationError(f"Unknown {cls.__name__.lower()} {value!r}. Expected one of {choices}.")


class Task(_StrEnum):
    regression = "regression"
    classification = "classification"


class Runtime(_StrEnum):
    python = "python"   # scikit-learn estimator API
    native = "native"   # XGBoost learning API (Booster / DMatrix)


class Search(_StrEnum):
    grid = "grid"
    random = "random"

    @classmethod
    def parse_optional(cls, value) -> Optional["Search"]:
        if value is None or value == "none":
            return None
        return cls.parse(value)


class Status(_StrEnum):
    in_progress = "in_progress"
    successful = "successful"
    failed = "failed"
