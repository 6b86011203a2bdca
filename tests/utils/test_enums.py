import pytest

from utils.enums import Runtime, Search, Status, Task
from utils.exceptions import ConfigurationError


def test_parse_accepts_values_and_members():
    assert Task.parse("regression") is Task.regression
    assert Runtime.parse(Runtime.native) is Runtime.native
    assert str(Status.in_progress) == "in_progress"

def test_parse_rejects_unknown_values():
    with pytest.raises(ConfigurationError, match="Unknown task 'clustering'"):
        Task.parse("clustering")

@pytest.mark.parametrize("value", [None, "none"])
def test_search_none(value):
    assert Search.parse_optional(value) is None

def test_search_modes():
    assert Search.parse_optional("grid") is Search.grid
    with pytest.raises(ConfigurationError):
        Search.parse_optional("bayesian")
