"""
Tests for the Success / Failure result types.
"""

from card_snap.errors import NotFoundError
from card_snap.models.result import Failure, Success


def test_success_accessors():
    result = Success([1, 2])

    assert result.is_success and not result.is_failure
    assert result.data_or_none == [1, 2]
    assert result.error_or_none is None


def test_failure_accessors():
    error = NotFoundError("card_1")
    result = Failure(error)

    assert result.is_failure and not result.is_success
    assert result.data_or_none is None
    assert result.error_or_none is error


def test_map_transforms_only_success():
    failure = Failure(NotFoundError("card_1"))

    assert Success(2).map(lambda value: value * 10) == Success(20)
    assert failure.map(lambda value: value * 10) is failure
