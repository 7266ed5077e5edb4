"""Tagged success/failure result returned across the repository boundary"""
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar, Union

from ..errors import CardSnapError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False

    @property
    def data_or_none(self) -> Optional[T]:
        return self.data

    @property
    def error_or_none(self) -> Optional[CardSnapError]:
        return None

    def map(self, fn: Callable[[T], U]) -> "Success[U]":
        return Success(fn(self.data))


@dataclass(frozen=True)
class Failure:
    error: CardSnapError

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True

    @property
    def data_or_none(self) -> None:
        return None

    @property
    def error_or_none(self) -> Optional[CardSnapError]:
        return self.error

    def map(self, fn: Callable) -> "Failure":
        return self


Result = Union[Success[T], Failure]
