"""
Explicit success / failure values passed between pipeline stages.

Each stage returns ``Ok(value)`` or ``Err(error)`` instead of raising, so a
stage can be exercised on its own and the orchestrator decides what a failure
means for the request.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err[E]]
