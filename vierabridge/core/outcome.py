"""Tagged union used as the error channel of the setup pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from vierabridge.core.errors import VieraBridgeError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: VieraBridgeError

    @property
    def message(self) -> str:
        return str(self.error)


Outcome = Union[Success[T], Failure]
