from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from .errors import GenerationTimeoutError

Clock = Callable[[], float]


@dataclass(frozen=True, slots=True)
class Deadline:
    """Cooperative wall-clock budget for one ``generate`` call.

    ``clock`` returns seconds (``time.monotonic`` by default); tests inject a
    fake to drive expiry without sleeping.
    """

    timeout_ms: int | None
    started_at: float
    clock: Clock = time.monotonic

    @classmethod
    def start(cls, timeout_ms: int | None, clock: Clock = time.monotonic) -> Deadline:
        return cls(timeout_ms=timeout_ms, started_at=clock(), clock=clock)

    def elapsed_ms(self) -> float:
        return (self.clock() - self.started_at) * 1000.0

    def expired(self) -> bool:
        if self.timeout_ms is None:
            return False
        return self.elapsed_ms() >= self.timeout_ms

    def check(self, stage: str) -> None:
        if self.expired():
            raise GenerationTimeoutError(self.timeout_ms or 0, stage)
