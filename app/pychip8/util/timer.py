import time
from typing import Callable, Optional


class FrameTimer:
    """
    Measures one frame against a fixed budget on a monotonic clock.

    ``start`` marks the beginning of a frame; ``remaining`` is what is left of
    the budget, floored at zero so an overlong frame never yields a negative
    sleep.
    """

    def __init__(self, budget: float, clock: Callable[[], float] = time.perf_counter) -> None:
        if budget <= 0:
            raise ValueError("frame budget must be positive")
        self.budget: float = budget
        self._clock = clock
        self._started_at: Optional[float] = None
        self.overruns: int = 0

    def start(self) -> None:
        self._started_at = self._clock()

    @property
    def elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        return self._clock() - self._started_at

    def remaining(self) -> float:
        left = self.budget - self.elapsed
        if left <= 0:
            self.overruns += 1
            return 0.0
        return left

    def __repr__(self) -> str:
        return f"FrameTimer(budget={self.budget:.6f}, elapsed={self.elapsed:.6f}, overruns={self.overruns})"
