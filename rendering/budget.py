from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import Optional

from utils.enums import RenderState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BudgetSettings:
    """
    Defaults for the iteration budget feedback loop.
    The ceiling is 2**cap, so min_cap=3 keeps it at 8 or more.
    """
    initial_budget: int = 25
    floor: int = 8
    target_duration: float = 0.5
    min_target_duration: float = 0.5
    target_step: float = 1.0
    cap: int = 3
    min_cap: int = 3


class IterationBudgetController:
    """
    Proportional controller that retunes the per-pixel iteration budget after
    each render so the next render lands near target_duration:

        budget = clamp(round(budget * target / measured), floor, 2**cap)

    It also owns the IDLE/RENDERING state. begin_render() hands out the budget
    snapshot for the render and finish_render() feeds the measured duration
    back and returns to IDLE. The budget only changes in finish_render() or
    when the cap is lowered while IDLE, so an in-flight render never sees a
    moving value.
    """

    def __init__(self, settings: Optional[BudgetSettings] = None):
        self.settings = settings or BudgetSettings()
        self._budget = int(self.settings.initial_budget)
        self._target = max(float(self.settings.target_duration),
                           self.settings.min_target_duration)
        self._cap = max(int(self.settings.cap), self.settings.min_cap)
        self._state = RenderState.IDLE
        self._lock = threading.Lock()
        self.last_duration: Optional[float] = None

    # ---- Queries --------------------------------------------------------

    @property
    def budget(self) -> int:
        return self._budget

    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def is_rendering(self) -> bool:
        return self._state == RenderState.RENDERING

    @property
    def target_duration(self) -> float:
        return self._target

    @property
    def cap(self) -> int:
        return self._cap

    @property
    def ceiling(self) -> int:
        return 2 ** self._cap

    def clamp(self, budget: int) -> int:
        return min(max(int(budget), self.settings.floor), self.ceiling)

    # ---- State machine --------------------------------------------------

    def begin_render(self) -> int:
        """IDLE -> RENDERING. Returns the budget to render with."""
        with self._lock:
            if self._state != RenderState.IDLE:
                raise RuntimeError("A render is already in flight")
            self._state = RenderState.RENDERING
            return self._budget

    def finish_render(self, duration: Optional[float]) -> int:
        """RENDERING -> IDLE, then adjusts the budget from `duration`."""
        with self._lock:
            if self._state != RenderState.RENDERING:
                raise RuntimeError("finish_render() called while idle")
            self._state = RenderState.IDLE
        return self.adjust(duration)

    def abort_render(self) -> None:
        """Return to IDLE without a measurement (failed render)."""
        with self._lock:
            self._state = RenderState.IDLE

    # ---- Feedback -------------------------------------------------------

    def adjust(self, duration: Optional[float]) -> int:
        """
        One controller step. Missing, zero, negative or NaN durations leave
        the budget unchanged.
        """
        if duration is None:
            return self._budget
        duration = float(duration)
        if math.isnan(duration) or duration <= 0.0:
            logger.debug("Skipping budget adjustment for duration %r", duration)
            return self._budget

        old = self._budget
        self.last_duration = duration
        scaled = old * self._target / duration
        # Sub-denormal durations overflow the ratio; treat as "as fast as possible"
        proposed = round(scaled) if math.isfinite(scaled) else self.ceiling
        self._budget = self.clamp(proposed)
        logger.info("Current: render=%.2fs target=%.2fs iters=%d -> %d",
                    duration, self._target, old, self._budget)
        return self._budget

    # ---- User-facing parameter steps -------------------------------------

    def increase_target(self) -> float:
        self._target += self.settings.target_step
        return self._target

    def decrease_target(self) -> float:
        self._target = max(self._target - self.settings.target_step,
                           self.settings.min_target_duration)
        return self._target

    def increase_cap(self) -> int:
        self._cap += 1
        return self._cap

    def decrease_cap(self) -> int:
        self._cap = max(self._cap - 1, self.settings.min_cap)
        # Re-clamp once the loop is running; the very first render keeps the
        # initial budget.
        if self.last_duration is not None and not self.is_rendering:
            self._budget = self.clamp(self._budget)
        return self._cap
