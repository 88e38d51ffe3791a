"""
life_simulator/lapse.py - Lapse Assumptions

Lapse rate providers for the simulation engine. Lapses apply to the count
remaining after deaths.

Providers:
- ConstantLapse: one annual rate (population-level)
- TimeVaryingLapse: annual rate as a function of month (population-level)
- PolicyVaryingLapse: annual rate as a function of month and policy
  (per-group)

Author: Life Simulator Project
License: MIT
"""

from typing import Callable, Optional

from .decrements import RateProvider
from .policy import Policy


class LapseModel(RateProvider):
    """Base class for lapse assumptions."""
    pass


class ConstantLapse(LapseModel):
    """Single annual lapse rate."""

    def __init__(self, rate: float = 0.0):
        self.rate = rate

    def annual_rate(self, time: int, policy: Optional[Policy] = None) -> float:
        return self.rate

    def __repr__(self):
        return f"ConstantLapse({self.rate})"


class TimeVaryingLapse(LapseModel):
    """Annual lapse rate given by `f(time)`."""

    def __init__(self, f: Callable[[int], float]):
        self.f = f

    def annual_rate(self, time: int, policy: Optional[Policy] = None) -> float:
        return self.f(time)


class PolicyVaryingLapse(LapseModel):
    """Annual lapse rate given by `f(time, policy)`."""

    rates_are_per_policy = True

    def __init__(self, f: Callable[[int, Policy], float]):
        self.f = f

    def annual_rate(self, time: int, policy: Optional[Policy] = None) -> float:
        return self.f(time, self._require_policy(policy))


def graded_lapse(initial: float = 0.1, step: float = 0.02,
                 ultimate: float = 0.02) -> TimeVaryingLapse:
    """
    Lapse rate decreasing by `step` each simulation year down to `ultimate`.

    rate(t) = max(initial - step × (t // 12), ultimate)
    """
    return TimeVaryingLapse(lambda t: max(initial - step * (t // 12), ultimate))
