"""
life_simulator/decrements.py - Rate Providers and Decrement Arithmetic

Common protocol for mortality and lapse assumptions.

Two calling conventions, selected by the `rates_are_per_policy` flag:
- Population-level (flag False): rate depends on time only. The engine
  computes it once per step and applies it to every group.
- Per-group (flag True): rate depends on time and the policy. The engine
  computes it for every group.

A population-level provider also answers per-group queries by ignoring the
policy, so callers may always pass one.

Mathematical Framework:
- Monthly rate from annual rate: q_m = 1 - (1 - q_a)^(1/12)
- Mid-month decrements (mortality first):
    deaths = C × q_m
    lapses = (C - deaths) × w_m
    C' = C - deaths - lapses

Author: Life Simulator Project
License: MIT
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple
import numpy as np

from .policy import Policy


def to_monthly(annual_rate: float) -> float:
    """
    Convert an annual decrement rate to a monthly rate.

    Rates above 1 give nan rather than a complex number.
    """
    with np.errstate(invalid='ignore'):
        return float(1.0 - np.float64(1.0 - annual_rate) ** (1.0 / 12.0))


class RateProvider(ABC):
    """
    Abstract source of annual decrement rates.

    Subclasses implement `annual_rate`. Per-group providers set
    `rates_are_per_policy = True` and require the policy argument.
    """

    rates_are_per_policy: bool = False

    @abstractmethod
    def annual_rate(self, time: int, policy: Optional[Policy] = None) -> float:
        """Annual rate at absolute month `time` (for `policy` if per-group)."""
        pass

    def monthly_rate(self, time: int, policy: Optional[Policy] = None) -> float:
        return to_monthly(self.annual_rate(time, policy))

    def _require_policy(self, policy: Optional[Policy]) -> Policy:
        if policy is None:
            raise ValueError(
                f"{type(self).__name__} computes rates per policy; a policy is required"
            )
        return policy


def step_rates(provider: RateProvider, time: int) -> Optional[float]:
    """
    Monthly rate shared by all groups at `time`.

    Returns None for per-group providers, whose rate must be computed for
    each group with `group_rate`.
    """
    if provider.rates_are_per_policy:
        return None
    return provider.monthly_rate(time)


def group_rate(provider: RateProvider, shared_rate: Optional[float],
               time: int, policy: Policy) -> float:
    """Monthly rate for one group, reusing the shared rate when there is one."""
    if shared_rate is not None:
        return shared_rate
    return provider.monthly_rate(time, policy)


def apply_decrements(count: float, mortality_rate: float,
                     lapse_rate: float) -> Tuple[float, float, float]:
    """
    Apply deaths then lapses to a group count.

    Args:
        count: In-force count before decrements
        mortality_rate: Monthly mortality rate
        lapse_rate: Monthly lapse rate

    Returns:
        (deaths, lapses, remaining count)
    """
    deaths = count * mortality_rate
    remaining = count - deaths
    lapses = remaining * lapse_rate
    remaining -= lapses
    return deaths, lapses, remaining
