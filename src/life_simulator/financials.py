"""
life_simulator/financials.py - Financial Mathematics

Time-value-of-money helpers shared by the product models.

Mathematical Framework:
- Spot curve discounting: v(t) = (1 + s[t // 12])^(-t / 12)
  with s indexed by duration in whole years, flat beyond the curve
- Flat discounting: v(t) = ((1 + i)^(1/12))^(-t)
- Inflation: I(t) = (1 + infl)^(t / 12)
- Investment returns (log-normal walk):
    r_k = exp((mu - sigma²/2)·dt + sigma·√dt·Z_k) - 1,  Z_k ~ N(0, 1)

Author: Life Simulator Project
License: MIT
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional, Sequence
import logging

from .library import default_spot_curve

logger = logging.getLogger(__name__)


@dataclass
class SpotCurveDiscount:
    """
    Discounting from an annual zero-coupon spot curve.

    Attributes:
        spot_rates: Annual spot rates indexed by duration in whole years
    """

    spot_rates: Sequence[float] = field(default_factory=default_spot_curve)

    def __post_init__(self):
        """Validate the curve."""
        self.spot_rates = np.asarray(self.spot_rates, dtype=np.float64)
        if self.spot_rates.ndim != 1 or self.spot_rates.size == 0:
            raise ValueError(
                f"Spot curve must be a non-empty 1-D sequence, got shape {self.spot_rates.shape}"
            )
        if not np.all(np.isfinite(self.spot_rates)):
            raise ValueError("Spot curve contains non-finite values")

    def spot_rate(self, time: int) -> float:
        year = min(max(time // 12, 0), self.spot_rates.size - 1)
        return float(self.spot_rates[year])

    def discount_factor(self, time: int) -> float:
        return (1.0 + self.spot_rate(time)) ** (-time / 12)

    def discount_factor_vector(self, n_months: int) -> np.ndarray:
        """Discount factors for months 0..n_months - 1."""
        months = np.arange(n_months)
        years = np.clip(months // 12, 0, self.spot_rates.size - 1)
        return (1.0 + self.spot_rates[years]) ** (-months / 12)


@dataclass
class FlatDiscount:
    """
    Discounting at a single annual rate.

    Attributes:
        annual_rate: Annual effective discount rate
    """

    annual_rate: float = 0.02

    def __post_init__(self):
        """Validate inputs and pre-compute the monthly accumulation factor."""
        if not 0 < self.annual_rate < 0.20:
            logger.warning(f"Unusual annual discount rate: {self.annual_rate:.2%}")
        self._monthly = (1.0 + self.annual_rate) ** (1.0 / 12.0)

    def discount_factor(self, time: int) -> float:
        return self._monthly ** (-time)


def inflation_factor(inflation_rate: float, time: int) -> float:
    """Cumulative inflation from month 0 to `time`."""
    return (1.0 + inflation_rate) ** (time / 12)


def brownian_motion(n: int, mu: float = 0.02, sigma: float = 0.03,
                    dt: float = 1 / 12, seed: Optional[int] = None) -> np.ndarray:
    """
    Monthly investment returns from a geometric Brownian motion.

    Args:
        n: Number of months
        mu: Annual drift
        sigma: Annual volatility
        dt: Time step in years
        seed: Seed for numpy's default generator (None for fresh entropy)

    Returns:
        Array of n monthly returns
    """
    rng = np.random.default_rng(seed)
    shocks = rng.standard_normal(n)
    return np.exp((mu - sigma ** 2 / 2) * dt + sigma * np.sqrt(dt) * shocks) - 1.0
