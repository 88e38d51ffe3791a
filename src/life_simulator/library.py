"""
life_simulator/library.py - Built-in Actuarial Tables

Default assumptions used when a model is built without explicit tables.

EMBEDDED TABLES:
- Select & ultimate annual mortality (unisex), attained ages 18-120,
  duration columns 0-5 (column 5 is the ultimate column)
- Annual zero-coupon spot rate curve, durations 0-150 years

Mathematical Framework:
- Ultimate rates: Gompertz-Makeham q(x) = a + b × c^x, capped at 1
- Select rates: q(x, d) = q(x) × select_factor[d]
- Terminal age: q(120, d) = 1 for every duration
- Spot curve: s(y) = s_inf × (1 - exp(-y / tau))

Author: Life Simulator Project
License: MIT
"""

import numpy as np


# =============================================================================
# SELECT & ULTIMATE MORTALITY
# =============================================================================

MIN_TABLE_AGE = 18
MAX_TABLE_AGE = 120
SELECT_PERIOD = 5

# Multipliers applied to the ultimate rate during the select period
SELECT_FACTORS = np.array([0.50, 0.60, 0.70, 0.80, 0.90, 1.00])

# Gompertz-Makeham parameters for the ultimate column
GM_A, GM_B, GM_C = 0.0005, 0.00003, 1.1


def _build_select_ultimate_table() -> np.ndarray:
    """
    Build the default select & ultimate table.

    Returns:
        Array of shape (n_ages, SELECT_PERIOD + 1); row 0 is MIN_TABLE_AGE
    """
    ages = np.arange(MIN_TABLE_AGE, MAX_TABLE_AGE + 1)
    ultimate = np.minimum(GM_A + GM_B * GM_C ** ages, 1.0)
    table = np.minimum(np.outer(ultimate, SELECT_FACTORS), 1.0)
    table[-1, :] = 1.0
    return table


SELECT_ULTIMATE_TABLE = _build_select_ultimate_table()


# =============================================================================
# SPOT RATE CURVE
# =============================================================================

SPOT_CURVE_YEARS = 150
SPOT_LONG_RATE = 0.0375
SPOT_TAU = 8.0


def _build_spot_curve() -> np.ndarray:
    """Annual spot rates indexed by duration in whole years (0-150)."""
    years = np.arange(SPOT_CURVE_YEARS + 1)
    return SPOT_LONG_RATE * (1.0 - np.exp(-years / SPOT_TAU))


SPOT_CURVE = _build_spot_curve()


def default_mortality_table() -> np.ndarray:
    """Copy of the built-in select & ultimate table."""
    return SELECT_ULTIMATE_TABLE.copy()


def default_spot_curve() -> np.ndarray:
    """Copy of the built-in spot rate curve."""
    return SPOT_CURVE.copy()


