"""
life_simulator/mortality.py - Mortality Assumptions

Mortality rate providers for the simulation engine.

Providers:
- ConstantMortality: one annual rate for everyone (population-level)
- TimeVaryingMortality: annual rate as a function of month (population-level)
- TabularMortality: select & ultimate table by attained age and duration
  (per-group)
- PolicyVaryingMortality: annual rate as a function of month and policy
  (per-group)

Table lookup:
- Row = attained age - min_age
- Column = min(duration in years, 5)
- Ages above the last row use the last row

Author: Life Simulator Project
License: MIT
"""

import numpy as np
from typing import Callable, Dict, Optional, Union
import logging

from .decrements import RateProvider
from .library import MIN_TABLE_AGE, SELECT_PERIOD, default_mortality_table
from .policy import Policy, Sex

logger = logging.getLogger(__name__)


class MortalityModel(RateProvider):
    """Base class for mortality assumptions."""
    pass


class ConstantMortality(MortalityModel):
    """Single annual mortality rate."""

    def __init__(self, rate: float = 0.0):
        self.rate = rate

    def annual_rate(self, time: int, policy: Optional[Policy] = None) -> float:
        return self.rate

    def __repr__(self):
        return f"ConstantMortality({self.rate})"


class TimeVaryingMortality(MortalityModel):
    """Annual mortality rate given by `f(time)`."""

    def __init__(self, f: Callable[[int], float]):
        self.f = f

    def annual_rate(self, time: int, policy: Optional[Policy] = None) -> float:
        return self.f(time)


class PolicyVaryingMortality(MortalityModel):
    """Annual mortality rate given by `f(time, policy)`."""

    rates_are_per_policy = True

    def __init__(self, f: Callable[[int, Policy], float]):
        self.f = f

    def annual_rate(self, time: int, policy: Optional[Policy] = None) -> float:
        return self.f(time, self._require_policy(policy))


TableInput = Union[np.ndarray, Dict[Sex, np.ndarray]]


class TabularMortality(MortalityModel):
    """
    Select & ultimate mortality table.

    Accepts either one unisex table or one table per sex. Each table has
    one row per attained age starting at `min_age` and SELECT_PERIOD + 1
    duration columns, the last of which is the ultimate column.

    Attributes:
        tables: Validated tables keyed by Sex (None key for unisex)
        min_age: Attained age of the first row
    """

    N_COLUMNS = SELECT_PERIOD + 1
    rates_are_per_policy = True

    def __init__(self, rates: Optional[TableInput] = None,
                 min_age: int = MIN_TABLE_AGE):
        """
        Initialize tabular mortality.

        Args:
            rates: Table array, dict of Sex -> table array, or None for the
                   built-in select & ultimate table
            min_age: Attained age of the first table row

        Raises:
            ValueError: If a table is not a finite 2-D array with
                        SELECT_PERIOD + 1 columns
        """
        if rates is None:
            rates = default_mortality_table()

        if isinstance(rates, dict):
            self.tables = {
                Sex(sex) if not isinstance(sex, Sex) else sex: self._validate(table)
                for sex, table in rates.items()
            }
        else:
            self.tables = {None: self._validate(rates)}
        self.min_age = min_age

        n_ages = next(iter(self.tables.values())).shape[0]
        logger.info(
            f"TabularMortality initialized: ages {min_age}-{min_age + n_ages - 1}, "
            f"{len(self.tables)} table(s)"
        )

    def _validate(self, table) -> np.ndarray:
        array = np.asarray(table, dtype=np.float64)
        if array.ndim != 2 or array.shape[0] == 0 or array.shape[1] != self.N_COLUMNS:
            raise ValueError(
                f"Mortality table must have shape (n_ages, {self.N_COLUMNS}), "
                f"got {array.shape}"
            )
        if not np.all(np.isfinite(array)):
            raise ValueError("Mortality table contains non-finite values")
        return array

    def _table_for(self, sex: Sex) -> np.ndarray:
        if None in self.tables:
            return self.tables[None]
        if sex not in self.tables:
            raise ValueError(f"No mortality table for sex {sex}")
        return self.tables[sex]

    def lookup(self, sex: Sex, attained_age: int, duration_years: int) -> float:
        """
        Annual rate for an attained age and duration.

        Raises:
            ValueError: If the attained age is below the table's minimum age
        """
        table = self._table_for(sex)
        row = attained_age - self.min_age
        if row < 0:
            raise ValueError(
                f"Attained age {attained_age} is below the table minimum {self.min_age}"
            )
        row = min(row, table.shape[0] - 1)
        column = min(max(duration_years, 0), self.N_COLUMNS - 1)
        return float(table[row, column])

    def annual_rate(self, time: int, policy: Optional[Policy] = None) -> float:
        policy = self._require_policy(policy)
        return self.lookup(policy.sex, policy.attained_age(time),
                           policy.duration_years(time))
