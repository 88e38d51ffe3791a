"""
life_simulator/model.py - Product Models

Parameter bundles for the two product families, plus the product-specific
hooks the simulation engine calls at each stage of a step.

PRODUCT FAMILIES:
- TermLifeModel: assured amount paid on death before the term, level
  premiums, first-year commission, spot curve discounting
- UniversalLifeModel: holder-funded account rolled forward monthly,
  account value paid on expiry and lapse, flat rate discounting

HOOKS (called by the engine, in step order):
- on_expired(events): claims for groups reaching their term
- roll_forward(policy, time): account update (account products only)
- on_deaths(events), on_lapses(events): claims for decrements

Author: Life Simulator Project
License: MIT
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Sequence, Tuple
import numpy as np
import logging

from .events import AccountChanges, EventRecord
from .financials import FlatDiscount, SpotCurveDiscount, brownian_motion, inflation_factor
from .lapse import ConstantLapse, LapseModel, graded_lapse
from .library import default_spot_curve
from .mortality import ConstantMortality, MortalityModel, TabularMortality
from .policy import Policy

logger = logging.getLogger(__name__)


class Model(ABC):
    """
    Abstract product model.

    Concrete models carry `mortality`, `lapse` and `acquisition_cost`
    attributes and implement the hooks below.
    """

    has_account_values: bool = False

    @abstractmethod
    def discount_factor(self, time: int) -> float:
        """Discount factor from month `time` to month 0."""
        pass

    @abstractmethod
    def on_expired(self, events: EventRecord) -> None:
        pass

    @abstractmethod
    def on_deaths(self, events: EventRecord) -> None:
        pass

    @abstractmethod
    def on_lapses(self, events: EventRecord) -> None:
        pass

    @property
    def name(self) -> str:
        return type(self).__name__


# =============================================================================
# TERM LIFE
# =============================================================================

@dataclass(eq=False)
class TermLifeModel(Model):
    """
    Term life insurance.

    Premiums are due every month until the term. On death the assured
    amount is paid; nothing is paid on expiry or lapse.

    Attributes:
        mortality: Mortality assumption (built-in select & ultimate table)
        lapse: Lapse assumption (10% grading down 2% a year to 2%)
        load_premium_rate: Margin applied over the net premium
        acquisition_cost: One-time cost per new policy
        annual_maintenance_cost: Annual cost per in-force policy
        commission_rate: Commission on premiums paid in a policy's first year
        inflation_rate: Annual inflation applied to maintenance costs
        discounts: Annual spot rates by duration in years
    """

    mortality: MortalityModel = field(default_factory=TabularMortality)
    lapse: LapseModel = field(default_factory=graded_lapse)
    load_premium_rate: float = 0.50
    acquisition_cost: float = 300.0
    annual_maintenance_cost: float = 60.0
    commission_rate: float = 0.60
    inflation_rate: float = 0.01
    discounts: Sequence[float] = field(default_factory=default_spot_curve)

    def __post_init__(self):
        self._discounting = SpotCurveDiscount(self.discounts)
        self.discounts = self._discounting.spot_rates
        logger.info(
            f"TermLifeModel initialized: load={self.load_premium_rate:.0%}, "
            f"commission={self.commission_rate:.0%}, inflation={self.inflation_rate:.2%}"
        )

    def discount_factor(self, time: int) -> float:
        return self._discounting.discount_factor(time)

    def inflation_factor(self, time: int) -> float:
        return inflation_factor(self.inflation_rate, time)

    def maintenance_cost(self, time: int) -> float:
        """Maintenance cost per policy for month `time`."""
        return self.annual_maintenance_cost / 12 * self.inflation_factor(time)

    def on_expired(self, events: EventRecord) -> None:
        pass

    def on_deaths(self, events: EventRecord) -> None:
        events.claimed += sum(group.policy.assured * deaths for group, deaths in events.deaths)

    def on_lapses(self, events: EventRecord) -> None:
        pass


# =============================================================================
# UNIVERSAL LIFE
# =============================================================================

@dataclass(eq=False)
class UniversalLifeModel(Model):
    """
    Universal life insurance with a holder-funded account.

    Each month the premium net of load is paid into the account, fees and
    the cost of insurance are deducted and investment returns credited.

    Claims:
    - Expiry: count × max(account value, assured)
    - Death: deaths × max((1 + ½ r) × account value, assured)
    - Lapse: lapses × (1 + ½ r) × account value
    where r is the month's investment return.

    Attributes:
        mortality: Mortality assumption (none by default)
        lapse: Lapse assumption (none by default)
        maintenance_fee_rate: Monthly fee as a fraction of account value
        commission_rate: Commission on every premium paid
        insurance_risk_cost: Cost-of-insurance rate on the amount at risk
        investment_rates: Monthly investment returns indexed by absolute month
        acquisition_cost: One-time cost per new policy
        inflation_rate: Annual inflation applied to maintenance costs
        annual_maintenance_cost: Annual cost per in-force policy
        annual_discount_rate: Flat annual discount rate
    """

    has_account_values = True

    mortality: MortalityModel = field(default_factory=ConstantMortality)
    lapse: LapseModel = field(default_factory=ConstantLapse)
    maintenance_fee_rate: float = 0.0
    commission_rate: float = 0.05
    insurance_risk_cost: float = 0.0
    investment_rates: Sequence[float] = field(default_factory=lambda: brownian_motion(10_000))
    acquisition_cost: float = 5000.0
    inflation_rate: float = 0.01
    annual_maintenance_cost: float = 500.0
    annual_discount_rate: float = 0.020201340026756

    def __post_init__(self):
        self.investment_rates = np.asarray(self.investment_rates, dtype=np.float64)
        self._discounting = FlatDiscount(self.annual_discount_rate)
        logger.info(
            f"UniversalLifeModel initialized: {self.investment_rates.size} investment months, "
            f"discount={self.annual_discount_rate:.4%}"
        )

    def discount_factor(self, time: int) -> float:
        return self._discounting.discount_factor(time)

    def investment_rate(self, time: int) -> float:
        """
        Investment return for absolute month `time`.

        Raises:
            ValueError: If `time` falls outside the investment path
        """
        if not 0 <= time < self.investment_rates.size:
            raise ValueError(
                f"Month {time} is outside the investment path "
                f"(0-{self.investment_rates.size - 1})"
            )
        return float(self.investment_rates[time])

    def maintenance_cost(self, time: int) -> float:
        return self.annual_maintenance_cost / 12 * inflation_factor(self.inflation_rate, time)

    @staticmethod
    def amount_at_risk(policy: Policy, account_value: float) -> float:
        return max(account_value, policy.assured)

    def roll_forward(self, policy: Policy, time: int) -> Tuple[Policy, AccountChanges]:
        """
        Roll one policy's account forward by a month.

        Order: premium in (net of load), maintenance fee, insurance charge,
        investment return.

        Returns:
            (policy with the new account value, per-policy AccountChanges)
        """
        old_value = policy.account_value
        account_value = old_value

        premium_paid = policy.premium_due(time)
        premium_into_account = premium_paid * (1 - policy.product.load_premium_rate)
        account_value += premium_into_account

        fee = account_value * self.maintenance_fee_rate
        account_value -= fee

        insurance_cost = self.insurance_risk_cost * self.amount_at_risk(policy, account_value)
        account_value -= insurance_cost

        investments = self.investment_rate(time) * account_value
        account_value += investments

        changes = AccountChanges(
            premium_paid=premium_paid,
            premium_into_account=premium_into_account,
            maintenance_fee=fee,
            insurance_cost=insurance_cost,
            investments=investments,
            net_changes=account_value - old_value,
        )
        return replace(policy, account_value=account_value), changes

    def on_expired(self, events: EventRecord) -> None:
        for group in events.expirations:
            account_value = group.policy.account_value
            events.claimed += group.count * max(account_value, group.policy.assured)
            events.account_changes.append((group, AccountChanges(net_changes=-account_value)))

    def on_deaths(self, events: EventRecord) -> None:
        if not events.deaths:
            return
        growth = 1 + 0.5 * self.investment_rate(events.time)
        for group, deaths in events.deaths:
            events.claimed += deaths * max(growth * group.policy.account_value,
                                           group.policy.assured)

    def on_lapses(self, events: EventRecord) -> None:
        if not events.lapses:
            return
        growth = 1 + 0.5 * self.investment_rate(events.time)
        for group, lapses in events.lapses:
            events.claimed += lapses * growth * group.policy.account_value
