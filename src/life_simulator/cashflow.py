"""
life_simulator/cashflow.py - Cashflow Aggregation

Turns simulation output into per-period cashflow statements.

Sources:
- Event records: claims and expenses for every product; premiums,
  commissions, investment income and account value changes for account
  products (from the record's account changes)
- In-force state (term life only): premiums due, maintenance expenses and
  first-year commissions, observed after new business and before decrements

Period cashflow:
- Term life: state part + event part
- Universal life: event part only

net = premiums + investments - claims - expenses - commissions
      - account_value_changes
discounted = net × model.discount_factor(month)

Author: Life Simulator Project
License: MIT
"""

from dataclasses import dataclass, fields
from typing import Callable, Iterable, List, Optional
import pandas as pd
import logging

from .events import EventRecord
from .model import Model, TermLifeModel
from .policy import PolicyGroup
from .simulation import SimulationState, advance_one_step

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CashFlow:
    """
    Cashflows for one or more periods.

    Adding two CashFlows adds every field. CashFlow() is the zero cashflow.
    """
    premiums: float = 0.0
    investments: float = 0.0
    claims: float = 0.0
    expenses: float = 0.0
    commissions: float = 0.0
    account_value_changes: float = 0.0
    net: float = 0.0
    discounted: float = 0.0

    @classmethod
    def from_components(cls, premiums: float = 0.0, investments: float = 0.0,
                        claims: float = 0.0, expenses: float = 0.0,
                        commissions: float = 0.0, account_value_changes: float = 0.0,
                        discount_factor: float = 1.0) -> "CashFlow":
        """Build a CashFlow, deriving `net` and `discounted`."""
        net = premiums + investments - claims - expenses - commissions - account_value_changes
        return cls(premiums, investments, claims, expenses, commissions,
                   account_value_changes, net, net * discount_factor)

    def __add__(self, other: "CashFlow") -> "CashFlow":
        if not isinstance(other, CashFlow):
            return NotImplemented
        return CashFlow(*(getattr(self, f.name) + getattr(other, f.name) for f in fields(self)))

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# =============================================================================
# PERIOD CASHFLOWS
# =============================================================================

def cashflow_from_events(events: EventRecord, model: Model) -> CashFlow:
    """Cashflow implied by one step's event record."""
    discount = model.discount_factor(events.time)
    if not model.has_account_values:
        return CashFlow.from_components(claims=events.claimed, expenses=events.expenses,
                                        discount_factor=discount)

    premiums = 0.0
    commissions = 0.0
    investments = 0.0
    account_value_changes = 0.0
    for group, changes in events.account_changes:
        premium = group.count * changes.premium_paid
        premiums += premium
        commissions += premium * model.commission_rate
        investments += group.count * changes.investments
        account_value_changes += group.count * changes.net_changes

    return CashFlow.from_components(
        premiums=premiums,
        investments=investments,
        claims=events.claimed,
        expenses=events.expenses,
        commissions=commissions,
        account_value_changes=account_value_changes,
        discount_factor=discount,
    )


def cashflow_from_state(state: SimulationState, model: TermLifeModel) -> CashFlow:
    """
    Premiums, maintenance expenses and commissions of the in-force groups
    at `state.time` (term life).

    Commission is paid on the premiums of groups in their first policy year.
    """
    time = state.time
    maintenance = model.maintenance_cost(time)
    premiums = 0.0
    expenses = 0.0
    commissions = 0.0
    for group in state.active:
        premium = group.count * group.policy.premium_due(time)
        premiums += premium
        expenses += group.count * maintenance
        if group.policy.elapsed_months(time) < 12:
            commissions += premium * model.commission_rate

    return CashFlow.from_components(premiums=premiums, expenses=expenses,
                                    commissions=commissions,
                                    discount_factor=model.discount_factor(time))


def cashflow_step(state: SimulationState, model: Model,
                  events: Optional[EventRecord] = None) -> CashFlow:
    """Advance `state` one month and return that month's full cashflow."""
    if model.has_account_values:
        events = advance_one_step(state, model, events)
        return cashflow_from_events(events, model)

    observed = []
    events = advance_one_step(
        state, model, events,
        before_decrements=lambda s: observed.append(cashflow_from_state(s, model)),
    )
    return observed[0] + cashflow_from_events(events, model)


def project_cashflows(model: Model, policies: Iterable[PolicyGroup], n_steps: int,
                      on_cashflow: Optional[Callable[[CashFlow], None]] = None,
                      time: int = 0,
                      progress_callback: Optional[Callable[[int, int], None]] = None
                      ) -> List[CashFlow]:
    """
    Simulate `n_steps` months and return the cashflow of every month.

    Args:
        model: Product model
        policies: Policy groups to project
        n_steps: Number of months
        on_cashflow: Called with each month's cashflow
        time: Starting month
        progress_callback: Called as progress_callback(step, n_steps)

    Returns:
        One CashFlow per month, in order
    """
    state = SimulationState.from_policies(policies, time)
    events = EventRecord()
    cashflows = []

    logger.info(f"Projecting cashflows ({model.name}): {n_steps} months from month {time}")
    for step in range(1, n_steps + 1):
        cashflow = cashflow_step(state, model, events)
        events.clear()
        cashflows.append(cashflow)
        if on_cashflow:
            on_cashflow(cashflow)
        if progress_callback:
            progress_callback(step, n_steps)

    logger.info(
        f"Projection complete: PV of net cashflow={sum(cf.discounted for cf in cashflows):,.2f}"
    )
    return cashflows


def total_cashflow(cashflows: Iterable[CashFlow]) -> CashFlow:
    """Pointwise sum of cashflows."""
    total = CashFlow()
    for cashflow in cashflows:
        total = total + cashflow
    return total


def simulate_cashflows(model: Model, policies: Iterable[PolicyGroup], n_steps: int,
                       on_cashflow: Optional[Callable[[CashFlow], None]] = None,
                       time: int = 0) -> CashFlow:
    """Total cashflow over `n_steps` months."""
    return total_cashflow(project_cashflows(model, policies, n_steps,
                                            on_cashflow=on_cashflow, time=time))


def cashflows_to_frame(cashflows: Iterable[CashFlow], start: int = 0) -> pd.DataFrame:
    """One row per month, indexed by month, one column per CashFlow field."""
    records = [cashflow.to_dict() for cashflow in cashflows]
    columns = [f.name for f in fields(CashFlow)]
    df = pd.DataFrame(records, columns=columns)
    df.index = pd.RangeIndex(start, start + len(df), name='month')
    return df
