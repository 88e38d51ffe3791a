"""
life_simulator/events.py - Simulation Event Records

What happened during one simulation step, as consumed by the cashflow
aggregator and by user callbacks.

Groups stored in a record are the values they had when the recording stage
ran (before decrements, before account roll-forward). They are separate
values from the ones in the simulation's active list.

Author: Life Simulator Project
License: MIT
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from .policy import PolicyGroup


@dataclass(frozen=True)
class AccountChanges:
    """
    Per-policy account movements over one step (account products).

    Attributes:
        premium_paid: Premium paid by the holder
        premium_into_account: Premium net of load credited to the account
        maintenance_fee: Fee deducted from the account
        insurance_cost: Cost-of-insurance charge deducted from the account
        investments: Investment return credited to the account
        net_changes: Account value after minus account value before
    """
    premium_paid: float = 0.0
    premium_into_account: float = 0.0
    maintenance_fee: float = 0.0
    insurance_cost: float = 0.0
    investments: float = 0.0
    net_changes: float = 0.0


@dataclass
class EventRecord:
    """
    Events of one simulation step.

    One record is normally reused across a run and cleared between steps.

    Attributes:
        time: Month the events were simulated for
        lapses: (group, lapsed count) pairs, mid-month
        deaths: (group, death count) pairs, mid-month
        expirations: Groups that reached their term at the start of the month
        starts: Groups issued at the start of the month
        account_changes: (group, AccountChanges) pairs
        claimed: Total amount claimed (deaths, lapses, expirations)
        expenses: Total expenses (acquisition and maintenance)
    """
    time: int = 0
    lapses: List[Tuple[PolicyGroup, float]] = field(default_factory=list)
    deaths: List[Tuple[PolicyGroup, float]] = field(default_factory=list)
    expirations: List[PolicyGroup] = field(default_factory=list)
    starts: List[PolicyGroup] = field(default_factory=list)
    account_changes: List[Tuple[PolicyGroup, AccountChanges]] = field(default_factory=list)
    claimed: float = 0.0
    expenses: float = 0.0

    def clear(self) -> "EventRecord":
        """Empty every list and reset the totals, keeping the record object."""
        self.lapses.clear()
        self.deaths.clear()
        self.expirations.clear()
        self.starts.clear()
        self.account_changes.clear()
        self.claimed = 0.0
        self.expenses = 0.0
        return self

    @property
    def total_deaths(self) -> float:
        return float(sum(count for _, count in self.deaths))

    @property
    def total_lapses(self) -> float:
        return float(sum(count for _, count in self.lapses))

    @property
    def total_expired(self) -> float:
        return float(sum(group.count for group in self.expirations))

    def get_summary(self) -> dict:
        """Flat summary of the record, suitable for logging or a DataFrame row."""
        return {
            'time': self.time,
            'deaths': self.total_deaths,
            'lapses': self.total_lapses,
            'expired': self.total_expired,
            'started': float(sum(group.count for group in self.starts)),
            'claimed': self.claimed,
            'expenses': self.expenses,
        }
