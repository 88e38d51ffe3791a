"""
life_simulator/simulation.py - Monthly Simulation Engine

Advances a portfolio of policy groups one month at a time.

STEP ORDER (one call to advance_one_step):
1. Expiration: groups reaching their term leave the active list
2. New business: groups issued this month join the active list and incur
   acquisition costs
3. Account roll-forward (account products only): maintenance expenses,
   premium in, fees, insurance charge, investment return
4. Mid-month decrements: deaths, then lapses on the surviving count
5. Time advances by one month

State handling:
- The caller owns one SimulationState; only this module mutates it
- Groups are replaced, never mutated; event records keep the values the
  groups had before the recording stage
- Groups are never pruned, however small their count becomes

Author: Life Simulator Project
License: MIT
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional
import time as clock
import logging

from .decrements import apply_decrements, group_rate, step_rates
from .events import EventRecord
from .policy import PolicyGroup, total_count

logger = logging.getLogger(__name__)


@dataclass
class SimulationState:
    """
    Mutable simulation state.

    Attributes:
        active: In-force groups
        inactive: Groups not yet issued
        time: Current month, incremented after every step
    """
    active: List[PolicyGroup] = field(default_factory=list)
    inactive: List[PolicyGroup] = field(default_factory=list)
    time: int = 0

    @classmethod
    def from_policies(cls, policies: Iterable[PolicyGroup], time: int = 0) -> "SimulationState":
        """
        Partition groups at `time`: issued strictly before `time` is active,
        anything else waits in the inactive list.

        Groups whose term ended before `time` can never reach their expiry
        month and are left out.
        """
        policies = list(policies)
        past_term = [group for group in policies if group.policy.expired_before(time)]
        if past_term:
            logger.warning(
                f"Skipping {len(past_term)} groups whose term ended before month {time}"
            )
            policies = [group for group in policies if not group.policy.expired_before(time)]
        active = [group for group in policies if group.policy.issued_at < time]
        inactive = [group for group in policies if group.policy.issued_at >= time]
        return cls(active=active, inactive=inactive, time=time)

    @property
    def in_force(self) -> float:
        """Total count over active groups."""
        return total_count(self.active)


def projection_length(policies: Iterable[PolicyGroup], start: int = 0) -> int:
    """
    Months needed from `start` until every fixed-term group has expired.

    Whole-life groups are ignored; returns 0 if no group has a term.
    """
    expiries = [group.policy.expires_at for group in policies
                if group.policy.expires_at is not None]
    if not expiries:
        return 0
    return max(max(expiries) - start + 1, 0)


# =============================================================================
# STEP STAGES
# =============================================================================

def _remove_expired(state: SimulationState, model, events: EventRecord) -> None:
    remaining = []
    for group in state.active:
        if group.expires(state.time):
            events.expirations.append(group)
        else:
            remaining.append(group)
    state.active = remaining
    model.on_expired(events)


def _add_new_business(state: SimulationState, model, events: EventRecord) -> None:
    waiting = []
    for group in state.inactive:
        if group.policy.issued_at == state.time:
            state.active.append(group)
            events.starts.append(group)
            events.expenses += group.count * model.acquisition_cost
        else:
            waiting.append(group)
    state.inactive = waiting


def _update_accounts(state: SimulationState, model, events: EventRecord) -> None:
    updated = []
    for group in state.active:
        events.expenses += model.maintenance_cost(state.time) * group.count
        policy, changes = model.roll_forward(group.policy, state.time)
        events.account_changes.append((group, changes))
        updated.append(PolicyGroup(policy, group.count))
    state.active = updated


def _apply_decrements(state: SimulationState, model, events: EventRecord) -> None:
    time = state.time
    shared_mortality = step_rates(model.mortality, time)
    shared_lapse = step_rates(model.lapse, time)

    updated = []
    for group in state.active:
        mortality_rate = group_rate(model.mortality, shared_mortality, time, group.policy)
        lapse_rate = group_rate(model.lapse, shared_lapse, time, group.policy)
        deaths, lapses, remaining = apply_decrements(group.count, mortality_rate, lapse_rate)
        if lapses != 0:
            events.lapses.append((group, lapses))
        if deaths != 0:
            events.deaths.append((group, deaths))
        updated.append(group.with_count(remaining))
    state.active = updated

    model.on_deaths(events)
    model.on_lapses(events)


# =============================================================================
# PUBLIC API
# =============================================================================

def advance_one_step(state: SimulationState, model,
                     events: Optional[EventRecord] = None,
                     before_decrements: Optional[Callable[[SimulationState], None]] = None
                     ) -> EventRecord:
    """
    Perform one monthly step, mutating `state`.

    Args:
        state: Simulation state to advance
        model: Product model (TermLifeModel or UniversalLifeModel)
        events: Record to fill (must be cleared by the caller); a new one
                is created if None
        before_decrements: Called with the state after new business and
                           account roll-forward, before deaths and lapses

    Returns:
        The filled event record

    Raises:
        ValueError: From the model (e.g. an attained age below the mortality
                    table). `state` is restored to its value before the step;
                    `events` may be partly filled and should be cleared.
    """
    if events is None:
        events = EventRecord()
    events.time = state.time
    snapshot = (list(state.active), list(state.inactive), state.time)

    try:
        _remove_expired(state, model, events)
        _add_new_business(state, model, events)
        if model.has_account_values:
            _update_accounts(state, model, events)
        if before_decrements is not None:
            before_decrements(state)
        _apply_decrements(state, model, events)
    except Exception:
        state.active, state.inactive, state.time = snapshot
        raise

    state.time += 1
    return events


def simulate(state: SimulationState, model, n_steps: int,
             on_step: Optional[Callable[[EventRecord], None]] = None,
             progress_callback: Optional[Callable[[int, int], None]] = None
             ) -> SimulationState:
    """
    Advance an existing state by `n_steps` months.

    Args:
        state: State to advance in place
        model: Product model
        n_steps: Number of monthly steps
        on_step: Called with each step's event record before it is cleared
        progress_callback: Called as progress_callback(step, n_steps)

    Returns:
        The advanced state
    """
    events = EventRecord()
    started = clock.perf_counter()
    logger.info(
        f"Starting simulation ({model.name}): {n_steps} steps from month {state.time}, "
        f"{len(state.active)} active / {len(state.inactive)} inactive groups"
    )

    for step in range(1, n_steps + 1):
        advance_one_step(state, model, events)
        if on_step:
            on_step(events)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Step {step}/{n_steps}: {events.get_summary()}, in force={state.in_force:,.4f}")
        events.clear()
        if progress_callback:
            progress_callback(step, n_steps)

    logger.info(
        f"Simulation complete: month {state.time}, in force={state.in_force:,.2f} "
        f"({clock.perf_counter() - started:.2f}s)"
    )
    return state


def run(model, policies: Iterable[PolicyGroup], n_steps: int,
        on_step: Optional[Callable[[EventRecord], None]] = None,
        time: int = 0,
        progress_callback: Optional[Callable[[int, int], None]] = None
        ) -> SimulationState:
    """Build the initial state from `policies` at `time` and simulate `n_steps` months."""
    state = SimulationState.from_policies(policies, time)
    return simulate(state, model, n_steps, on_step=on_step,
                    progress_callback=progress_callback)
