"""
life_simulator/premiums.py - Premium Estimation

Level premiums for term life groups from a decrement-only projection.

Mathematical Framework (per group, months t = 0..n):
    exposure = Σ_t C_t × v(t)
    claims   = Σ_t D_t × assured × v(t)
    premium  = round((1 + load) × claims / exposure, 2)
where C_t is the count before decrements at t and D_t the deaths at t.
A group contributes nothing from its expiry month on. A group with no
exposure gets a premium of 0.

The pass does not record events, admit new business or touch the inputs,
so the same inputs always give the same premiums.

Author: Life Simulator Project
License: MIT
"""

from dataclasses import replace
from typing import Iterable, List
import numpy as np
import logging

from .decrements import apply_decrements, group_rate, step_rates
from .model import TermLifeModel
from .policy import PolicyGroup

logger = logging.getLogger(__name__)


def estimate_premiums(model: TermLifeModel, policies: Iterable[PolicyGroup],
                      n_steps: int) -> List[PolicyGroup]:
    """
    Estimate the premium of each group over months 0..n_steps.

    Args:
        model: Term life model providing rates, discounting and load
        policies: Groups to price
        n_steps: Last month of the projection

    Returns:
        New groups, in input order, carrying the estimated premiums
    """
    policies = list(policies)
    counts = np.array([group.count for group in policies], dtype=np.float64)
    exposure = np.zeros(len(policies))
    claims = np.zeros(len(policies))
    expired = np.zeros(len(policies), dtype=bool)

    for time in range(n_steps + 1):
        discount = model.discount_factor(time)
        shared_mortality = step_rates(model.mortality, time)
        shared_lapse = step_rates(model.lapse, time)
        for i, group in enumerate(policies):
            if group.expires(time) or group.policy.expired_before(time):
                expired[i] = True
            if expired[i]:
                continue
            exposure[i] += counts[i] * discount
            mortality_rate = group_rate(model.mortality, shared_mortality, time, group.policy)
            lapse_rate = group_rate(model.lapse, shared_lapse, time, group.policy)
            deaths, _, counts[i] = apply_decrements(counts[i], mortality_rate, lapse_rate)
            claims[i] += deaths * group.policy.assured * discount

    priced = []
    for i, group in enumerate(policies):
        if exposure[i] == 0:
            premium = 0.0
        else:
            premium = round(float((1 + model.load_premium_rate) * claims[i] / exposure[i]), 2)
        priced.append(replace(group, policy=replace(group.policy, premium=premium)))

    logger.info(f"Estimated premiums for {len(priced)} groups over {n_steps + 1} months")
    return priced
