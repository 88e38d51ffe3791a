"""
tests/test_cashflow.py - Cashflow and Premium Tests

Covers:
- CashFlow construction and field-wise addition
- Cashflows from event records (term and universal life)
- Cashflows from in-force state (term life), first-year commission
- Multi-month projections checked against hand calculations
- Premium estimation
- DataFrame output

Author: Life Simulator Project
License: MIT
"""

import pandas as pd
import pytest

from life_simulator.cashflow import (
    CashFlow, cashflow_from_events, cashflow_from_state, cashflows_to_frame,
    project_cashflows, simulate_cashflows, total_cashflow
)
from life_simulator.events import AccountChanges, EventRecord
from life_simulator.lapse import ConstantLapse
from life_simulator.model import TermLifeModel, UniversalLifeModel
from life_simulator.mortality import ConstantMortality
from life_simulator.policy import Policy, PolicyGroup
from life_simulator.premiums import estimate_premiums
from life_simulator.simulation import SimulationState


def simple_term_model(monthly_mortality=0.0, **kwargs):
    params = dict(
        mortality=ConstantMortality(1 - (1 - monthly_mortality) ** 12),
        lapse=ConstantLapse(0.0),
        acquisition_cost=300.0,
        annual_maintenance_cost=120.0,
        inflation_rate=0.0,
        commission_rate=0.5,
        discounts=[0.0],
    )
    params.update(kwargs)
    return TermLifeModel(**params)


class TestCashFlowValue:
    """Net and discounted derivation, and addition."""

    def test_from_components(self):
        cf = CashFlow.from_components(premiums=100.0, investments=10.0, claims=30.0,
                                      expenses=20.0, commissions=5.0,
                                      account_value_changes=15.0, discount_factor=0.9)
        assert cf.net == pytest.approx(40.0)
        assert cf.discounted == pytest.approx(36.0)

    def test_zero_cashflow(self):
        zero = CashFlow()
        assert all(value == 0.0 for value in zero.to_dict().values())

    def test_addition_is_field_wise(self):
        a = CashFlow(1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0)
        b = CashFlow(10.0, 20.0, 30.0, 40.0, 50.0, 60.0, 70.0, 80.0)
        assert a + b == CashFlow(11.0, 22.0, 33.0, 44.0, 55.0, 66.0, 77.0, 88.0)

    def test_total_of_nothing_is_zero(self):
        assert total_cashflow([]) == CashFlow()


class TestEventCashflows:
    """Cashflows derived from an event record."""

    def test_term_life_claims_and_expenses_only(self):
        model = simple_term_model(discounts=[0.0, 0.05])
        events = EventRecord(time=12, claimed=1000.0, expenses=200.0)
        cf = cashflow_from_events(events, model)
        assert cf.premiums == 0.0
        assert cf.claims == 1000.0
        assert cf.expenses == 200.0
        assert cf.net == pytest.approx(-1200.0)
        assert cf.discounted == pytest.approx(-1200.0 / 1.05)

    def test_universal_life_account_changes(self):
        model = UniversalLifeModel(investment_rates=[0.0], commission_rate=0.05)
        group = PolicyGroup(Policy(), 2.0)
        events = EventRecord(time=0, claimed=50.0, expenses=20.0)
        events.account_changes.append(
            (group, AccountChanges(premium_paid=100.0, premium_into_account=90.0,
                                   investments=5.0, net_changes=95.0)))
        cf = cashflow_from_events(events, model)

        assert cf.premiums == pytest.approx(200.0)
        assert cf.commissions == pytest.approx(10.0)
        assert cf.investments == pytest.approx(10.0)
        assert cf.account_value_changes == pytest.approx(190.0)
        assert cf.net == pytest.approx(200.0 + 10.0 - 50.0 - 20.0 - 10.0 - 190.0)


class TestStateCashflows:
    """Term life premiums, maintenance and first-year commissions."""

    def test_first_year_commission_per_group(self):
        model = simple_term_model()
        new = PolicyGroup(Policy(issued_at=-11, premium=10.0), 1.0)
        old = PolicyGroup(Policy(issued_at=-12, premium=10.0), 1.0)
        state = SimulationState(active=[new, old], time=0)

        cf = cashflow_from_state(state, model)
        assert cf.premiums == pytest.approx(20.0)
        assert cf.commissions == pytest.approx(5.0), \
            "Only the group in its first policy year earns commission"
        assert cf.expenses == pytest.approx(20.0)

    def test_maintenance_inflates(self):
        model = simple_term_model(inflation_rate=0.02)
        state = SimulationState(active=[PolicyGroup(Policy(issued_at=-30), 3.0)], time=24)
        cf = cashflow_from_state(state, model)
        assert cf.expenses == pytest.approx(3 * 10.0 * 1.02 ** 2)


class TestProjection:
    """Multi-month projections checked by hand."""

    def test_term_life_two_months(self):
        model = simple_term_model(monthly_mortality=0.1)
        group = PolicyGroup(Policy(issued_at=0, premium=50.0, assured=1000.0), 10.0)

        cashflows = project_cashflows(model, [group], 2)

        first, second = cashflows
        assert first.premiums == pytest.approx(500.0)
        assert first.expenses == pytest.approx(3000.0 + 100.0)
        assert first.commissions == pytest.approx(250.0)
        assert first.claims == pytest.approx(1000.0)
        assert first.net == pytest.approx(-3850.0)

        assert second.premiums == pytest.approx(450.0)
        assert second.expenses == pytest.approx(90.0)
        assert second.commissions == pytest.approx(225.0)
        assert second.claims == pytest.approx(900.0)
        assert second.net == pytest.approx(-765.0)

        total = simulate_cashflows(model, [group], 2)
        assert total.net == pytest.approx(-3850.0 - 765.0)

    def test_universal_life_one_month(self):
        model = UniversalLifeModel(investment_rates=[0.01] * 12, annual_maintenance_cost=120.0,
                                   inflation_rate=0.0, commission_rate=0.05)
        group = PolicyGroup(Policy(issued_at=-1, term=None, premium=100.0,
                                   account_value=1000.0), 2.0)

        (cf,) = project_cashflows(model, [group], 1)

        assert cf.premiums == pytest.approx(200.0)
        assert cf.commissions == pytest.approx(10.0)
        assert cf.investments == pytest.approx(22.0)
        assert cf.account_value_changes == pytest.approx(222.0)
        assert cf.expenses == pytest.approx(20.0)
        assert cf.net == pytest.approx(-30.0)
        assert cf.discounted == pytest.approx(-30.0)

    def test_on_cashflow_callback(self):
        seen = []
        project_cashflows(simple_term_model(), [PolicyGroup(Policy(issued_at=0), 1.0)], 3,
                          on_cashflow=seen.append)
        assert len(seen) == 3
        assert all(isinstance(cf, CashFlow) for cf in seen)

    def test_frame_output(self):
        cashflows = [CashFlow.from_components(premiums=float(i)) for i in range(4)]
        df = cashflows_to_frame(cashflows, start=6)
        assert isinstance(df, pd.DataFrame)
        assert list(df.index) == [6, 7, 8, 9]
        assert df.index.name == 'month'
        assert list(df.columns) == ['premiums', 'investments', 'claims', 'expenses',
                                    'commissions', 'account_value_changes', 'net',
                                    'discounted']
        assert df['premiums'].sum() == pytest.approx(6.0)


class TestPremiumEstimation:
    """Level premium = (1 + load) × PV claims / PV exposure."""

    def test_constant_mortality_premium(self):
        model = simple_term_model(monthly_mortality=0.01, load_premium_rate=0.5)
        group = PolicyGroup(Policy(issued_at=0, term=1, assured=1000.0), 1.0)

        (priced,) = estimate_premiums(model, [group], 11)
        # claims / exposure = assured × monthly rate at every month
        assert priced.policy.premium == pytest.approx(15.0)
        assert priced.count == group.count

    def test_expired_months_do_not_contribute(self):
        model = simple_term_model(monthly_mortality=0.01, load_premium_rate=0.5)
        group = PolicyGroup(Policy(issued_at=0, term=1, assured=1000.0), 1.0)
        short = estimate_premiums(model, [group], 11)
        long = estimate_premiums(model, [group], 60)
        assert short[0].policy.premium == long[0].policy.premium

    def test_zero_exposure_gives_zero_premium(self):
        model = simple_term_model(monthly_mortality=0.01)
        empty = PolicyGroup(Policy(issued_at=0, assured=1000.0, premium=99.0), 0.0)
        expired = PolicyGroup(Policy(issued_at=-12, term=1, assured=1000.0, premium=99.0), 5.0)
        priced = estimate_premiums(model, [empty, expired], 24)
        assert [g.policy.premium for g in priced] == [0.0, 0.0]

    def test_group_past_its_term_gives_zero_premium(self):
        model = simple_term_model(monthly_mortality=0.01)
        stale = PolicyGroup(Policy(issued_at=-130, term=10, assured=1000.0, premium=99.0), 3.0)
        (priced,) = estimate_premiums(model, [stale], 24)
        assert priced.policy.premium == 0.0, \
            f"A term that ended before month 0 has no exposure, got {priced.policy.premium}"

    def test_inputs_are_not_modified(self):
        model = simple_term_model(monthly_mortality=0.01)
        group = PolicyGroup(Policy(issued_at=0, assured=1000.0, premium=1.0), 3.0)
        estimate_premiums(model, [group], 12)
        assert group.policy.premium == 1.0
        assert group.count == 3.0

    def test_rounded_to_cents(self):
        model = TermLifeModel()
        groups = [PolicyGroup(Policy(age=age, issued_at=0, term=10, assured=123_456.0), 1.0)
                  for age in (25, 40, 55)]
        for group in estimate_premiums(model, groups, 120):
            assert group.policy.premium == round(group.policy.premium, 2)
            assert group.policy.premium > 0
