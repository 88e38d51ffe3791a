"""
Life Simulator

Monthly projection of insurance policy portfolios: deaths, lapses,
expirations, new business and account values, aggregated into cashflow
statements and present values.

Products:
- Term life (select & ultimate mortality, graded lapses, spot curve)
- Universal life (holder-funded account, stochastic investment returns)

Author: Life Simulator Project
License: MIT
"""

__version__ = "0.3.0"
__author__ = "Life Simulator Project"

from .policy import (
    Sex,
    PremiumType,
    Product,
    Policy,
    PolicyGroup,
)

from .decrements import (
    RateProvider,
    to_monthly,
    apply_decrements,
)

from .mortality import (
    MortalityModel,
    ConstantMortality,
    TimeVaryingMortality,
    TabularMortality,
    PolicyVaryingMortality,
)

from .lapse import (
    LapseModel,
    ConstantLapse,
    TimeVaryingLapse,
    PolicyVaryingLapse,
    graded_lapse,
)

from .financials import (
    SpotCurveDiscount,
    FlatDiscount,
    brownian_motion,
)

from .model import (
    Model,
    TermLifeModel,
    UniversalLifeModel,
)

from .events import (
    AccountChanges,
    EventRecord,
)

from .simulation import (
    SimulationState,
    advance_one_step,
    simulate,
    run,
    projection_length,
)

from .cashflow import (
    CashFlow,
    cashflow_from_events,
    cashflow_from_state,
    project_cashflows,
    simulate_cashflows,
    total_cashflow,
    cashflows_to_frame,
)

from .premiums import estimate_premiums

from .config import (
    ProductType,
    ModelAssumptions,
    MortalityAssumption,
    LapseAssumption,
    ModelFactory,
)

from .ingestion import (
    policies_from_frame,
    policies_to_frame,
    load_model_points,
    write_model_points,
)

__all__ = [
    # Policies
    'Sex', 'PremiumType', 'Product', 'Policy', 'PolicyGroup',
    # Rates
    'RateProvider', 'to_monthly', 'apply_decrements',
    'MortalityModel', 'ConstantMortality', 'TimeVaryingMortality',
    'TabularMortality', 'PolicyVaryingMortality',
    'LapseModel', 'ConstantLapse', 'TimeVaryingLapse', 'PolicyVaryingLapse',
    'graded_lapse',
    # Financials
    'SpotCurveDiscount', 'FlatDiscount', 'brownian_motion',
    # Models
    'Model', 'TermLifeModel', 'UniversalLifeModel',
    # Simulation
    'AccountChanges', 'EventRecord', 'SimulationState', 'advance_one_step',
    'simulate', 'run', 'projection_length',
    # Cashflows
    'CashFlow', 'cashflow_from_events', 'cashflow_from_state',
    'project_cashflows', 'simulate_cashflows', 'total_cashflow',
    'cashflows_to_frame', 'estimate_premiums',
    # Configuration
    'ProductType', 'ModelAssumptions', 'MortalityAssumption',
    'LapseAssumption', 'ModelFactory',
    # Ingestion
    'policies_from_frame', 'policies_to_frame', 'load_model_points',
    'write_model_points',
]
