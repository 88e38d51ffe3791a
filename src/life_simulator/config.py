"""
life_simulator/config.py - Model Configuration (Factory Pattern)

Product models are described by validated configuration objects and built
by ModelFactory. Configuration can come from Python, a dict or a JSON file.

CONFIGURATION OBJECTS:
- MortalityAssumption: constant rate or table (built-in or supplied)
- LapseAssumption: constant rate or graded schedule
- ModelAssumptions: product type plus every product parameter; parameters
  left unset take the product's defaults

Author: Life Simulator Project
License: MIT
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import logging

from pydantic import BaseModel, Field, field_validator

from .financials import brownian_motion
from .lapse import ConstantLapse, LapseModel, graded_lapse
from .model import Model, TermLifeModel, UniversalLifeModel
from .mortality import ConstantMortality, MortalityModel, TabularMortality

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class ProductType(Enum):
    """Product families."""
    TERM_LIFE = "term_life"
    UNIVERSAL_LIFE = "universal_life"


class MortalityBasis(Enum):
    """How mortality rates are produced."""
    CONSTANT = "constant"
    TABULAR = "tabular"


class LapseBasis(Enum):
    """How lapse rates are produced."""
    CONSTANT = "constant"
    GRADED = "graded"


# =============================================================================
# PYDANTIC MODELS FOR CONFIGURATION
# =============================================================================

class MortalityAssumption(BaseModel):
    """Mortality assumption."""
    basis: MortalityBasis = MortalityBasis.TABULAR
    rate: float = Field(default=0.0, ge=0.0, le=1.0, description="Annual rate (constant basis)")
    table: Optional[List[List[float]]] = Field(
        default=None,
        description="Select & ultimate table rows by attained age; built-in table if omitted"
    )
    min_age: int = Field(default=18, ge=0, description="Attained age of the first table row")

    def build(self) -> MortalityModel:
        if self.basis == MortalityBasis.CONSTANT:
            return ConstantMortality(self.rate)
        return TabularMortality(self.table, min_age=self.min_age)


class LapseAssumption(BaseModel):
    """Lapse assumption."""
    basis: LapseBasis = LapseBasis.GRADED
    rate: float = Field(default=0.0, ge=0.0, le=1.0, description="Annual rate (constant basis)")
    initial: float = Field(default=0.10, ge=0.0, le=1.0, description="First-year rate (graded)")
    step: float = Field(default=0.02, ge=0.0, description="Yearly reduction (graded)")
    ultimate: float = Field(default=0.02, ge=0.0, le=1.0, description="Floor rate (graded)")

    def build(self) -> LapseModel:
        if self.basis == LapseBasis.CONSTANT:
            return ConstantLapse(self.rate)
        return graded_lapse(self.initial, self.step, self.ultimate)


class ModelAssumptions(BaseModel):
    """Complete product model configuration."""
    product_type: ProductType = ProductType.TERM_LIFE

    mortality: Optional[MortalityAssumption] = None
    lapse: Optional[LapseAssumption] = None

    # Costs
    acquisition_cost: Optional[float] = Field(default=None, ge=0.0)
    annual_maintenance_cost: Optional[float] = Field(default=None, ge=0.0)
    commission_rate: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    inflation_rate: Optional[float] = Field(default=None, ge=-1.0)

    # Term life
    load_premium_rate: Optional[float] = Field(default=None, ge=0.0)
    spot_rates: Optional[List[float]] = None

    # Universal life
    maintenance_fee_rate: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    insurance_risk_cost: Optional[float] = Field(default=None, ge=0.0)
    annual_discount_rate: Optional[float] = Field(default=None, gt=-1.0)
    investment_rates: Optional[List[float]] = None
    investment_drift: float = 0.02
    investment_volatility: float = Field(default=0.03, ge=0.0)
    investment_months: int = Field(default=10_000, gt=0)
    investment_seed: Optional[int] = None

    @field_validator('spot_rates', 'investment_rates')
    @classmethod
    def _non_empty(cls, value):
        if value is not None and len(value) == 0:
            raise ValueError("must not be empty")
        return value


TERM_LIFE_FIELDS = (
    'acquisition_cost', 'annual_maintenance_cost', 'commission_rate',
    'inflation_rate', 'load_premium_rate',
)

UNIVERSAL_LIFE_FIELDS = (
    'acquisition_cost', 'annual_maintenance_cost', 'commission_rate',
    'inflation_rate', 'maintenance_fee_rate', 'insurance_risk_cost',
    'annual_discount_rate',
)


class ModelFactory:
    """
    Factory for creating product models from configuration.
    """

    @staticmethod
    def create_model(assumptions: ModelAssumptions) -> Model:
        """Create the product model described by `assumptions`."""
        if assumptions.product_type == ProductType.TERM_LIFE:
            kwargs = _explicit(assumptions, TERM_LIFE_FIELDS)
            if assumptions.spot_rates is not None:
                kwargs['discounts'] = assumptions.spot_rates
            model_class = TermLifeModel
        else:
            kwargs = _explicit(assumptions, UNIVERSAL_LIFE_FIELDS)
            if assumptions.investment_rates is not None:
                kwargs['investment_rates'] = assumptions.investment_rates
            else:
                kwargs['investment_rates'] = brownian_motion(
                    assumptions.investment_months,
                    mu=assumptions.investment_drift,
                    sigma=assumptions.investment_volatility,
                    seed=assumptions.investment_seed,
                )
            model_class = UniversalLifeModel

        if assumptions.mortality is not None:
            kwargs['mortality'] = assumptions.mortality.build()
        if assumptions.lapse is not None:
            kwargs['lapse'] = assumptions.lapse.build()

        logger.info(f"Creating {model_class.__name__} with overrides: {sorted(kwargs)}")
        return model_class(**kwargs)

    @staticmethod
    def create_from_dict(config: Dict[str, Any]) -> Model:
        """Create a model from dictionary configuration."""
        return ModelFactory.create_model(ModelAssumptions(**config))

    @staticmethod
    def create_from_file(filepath: Union[str, Path]) -> Model:
        """Create a model from a JSON configuration file."""
        filepath = Path(filepath)
        with open(filepath) as f:
            config = json.load(f)
        logger.info(f"Loaded model configuration: {filepath.name}")
        return ModelFactory.create_from_dict(config)

    @staticmethod
    def create_default_model(product_type: Union[ProductType, str] = ProductType.TERM_LIFE) -> Model:
        """Create a model with every parameter at its default."""
        return ModelFactory.create_model(ModelAssumptions(product_type=ProductType(product_type)))


def _explicit(assumptions: ModelAssumptions, names) -> Dict[str, Any]:
    """Parameters in `names` that were given a value."""
    return {name: getattr(assumptions, name) for name in names
            if getattr(assumptions, name) is not None}
