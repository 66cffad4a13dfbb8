"""Core data models for orders and market impact."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ImpactShape(str, Enum):
    """Temporary impact function shapes."""

    LINEAR = "linear"
    SQUARE_ROOT = "square_root"
    POWER_LAW = "power_law"


class OrderSpecification(BaseModel):
    """Position to liquidate and the deadline to liquidate it by.

    A negative start_holdings describes a buy program (short position to cover).
    """

    model_config = ConfigDict(frozen=True)

    start_holdings: float
    horizon: float


class TemporaryImpact(BaseModel):
    """Temporary price impact as a function of trade rate.

    impact(v) = slope * |v|^exponent * sign(v), where the exponent is 1 for
    LINEAR, 0.5 for SQUARE_ROOT and the exponent field for POWER_LAW.
    """

    model_config = ConfigDict(frozen=True)

    shape: ImpactShape = ImpactShape.LINEAR
    slope: float
    exponent: float = Field(default=1.0, gt=0)

    @computed_field
    @property
    def is_linear(self) -> bool:
        """True if the impact is proportional to trade rate."""
        return self.shape == ImpactShape.LINEAR

    @property
    def effective_exponent(self) -> float:
        if self.shape == ImpactShape.LINEAR:
            return 1.0
        if self.shape == ImpactShape.SQUARE_ROOT:
            return 0.5
        return self.exponent


class ImpactParameters(BaseModel):
    """Temporary impact and price volatility at the start of the trajectory."""

    model_config = ConfigDict(frozen=True)

    temporary_impact: TemporaryImpact
    epoch_volatility: float

    @classmethod
    def linear(cls, slope: float, volatility: float) -> "ImpactParameters":
        """Build parameters with linear temporary impact."""
        return cls(
            temporary_impact=TemporaryImpact(shape=ImpactShape.LINEAR, slope=slope),
            epoch_volatility=volatility,
        )

    @computed_field
    @property
    def is_linear(self) -> bool:
        """True if the temporary impact shape is linear."""
        return self.temporary_impact.is_linear

    @property
    def temporary_slope(self) -> float:
        """Temporary impact coefficient (eta)."""
        return self.temporary_impact.slope
