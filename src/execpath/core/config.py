"""Solver configuration."""

from pydantic import BaseModel, ConfigDict, Field


class SolverConfig(BaseModel):
    """Numerical settings for quadrature and the continuous solver.

    Attributes:
        quadrature_nodes: Gauss-Legendre nodes per panel
        quadrature_rel_tol: Relative tolerance of adaptive quadrature
        quadrature_abs_tol: Absolute tolerance floor of adaptive quadrature
        quadrature_max_depth: Maximum panel bisection depth
        linear_threshold: kappa * T below which the linear limit is used
        cross_check_rel_tol: Allowed relative gap between closed-form and
            integrated totals
        min_horizon: Smallest accepted execution horizon
    """

    model_config = ConfigDict(frozen=True)

    quadrature_nodes: int = Field(default=16, ge=2, le=128)
    quadrature_rel_tol: float = Field(default=1e-10, gt=0, lt=1)
    quadrature_abs_tol: float = Field(default=1e-14, ge=0)
    quadrature_max_depth: int = Field(default=40, ge=1, le=200)
    linear_threshold: float = Field(default=1e-8, gt=0)
    cross_check_rel_tol: float = Field(default=1e-6, gt=0, lt=1)
    min_horizon: float = Field(default=1e-9, gt=0)


DEFAULT_CONFIG = SolverConfig()
