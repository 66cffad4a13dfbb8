"""Closed-form Almgren-Chriss optimal execution trajectories."""

from execpath.analytics import (
    ContinuousAlmgrenChriss,
    ExecutionTrajectory,
    ScalarFunction,
    TrajectoryResult,
    calibrate_impact_parameters,
    efficient_frontier,
    solve_continuous_trajectory,
)
from execpath.core.config import SolverConfig
from execpath.core.exceptions import (
    EvaluationError,
    ExecpathError,
    FunctionError,
    IntegrationError,
    InvalidArgument,
    InvalidParameters,
    NumericRangeError,
    SolverError,
    UnsupportedImpactShape,
)
from execpath.core.models import (
    ImpactParameters,
    ImpactShape,
    OrderSpecification,
    TemporaryImpact,
)

__version__ = "0.1.0"

__all__ = [
    "ContinuousAlmgrenChriss",
    "ExecutionTrajectory",
    "ScalarFunction",
    "TrajectoryResult",
    "calibrate_impact_parameters",
    "efficient_frontier",
    "solve_continuous_trajectory",
    "SolverConfig",
    "ImpactParameters",
    "ImpactShape",
    "OrderSpecification",
    "TemporaryImpact",
    "ExecpathError",
    "SolverError",
    "InvalidParameters",
    "UnsupportedImpactShape",
    "NumericRangeError",
    "FunctionError",
    "InvalidArgument",
    "EvaluationError",
    "IntegrationError",
]
