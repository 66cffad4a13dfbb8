"""Analytics module: scalar functions and execution optimization."""

from execpath.analytics.functions import ScalarFunction
from execpath.analytics.optimization import (
    ContinuousAlmgrenChriss,
    ExecutionTrajectory,
    TrajectoryResult,
    calibrate_impact_parameters,
    solve_continuous_trajectory,
    efficient_frontier,
)

__all__ = [
    # Functions
    "ScalarFunction",
    # Optimization - Almgren-Chriss
    "ContinuousAlmgrenChriss",
    "ExecutionTrajectory",
    "TrajectoryResult",
    "calibrate_impact_parameters",
    "solve_continuous_trajectory",
    # Optimization - Frontier
    "efficient_frontier",
]
