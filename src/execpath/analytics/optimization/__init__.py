"""Optimization module for optimal execution trajectories."""

from execpath.analytics.optimization.almgren_chriss import (
    ContinuousAlmgrenChriss,
    ExecutionTrajectory,
    TrajectoryResult,
    calibrate_impact_parameters,
    solve_continuous_trajectory,
)
from execpath.analytics.optimization.frontier import efficient_frontier

__all__ = [
    # Almgren-Chriss
    "ContinuousAlmgrenChriss",
    "ExecutionTrajectory",
    "TrajectoryResult",
    "calibrate_impact_parameters",
    "solve_continuous_trajectory",
    # Frontier
    "efficient_frontier",
]
