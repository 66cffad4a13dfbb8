"""Efficient frontier of continuous Almgren-Chriss trajectories.

Sweeping risk aversion traces the mean-variance efficient frontier: each
lambda gives the trajectory with the lowest expected cost for its level of
cost variance. Low lambda trades close to linearly (cheap but risky), high
lambda front-loads (expensive but safe).

Key Functions:
    efficient_frontier: Solve once per lambda and tabulate the trade-off
"""

import math
from typing import Iterable, Optional

import pandas as pd

from execpath.analytics.optimization.almgren_chriss import ContinuousAlmgrenChriss
from execpath.core.config import SolverConfig
from execpath.core.models import ImpactParameters, OrderSpecification


def efficient_frontier(
    order: OrderSpecification,
    impact: ImpactParameters,
    risk_aversions: Iterable[float],
    config: Optional[SolverConfig] = None,
) -> pd.DataFrame:
    """
    Tabulate expected cost against cost variance across risk aversions.

    Args:
        order: Start holdings and horizon
        impact: Linear impact parameters
        risk_aversions: Lambda values to solve for
        config: Optional solver configuration

    Returns:
        DataFrame sorted by risk_aversion with columns:
        - risk_aversion: Lambda
        - kappa: Characteristic decay rate
        - characteristic_time: 1 / kappa
        - cost_expectation: Expected impact cost E
        - cost_variance: Cost variance V
        - cost_std: sqrt(cost_variance)
        - objective: cost_expectation + lambda * cost_variance
        - regime: Solver regime used

    Raises:
        ValueError: If no risk aversions are given
        SolverError: If any lambda cannot be solved

    Example:
        >>> frontier = efficient_frontier(order, impact, [0.0, 1e-6, 1e-4, 1e-2])
        >>> print(frontier[["risk_aversion", "cost_expectation", "cost_std"]])
    """
    lambdas = sorted(float(lam) for lam in risk_aversions)
    if not lambdas:
        raise ValueError("At least 1 risk aversion required for frontier")

    solver = ContinuousAlmgrenChriss(config)
    rows = []

    for lam in lambdas:
        result = solver.solve(order, impact, lam)
        rows.append(
            {
                "risk_aversion": lam,
                "kappa": result.kappa,
                "characteristic_time": result.characteristic_time,
                "cost_expectation": result.expected_cost,
                "cost_variance": result.total_cost_variance,
                "cost_std": math.sqrt(result.total_cost_variance),
                "objective": result.objective,
                "regime": result.regime,
            }
        )

    return pd.DataFrame(rows)
