"""Continuous-time Almgren-Chriss optimal execution.

This module implements the continuous-time Almgren-Chriss (2001) solution for
liquidating a single position under linear temporary impact and no drift.
The optimal trajectory minimizes:
    E[Cost] + lambda * Var[Cost]

Where:
    - lambda is risk aversion (0 = risk-neutral/linear, higher = more front-loaded)
    - Cost is the temporary impact cost eta * v(t)^2 accrued over [0, T]
    - Variance is the timing risk sigma^2 * x(t)^2 accrued over [0, T]

With kappa = sqrt(lambda * sigma^2 / eta) the solution is:
    holdings(t)   = X * sinh(kappa * (T - t)) / sinh(kappa * T)
    trade_rate(t) = kappa * X * cosh(kappa * (T - t)) / sinh(kappa * T)

Trajectory quantities are returned as ScalarFunction objects. The cumulative
cost expectation and variance are built by integrating their accrual rates,
and the closed-form totals are checked against the integrated values.

Key Classes:
    ContinuousAlmgrenChriss: Solver bound to a SolverConfig
    TrajectoryResult: Optimal trajectory functions and summary scalars
    ExecutionTrajectory: Discrete schedule sampled from a TrajectoryResult

Key Functions:
    solve_continuous_trajectory: Solve with the default configuration
    calibrate_impact_parameters: Derive linear impact parameters from market data
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from execpath.analytics.functions import ScalarFunction
from execpath.core.config import DEFAULT_CONFIG, SolverConfig
from execpath.core.exceptions import (
    FunctionError,
    InvalidParameters,
    NumericRangeError,
    UnsupportedImpactShape,
)
from execpath.core.models import ImpactParameters, OrderSpecification

logger = logging.getLogger(__name__)

STRATEGY_NAME = "almgren_chriss"

# Below this kappa * T the variance closed form is evaluated by its series
# 1/3 - 2z^2/45 + 2z^4/315 to avoid cancellation.
_VARIANCE_SERIES_CUTOFF = 1e-2


@dataclass(frozen=True)
class ExecutionTrajectory:
    """Discrete execution schedule sampled from a continuous trajectory.

    Attributes:
        timestamps: Time points 0 = t_0 < ... < t_n = T
        holdings: Remaining position at each time (starts at order size, ends at 0)
        trade_sizes: Size to execute in each interval (length = n)
        strategy_name: 'almgren_chriss'
        total_cost_estimate: Expected temporary impact cost (price units x size)
        risk_aversion: Lambda parameter
        params: Optional strategy-specific parameters (dict)
    """

    timestamps: np.ndarray
    holdings: np.ndarray
    trade_sizes: np.ndarray
    strategy_name: str
    total_cost_estimate: float
    risk_aversion: float
    params: Optional[dict] = None


@dataclass(frozen=True)
class TrajectoryResult:
    """Optimal continuous trajectory and its cost profile.

    All functions are defined on [0, horizon]. cost_expectation(t) and
    cost_variance(t) are the expected cost and variance still to accrue
    between t and the horizon.

    total_cost_expectation is the closed form eta * kappa * X^2 / tanh(kappa * T).
    On the optimal trajectory it equals E + lambda * V, because
    lambda * sigma^2 = eta * kappa^2. The pure expected impact cost E is
    expected_cost.

    Attributes:
        horizon: Execution deadline T
        total_cost_expectation: eta * kappa * X^2 * coth(kappa * T)
        characteristic_time: 1 / kappa (inf when kappa == 0)
        participation_metric: eta * X / (T * sigma * sqrt(T)), None if sigma == 0
        holdings: Remaining position x(t)
        trade_rate: Selling rate v(t) = -dx/dt
        cost_expectation: Remaining expected cost from t to T
        cost_variance: Remaining cost variance from t to T
        kappa: Characteristic decay rate
        risk_aversion: Lambda used for the solution
        start_holdings: X
        expected_cost: Integrated expected impact cost, cost_expectation(0)
        total_cost_variance: Integrated cost variance, cost_variance(0)
        regime: 'hyperbolic', 'linear' or 'trivial'
    """

    horizon: float
    total_cost_expectation: float
    characteristic_time: float
    participation_metric: Optional[float]
    holdings: ScalarFunction
    trade_rate: ScalarFunction
    cost_expectation: ScalarFunction
    cost_variance: ScalarFunction
    kappa: float
    risk_aversion: float
    start_holdings: float
    expected_cost: float
    total_cost_variance: float
    regime: str

    @property
    def objective(self) -> float:
        """Mean-variance objective E[cost] + lambda * Var[cost] from the integrals."""
        return self.expected_cost + self.risk_aversion * self.total_cost_variance

    def to_frame(self, num_points: int = 101) -> pd.DataFrame:
        """
        Sample every trajectory function on a uniform grid over [0, T].

        Args:
            num_points: Number of grid points including both ends (>= 2)

        Returns:
            DataFrame with columns time, holdings, trade_rate,
            cost_expectation, cost_variance
        """
        if num_points < 2:
            raise InvalidParameters(f"num_points must be >= 2, got {num_points}")

        times = np.linspace(0.0, self.horizon, num_points)
        rows = []
        for t in times:
            t = float(t)
            rows.append(
                {
                    "time": t,
                    "holdings": self.holdings(t),
                    "trade_rate": self.trade_rate(t),
                    "cost_expectation": self.cost_expectation(t),
                    "cost_variance": self.cost_variance(t),
                }
            )
        return pd.DataFrame(rows)

    def discretize(self, num_intervals: int) -> ExecutionTrajectory:
        """
        Sample holdings on num_intervals equal intervals.

        Trade sizes are the holdings differences, so they sum to the start
        holdings exactly up to rounding.

        Example:
            >>> result = solve_continuous_trajectory(order, impact, 1.0)
            >>> schedule = result.discretize(10)
            >>> print(schedule.trade_sizes[0] > schedule.trade_sizes[-1])
            True
        """
        if num_intervals < 1:
            raise InvalidParameters(f"num_intervals must be >= 1, got {num_intervals}")

        timestamps = np.linspace(0.0, self.horizon, num_intervals + 1)
        holdings = np.array([self.holdings(float(t)) for t in timestamps])
        trade_sizes = -np.diff(holdings)

        return ExecutionTrajectory(
            timestamps=timestamps,
            holdings=holdings,
            trade_sizes=trade_sizes,
            strategy_name=STRATEGY_NAME,
            total_cost_estimate=self.expected_cost,
            risk_aversion=self.risk_aversion,
            params={
                "kappa": self.kappa,
                "regime": self.regime,
                "cost_variance": self.total_cost_variance,
            },
        )


@dataclass(frozen=True)
class _HyperbolicProfile:
    """sinh/cosh trajectory in overflow-free exponential form.

    sinh(k(T-t)) / sinh(kT) = exp(-kt) * (1 - exp(-2k(T-t))) / (1 - exp(-2kT))
    """

    kappa: float
    start_holdings: float
    horizon: float

    @property
    def denominator(self) -> float:
        return -math.expm1(-2.0 * self.kappa * self.horizon)

    def holdings(self, t: float) -> float:
        decay = math.exp(-self.kappa * t)
        remaining = -math.expm1(-2.0 * self.kappa * (self.horizon - t))
        return self.start_holdings * decay * remaining / self.denominator

    def trade_rate(self, t: float) -> float:
        decay = math.exp(-self.kappa * t)
        remaining = 1.0 + math.exp(-2.0 * self.kappa * (self.horizon - t))
        return self.kappa * self.start_holdings * decay * remaining / self.denominator

    def expected_cost(self, eta: float) -> float:
        # eta * (kX / sinh(z))^2 * (T/2 + sinh(2z) / (4k)) with the exp(2z) factor cancelled
        z = self.kappa * self.horizon
        numerator = 2.0 * self.horizon * math.exp(-2.0 * z) - math.expm1(-4.0 * z) / (2.0 * self.kappa)
        return eta * (self.kappa * self.start_holdings) ** 2 * numerator / self.denominator**2

    def cost_variance(self, sigma: float) -> float:
        z = self.kappa * self.horizon
        scale = sigma**2 * self.start_holdings**2
        if z < _VARIANCE_SERIES_CUTOFF:
            z2 = z * z
            return scale * self.horizon * (1.0 / 3.0 - 2.0 * z2 / 45.0 + 2.0 * z2 * z2 / 315.0)
        # (sinh(2z) / (4k) - T/2) / sinh(z)^2 with the exp(2z) factor cancelled
        numerator = -math.expm1(-4.0 * z) / (2.0 * self.kappa) - 2.0 * self.horizon * math.exp(-2.0 * z)
        return scale * numerator / self.denominator**2

    def total_cost_expectation(self, eta: float, risk_aversion: float, sigma: float) -> float:
        return eta * self.kappa * self.start_holdings**2 / math.tanh(self.kappa * self.horizon)


@dataclass(frozen=True)
class _LinearProfile:
    """Uniform liquidation, the kappa -> 0 limit."""

    start_holdings: float
    horizon: float

    def holdings(self, t: float) -> float:
        return self.start_holdings * (1.0 - t / self.horizon)

    def trade_rate(self, t: float) -> float:
        return self.start_holdings / self.horizon

    def expected_cost(self, eta: float) -> float:
        return eta * self.start_holdings**2 / self.horizon

    def cost_variance(self, sigma: float) -> float:
        return sigma**2 * self.start_holdings**2 * self.horizon / 3.0

    def total_cost_expectation(self, eta: float, risk_aversion: float, sigma: float) -> float:
        # kappa -> 0 limit of eta * kappa * X^2 * coth(kappa * T)
        return self.expected_cost(eta) + risk_aversion * self.cost_variance(sigma)


def _require_finite(name: str, value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidParameters(f"{name} must be a real number, got {value!r}") from e
    if not math.isfinite(value):
        raise InvalidParameters(f"{name} must be finite, got {value!r}")
    return value


class ContinuousAlmgrenChriss:
    """
    Closed-form continuous Almgren-Chriss solver.

    The solver is stateless apart from its configuration, so one instance
    can serve concurrent callers.

    Example:
        >>> solver = ContinuousAlmgrenChriss()
        >>> result = solver.solve(
        ...     OrderSpecification(start_holdings=1_000_000, horizon=1.0),
        ...     ImpactParameters.linear(slope=0.01, volatility=0.3),
        ...     risk_aversion=1.0,
        ... )
        >>> print(f"E[cost]={result.expected_cost:.2f}")
    """

    def __init__(self, config: Optional[SolverConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def solve(
        self,
        order: OrderSpecification,
        impact: ImpactParameters,
        risk_aversion: float,
    ) -> TrajectoryResult:
        """
        Solve for the optimal trajectory and its cost functions.

        Args:
            order: Start holdings X and horizon T
            impact: Linear temporary impact slope eta and epoch volatility sigma
            risk_aversion: Lambda >= 0

        Returns:
            TrajectoryResult with holdings, trade rate, remaining cost
            expectation and variance functions plus summary scalars

        Raises:
            UnsupportedImpactShape: If the temporary impact is not linear
            InvalidParameters: If eta <= 0, T <= 0 (or below min_horizon),
                sigma < 0, lambda < 0, or any input is not finite
            NumericRangeError: If a closed-form total is not finite, or it
                disagrees with its integrated counterpart
        """
        if not impact.is_linear:
            temporary = impact.temporary_impact
            raise UnsupportedImpactShape(str(temporary.shape.value), temporary.effective_exponent)

        X = _require_finite("start_holdings", order.start_holdings)
        T = _require_finite("horizon", order.horizon)
        eta = _require_finite("temporary_slope", impact.temporary_slope)
        sigma = _require_finite("epoch_volatility", impact.epoch_volatility)
        lam = _require_finite("risk_aversion", risk_aversion)

        if T <= 0:
            raise InvalidParameters(f"horizon must be > 0, got {T}")
        if T < self.config.min_horizon:
            raise InvalidParameters(
                f"horizon {T} is below min_horizon {self.config.min_horizon}: "
                "trade rate is unbounded for near-instantaneous liquidation"
            )
        if eta <= 0:
            raise InvalidParameters(f"temporary_slope must be > 0, got {eta}")
        if sigma < 0:
            raise InvalidParameters(f"epoch_volatility must be >= 0, got {sigma}")
        if lam < 0:
            raise InvalidParameters(f"risk_aversion must be >= 0, got {lam}")

        kappa = math.sqrt(lam * sigma * sigma / eta)
        if not math.isfinite(kappa):
            raise NumericRangeError(f"kappa overflowed for lambda={lam}, sigma={sigma}, eta={eta}")

        if X == 0:
            regime = "trivial"
            profile = _LinearProfile(start_holdings=0.0, horizon=T)
        elif kappa * T < self.config.linear_threshold:
            regime = "linear"
            profile = _LinearProfile(start_holdings=X, horizon=T)
            if lam > 0:
                logger.warning(
                    f"kappa*T={kappa * T:.3e} below {self.config.linear_threshold:.1e}: "
                    "using linear liquidation limit"
                )
        else:
            regime = "hyperbolic"
            profile = _HyperbolicProfile(kappa=kappa, start_holdings=X, horizon=T)

        logger.debug(f"Solving Almgren-Chriss: X={X}, T={T}, eta={eta}, sigma={sigma}, "
                     f"lambda={lam}, kappa={kappa}, regime={regime}")

        config = self.config
        holdings = ScalarFunction(profile.holdings, name="holdings", config=config)
        trade_rate = ScalarFunction(profile.trade_rate, name="trade_rate", config=config)

        cost_expectation_rate = trade_rate.map(
            lambda t, v: eta * v * v, name="cost_expectation_rate"
        )
        cost_expectation = cost_expectation_rate.tail_integral(T, name="cost_expectation")

        cost_variance_rate = holdings.map(
            lambda t, x: sigma * sigma * x * x, name="cost_variance_rate"
        )
        cost_variance = cost_variance_rate.tail_integral(T, name="cost_variance")

        try:
            expected_cost = profile.expected_cost(eta)
            variance = profile.cost_variance(sigma)
            total_cost_expectation = profile.total_cost_expectation(eta, lam, sigma)
        except OverflowError as e:
            logger.error(f"Closed-form totals overflowed: {e}")
            raise NumericRangeError(f"Closed-form totals overflowed for X={X}, T={T}: {e}") from e
        self._check_finite("expected_cost", expected_cost)
        self._check_finite("cost_variance", variance)
        self._check_finite("total_cost_expectation", total_cost_expectation)

        try:
            initial_rate = trade_rate(0.0)
            integrated_expectation = cost_expectation(0.0)
            integrated_variance = cost_variance(0.0)
        except FunctionError as e:
            logger.error(f"Trajectory evaluation failed: {e}")
            raise NumericRangeError(f"Trajectory is not finite on [0, {T}]: {e}") from e

        logger.debug(f"Initial trade rate {initial_rate}")
        self._cross_check("expected cost", expected_cost, integrated_expectation)
        self._cross_check("cost variance", variance, integrated_variance)
        # eta * kappa * X^2 * coth(kappa * T) = E + lambda * V on the optimal path
        self._cross_check(
            "total cost expectation",
            total_cost_expectation,
            integrated_expectation + lam * integrated_variance,
        )

        characteristic_time = 1.0 / kappa if kappa > 0 else math.inf

        if sigma > 0:
            participation_metric = eta * X / (T * sigma * math.sqrt(T))
        else:
            participation_metric = None
            logger.warning("epoch_volatility is 0: participation metric is undefined")

        return TrajectoryResult(
            horizon=T,
            total_cost_expectation=total_cost_expectation,
            characteristic_time=characteristic_time,
            participation_metric=participation_metric,
            holdings=holdings,
            trade_rate=trade_rate,
            cost_expectation=cost_expectation,
            cost_variance=cost_variance,
            kappa=kappa,
            risk_aversion=lam,
            start_holdings=X,
            expected_cost=integrated_expectation,
            total_cost_variance=integrated_variance,
            regime=regime,
        )

    @staticmethod
    def _check_finite(name: str, value: float) -> None:
        if not math.isfinite(value):
            logger.error(f"{name} is not finite: {value}")
            raise NumericRangeError(f"{name} is not finite: {value}")

    def _cross_check(self, name: str, closed_form: float, integrated: float) -> None:
        """Closed-form and integrated totals must agree to cross_check_rel_tol."""
        if math.isclose(closed_form, integrated, rel_tol=self.config.cross_check_rel_tol):
            return
        logger.error(
            f"Closed-form {name} {closed_form!r} disagrees with integrated value {integrated!r}"
        )
        raise NumericRangeError(
            f"Closed-form {name} {closed_form!r} disagrees with integrated value "
            f"{integrated!r} beyond relative tolerance {self.config.cross_check_rel_tol}"
        )


def solve_continuous_trajectory(
    order: OrderSpecification,
    impact: ImpactParameters,
    risk_aversion: float,
    config: Optional[SolverConfig] = None,
) -> TrajectoryResult:
    """
    Solve the continuous Almgren-Chriss problem.

    Convenience wrapper around ContinuousAlmgrenChriss(config).solve().

    Example:
        >>> result = solve_continuous_trajectory(
        ...     OrderSpecification(start_holdings=5000, horizon=1.0),
        ...     ImpactParameters.linear(slope=0.04, volatility=0.025),
        ...     risk_aversion=1e-5,
        ... )
        >>> print(f"half-life: {result.characteristic_time:.2f}")
    """
    return ContinuousAlmgrenChriss(config).solve(order, impact, risk_aversion)


def calibrate_impact_parameters(
    daily_volume: float,
    daily_spread: float,
    daily_volatility: float,
    price: float,
) -> ImpactParameters:
    """
    Calibrate linear temporary impact parameters from market data.

    Uses the standard A-C heuristic that trading 1% of daily volume costs
    the full spread in temporary impact:
        eta = spread / (0.01 * daily_volume)
        sigma = daily_volatility * price

    Args:
        daily_volume: Average daily trading volume (in shares/contracts)
        daily_spread: Average bid-ask spread in price units (e.g., $0.02)
        daily_volatility: Daily volatility as decimal (e.g., 0.05 for 5%)
        price: Current asset price (used for absolute volatility)

    Returns:
        ImpactParameters with linear temporary impact

    Raises:
        InvalidParameters: If any input is out of range

    Example:
        >>> impact = calibrate_impact_parameters(
        ...     daily_volume=50000,
        ...     daily_spread=0.02,
        ...     daily_volatility=0.05,
        ...     price=0.50,
        ... )
        >>> print(f"eta={impact.temporary_slope:.6f}")
        eta=0.000040
    """
    if not daily_volume > 0:
        raise InvalidParameters(f"Invalid daily_volume ({daily_volume}): must be > 0")
    if not daily_spread > 0:
        raise InvalidParameters(f"Invalid daily_spread ({daily_spread}): must be > 0")
    if not daily_volatility >= 0:
        raise InvalidParameters(f"Invalid daily_volatility ({daily_volatility}): must be >= 0")
    if not price > 0:
        raise InvalidParameters(f"Invalid price ({price}): must be > 0")

    # Temporary impact: 1% ADV causes temp impact of full spread
    eta = daily_spread / (0.01 * daily_volume)

    # Volatility in absolute price units (not percentage)
    sigma = daily_volatility * price

    return ImpactParameters.linear(slope=eta, volatility=sigma)
