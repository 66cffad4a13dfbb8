"""Scalar real functions with checked evaluation and adaptive quadrature.

A ScalarFunction wraps a plain callable R -> R and adds:
    - Argument validation (non-finite inputs raise InvalidArgument)
    - Result validation (non-finite outputs raise EvaluationError)
    - Definite integration by adaptive Gauss-Legendre quadrature

Functions compose lazily: a derived function holds its sources and only
evaluates or integrates them when it is itself queried. This lets trajectory
quantities be chained (holdings -> trade rate -> cost rate -> cumulative cost)
without precomputing anything on a grid.

Key Classes:
    ScalarFunction: Immutable R -> R function object

Quadrature:
    Each panel is integrated with an n-point Gauss-Legendre rule and compared
    against the sum of its two halves. Panels that disagree by more than
    max(abs_tol, rel_tol * |estimate|) are bisected, up to a maximum depth.
    The default relative tolerance is 1e-10 (see SolverConfig).
"""

import math
import numbers
from functools import lru_cache
from typing import Callable, Optional, Tuple

import numpy as np

from execpath.core.config import DEFAULT_CONFIG, SolverConfig
from execpath.core.exceptions import (
    EvaluationError,
    FunctionError,
    IntegrationError,
    InvalidArgument,
)


@lru_cache(maxsize=32)
def _gauss_legendre(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """Nodes and weights of the n-point Gauss-Legendre rule on [-1, 1]."""
    nodes, weights = np.polynomial.legendre.leggauss(n)
    nodes.setflags(write=False)
    weights.setflags(write=False)
    return nodes, weights


def _is_finite_number(x) -> bool:
    return isinstance(x, numbers.Real) and math.isfinite(x)


class ScalarFunction:
    """Immutable real-valued function of one real variable.

    Attributes:
        name: Label used in error messages
        config: Quadrature settings used by integrate()

    Example:
        >>> square = ScalarFunction(lambda x: x * x, name="square")
        >>> square(3.0)
        9.0
        >>> round(square.integrate(0.0, 3.0), 10)
        9.0
    """

    __slots__ = ("_fn", "_name", "_config")

    def __init__(
        self,
        fn: Callable[[float], float],
        name: str = "function",
        config: Optional[SolverConfig] = None,
    ):
        object.__setattr__(self, "_fn", fn)
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_config", config or DEFAULT_CONFIG)

    def __setattr__(self, key, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self) -> str:
        return f"ScalarFunction(name={self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> SolverConfig:
        return self._config

    @classmethod
    def constant(
        cls, value: float, name: str = "constant", config: Optional[SolverConfig] = None
    ) -> "ScalarFunction":
        """Function returning the same value everywhere."""
        value = float(value)
        return cls(lambda x: value, name=name, config=config)

    @classmethod
    def zero(cls, name: str = "zero", config: Optional[SolverConfig] = None) -> "ScalarFunction":
        """Identically zero function."""
        return cls.constant(0.0, name=name, config=config)

    def evaluate(self, x: float) -> float:
        """
        Evaluate the function at x.

        Args:
            x: Point of evaluation

        Returns:
            Function value as float

        Raises:
            InvalidArgument: If x is not a finite real number
            EvaluationError: If the result is not finite, the computation
                is undefined at x (ArithmeticError or ValueError), or a
                source function of a derived function failed
        """
        if not _is_finite_number(x):
            raise InvalidArgument(self._name, x)

        x = float(x)
        try:
            value = self._fn(x)
        except FunctionError as e:
            raise EvaluationError(self._name, x, str(e)) from e
        except (ArithmeticError, ValueError) as e:
            raise EvaluationError(self._name, x, f"{type(e).__name__}: {e}") from e

        if not _is_finite_number(value):
            raise EvaluationError(self._name, x, f"non-finite result {value!r}")

        return float(value)

    __call__ = evaluate

    def integrate(self, a: float, b: float) -> float:
        """
        Definite integral over [a, b] by adaptive Gauss-Legendre quadrature.

        If a > b the result is -integrate(b, a).

        Args:
            a: Lower bound
            b: Upper bound

        Returns:
            Integral estimate, accurate to config.quadrature_rel_tol relative

        Raises:
            InvalidArgument: If either bound is not a finite real number
            IntegrationError: If any sampled evaluation fails, or the
                quadrature does not converge within the maximum depth
        """
        if not _is_finite_number(a):
            raise InvalidArgument(self._name, a)
        if not _is_finite_number(b):
            raise InvalidArgument(self._name, b)

        a = float(a)
        b = float(b)
        if a == b:
            return 0.0
        if a > b:
            return -self._integrate_ordered(b, a)
        return self._integrate_ordered(a, b)

    def _integrate_ordered(self, a: float, b: float) -> float:
        config = self._config
        nodes, weights = _gauss_legendre(config.quadrature_nodes)

        total = 0.0
        # (lower, upper, estimate, depth)
        stack = [(a, b, self._panel(a, b, nodes, weights, a, b), 0)]

        while stack:
            lo, hi, whole, depth = stack.pop()
            mid = 0.5 * (lo + hi)
            left = self._panel(lo, mid, nodes, weights, a, b)
            right = self._panel(mid, hi, nodes, weights, a, b)
            refined = left + right

            tolerance = max(config.quadrature_abs_tol, config.quadrature_rel_tol * abs(refined))
            if abs(refined - whole) <= tolerance or mid in (lo, hi):
                total += refined
                continue

            if depth + 1 >= config.quadrature_max_depth:
                raise IntegrationError(
                    self._name,
                    a,
                    b,
                    reason=f"no convergence on [{lo!r}, {hi!r}] at depth {depth + 1}",
                )

            stack.append((lo, mid, left, depth + 1))
            stack.append((mid, hi, right, depth + 1))

        if not math.isfinite(total):
            raise IntegrationError(self._name, a, b, reason=f"non-finite result {total!r}")

        return total

    def _panel(
        self,
        lo: float,
        hi: float,
        nodes: np.ndarray,
        weights: np.ndarray,
        a: float,
        b: float,
    ) -> float:
        """Gauss-Legendre estimate over a single panel."""
        half = 0.5 * (hi - lo)
        center = 0.5 * (hi + lo)
        acc = 0.0
        for node, weight in zip(nodes, weights):
            x = center + half * float(node)
            try:
                acc += float(weight) * self.evaluate(x)
            except FunctionError as e:
                raise IntegrationError(self._name, a, b, x=x, reason=str(e)) from e
        return half * acc

    def derivative(self, x: float, step: Optional[float] = None) -> float:
        """
        First derivative at x by central finite difference.

        Args:
            x: Point of evaluation
            step: Difference step (default 1e-6 * max(1, |x|))

        Returns:
            Derivative estimate
        """
        if not _is_finite_number(x):
            raise InvalidArgument(self._name, x)
        if step is None:
            step = 1e-6 * max(1.0, abs(x))
        return (self.evaluate(x + step) - self.evaluate(x - step)) / (2.0 * step)

    def map(
        self, transform: Callable[[float, float], float], name: Optional[str] = None
    ) -> "ScalarFunction":
        """
        Derived function x -> transform(x, self(x)).

        The source is evaluated lazily, once per query of the derived function.
        """
        source = self

        def derived(x: float) -> float:
            return transform(x, source.evaluate(x))

        return ScalarFunction(derived, name=name or f"{self._name}:map", config=self._config)

    def tail_integral(self, upper: float, name: Optional[str] = None) -> "ScalarFunction":
        """
        Derived function t -> integral of self over [t, upper].

        Example:
            >>> rate = ScalarFunction(lambda t: 2.0)
            >>> remaining = rate.tail_integral(5.0)
            >>> round(remaining(1.0), 10)
            8.0
        """
        if not _is_finite_number(upper):
            raise InvalidArgument(self._name, upper)

        source = self
        upper = float(upper)

        def derived(t: float) -> float:
            return source.integrate(t, upper)

        return ScalarFunction(
            derived, name=name or f"{self._name}:tail_integral", config=self._config
        )
