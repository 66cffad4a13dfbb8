"""Unit tests for ScalarFunction evaluation and quadrature."""

import math
from concurrent.futures import ThreadPoolExecutor

import pytest

from execpath.analytics.functions import ScalarFunction
from execpath.core.config import SolverConfig
from execpath.core.exceptions import (
    EvaluationError,
    FunctionError,
    IntegrationError,
    InvalidArgument,
)


class TestEvaluate:
    """Tests for ScalarFunction.evaluate."""

    def test_evaluate_basic(self):
        """Test evaluating a simple function."""
        square = ScalarFunction(lambda x: x * x, name="square")
        assert square.evaluate(3.0) == 9.0

    def test_call_is_evaluate(self):
        """Test that calling the function evaluates it."""
        square = ScalarFunction(lambda x: x * x)
        assert square(-2.0) == 4.0

    def test_evaluate_accepts_int(self):
        """Test that integer arguments are accepted and converted."""
        f = ScalarFunction(lambda x: x / 2)
        assert f(3) == 1.5

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), -float("inf"), None, "1.0"])
    def test_evaluate_invalid_argument(self, bad):
        """Test that non-finite or non-numeric arguments raise InvalidArgument."""
        f = ScalarFunction(lambda x: x, name="identity")
        with pytest.raises(InvalidArgument) as exc_info:
            f.evaluate(bad)
        assert exc_info.value.name == "identity"

    def test_invalid_argument_is_value_error(self):
        """Test that InvalidArgument can be caught as ValueError."""
        f = ScalarFunction(lambda x: x)
        with pytest.raises(ValueError):
            f(float("nan"))

    def test_evaluate_nan_result(self):
        """Test that a NaN result raises EvaluationError with the input attached."""
        f = ScalarFunction(lambda x: float("nan"), name="broken")
        with pytest.raises(EvaluationError) as exc_info:
            f(1.5)
        assert exc_info.value.x == 1.5
        assert "broken" in str(exc_info.value)

    def test_evaluate_division_by_zero(self):
        """Test that ZeroDivisionError becomes EvaluationError."""
        f = ScalarFunction(lambda x: 1.0 / x)
        with pytest.raises(EvaluationError):
            f(0.0)

    def test_evaluate_overflow(self):
        """Test that OverflowError becomes EvaluationError."""
        f = ScalarFunction(math.exp)
        with pytest.raises(EvaluationError):
            f(1000.0)

    def test_evaluate_domain_error(self):
        """Test that a math domain ValueError becomes EvaluationError."""
        f = ScalarFunction(math.log, name="log")
        with pytest.raises(EvaluationError) as exc_info:
            f(-1.0)
        assert exc_info.value.x == -1.0
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert "ValueError" in str(exc_info.value)

    def test_evaluate_infinite_result(self):
        """Test that an infinite result raises EvaluationError."""
        f = ScalarFunction(lambda x: x * 1e308 * 10)
        with pytest.raises(EvaluationError):
            f(1.0)

    def test_derived_function_propagates_failure(self):
        """Test that a failing source surfaces through a derived function."""
        source = ScalarFunction(lambda x: float("nan"), name="source")
        derived = source.map(lambda x, y: 2 * y, name="derived")
        with pytest.raises(EvaluationError) as exc_info:
            derived(1.0)
        assert exc_info.value.name == "derived"
        assert isinstance(exc_info.value.__cause__, EvaluationError)

    def test_non_library_exceptions_propagate(self):
        """Test that unrelated exceptions are not converted."""

        def fn(x):
            raise KeyError("missing")

        f = ScalarFunction(fn)
        with pytest.raises(KeyError):
            f(1.0)


class TestIntegrate:
    """Tests for ScalarFunction.integrate."""

    def test_integrate_polynomial(self):
        """Test integrating x^3 over [0, 2]."""
        f = ScalarFunction(lambda x: x**3)
        assert f.integrate(0.0, 2.0) == pytest.approx(4.0, rel=1e-12)

    def test_integrate_exponential(self):
        """Test integrating exp over [0, 1]."""
        f = ScalarFunction(math.exp)
        assert f.integrate(0.0, 1.0) == pytest.approx(math.e - 1.0, rel=1e-10)

    def test_integrate_sine(self):
        """Test integrating sin over [0, pi]."""
        f = ScalarFunction(math.sin)
        assert f.integrate(0.0, math.pi) == pytest.approx(2.0, rel=1e-10)

    def test_integrate_sharp_decay(self):
        """Test integrating a sharply decaying exponential."""
        k = 500.0
        f = ScalarFunction(lambda x: math.exp(-k * x))
        expected = -math.expm1(-k * 2.0) / k
        assert f.integrate(0.0, 2.0) == pytest.approx(expected, rel=1e-8)

    def test_integrate_reversed_bounds(self):
        """Test that integrate(b, a) == -integrate(a, b)."""
        f = ScalarFunction(lambda x: x * x + 1.0)
        forward = f.integrate(0.5, 3.0)
        backward = f.integrate(3.0, 0.5)
        assert backward == pytest.approx(-forward, rel=1e-14)

    def test_integrate_empty_interval(self):
        """Test that an empty interval integrates to exactly zero."""
        f = ScalarFunction(lambda x: 1.0 / (x - 1.0))
        assert f.integrate(2.0, 2.0) == 0.0

    def test_integrate_invalid_bound(self):
        """Test that non-finite bounds raise InvalidArgument."""
        f = ScalarFunction(lambda x: x)
        with pytest.raises(InvalidArgument):
            f.integrate(0.0, float("inf"))
        with pytest.raises(InvalidArgument):
            f.integrate(float("nan"), 1.0)

    def test_integrate_failed_sample(self):
        """Test that a failing sample raises IntegrationError with context."""
        f = ScalarFunction(lambda x: 1.0 if x < 0.5 else float("nan"), name="half")
        with pytest.raises(IntegrationError) as exc_info:
            f.integrate(0.0, 1.0)
        error = exc_info.value
        assert error.a == 0.0
        assert error.b == 1.0
        assert error.x >= 0.5
        assert isinstance(error, FunctionError)

    def test_integrate_domain_error_sample(self):
        """Test that a domain error at a sample point raises IntegrationError."""
        f = ScalarFunction(math.sqrt, name="sqrt")
        with pytest.raises(IntegrationError) as exc_info:
            f.integrate(-1.0, 1.0)
        assert exc_info.value.x < 0

    def test_integrate_no_convergence(self):
        """Test that exhausting the depth limit raises IntegrationError."""
        config = SolverConfig(quadrature_max_depth=1)
        f = ScalarFunction(lambda x: abs(x - 0.3), config=config)
        with pytest.raises(IntegrationError):
            f.integrate(0.0, 1.0)

    def test_integrate_kink_with_default_depth(self):
        """Test that adaptive refinement handles a kink."""
        f = ScalarFunction(lambda x: abs(x - 0.3))
        expected = 0.5 * 0.3**2 + 0.5 * 0.7**2
        assert f.integrate(0.0, 1.0) == pytest.approx(expected, rel=1e-8)

    def test_integrate_with_custom_nodes(self):
        """Test that a low-order rule is exact for low-degree polynomials."""
        config = SolverConfig(quadrature_nodes=4)
        f = ScalarFunction(lambda x: x**5, config=config)
        assert f.integrate(0.0, 1.0) == pytest.approx(1.0 / 6.0, rel=1e-12)


class TestDerivedFunctions:
    """Tests for derivative, map and tail_integral."""

    def test_derivative(self):
        """Test central finite difference of x^2."""
        f = ScalarFunction(lambda x: x * x)
        assert f.derivative(3.0) == pytest.approx(6.0, rel=1e-6)

    def test_derivative_custom_step(self):
        """Test derivative of sin with an explicit step."""
        f = ScalarFunction(math.sin)
        assert f.derivative(0.0, step=1e-5) == pytest.approx(1.0, rel=1e-8)

    def test_map(self):
        """Test that map builds x -> transform(x, f(x))."""
        f = ScalarFunction(lambda x: x + 1.0)
        g = f.map(lambda x, y: x * y)
        assert g(2.0) == 6.0
        assert g.name == "function:map"

    def test_map_is_lazy(self):
        """Test that the source is only evaluated when the derived function is."""
        calls = []

        def source_fn(x):
            calls.append(x)
            return x

        f = ScalarFunction(source_fn)
        g = f.map(lambda x, y: 2 * y)
        assert calls == []
        g(1.0)
        assert calls == [1.0]

    def test_tail_integral(self):
        """Test remaining integral to an upper bound."""
        rate = ScalarFunction.constant(2.0)
        remaining = rate.tail_integral(5.0)
        assert remaining(1.0) == pytest.approx(8.0)
        assert remaining(5.0) == 0.0

    def test_tail_integral_wraps_integration_failure(self):
        """Test that a failed inner integration surfaces as EvaluationError."""
        rate = ScalarFunction(lambda x: float("nan"), name="rate")
        remaining = rate.tail_integral(1.0, name="remaining")
        with pytest.raises(EvaluationError) as exc_info:
            remaining(0.0)
        assert isinstance(exc_info.value.__cause__, IntegrationError)

    def test_constant_and_zero(self):
        """Test constant function factories."""
        assert ScalarFunction.constant(3.5)(100.0) == 3.5
        zero = ScalarFunction.zero()
        assert zero(-4.0) == 0.0
        assert zero.integrate(0.0, 10.0) == 0.0


class TestImmutability:
    """Tests for ScalarFunction immutability and thread safety."""

    def test_cannot_reassign_attributes(self):
        """Test that attributes cannot be changed after construction."""
        f = ScalarFunction(lambda x: x)
        with pytest.raises(AttributeError):
            f._fn = lambda x: 2 * x
        with pytest.raises(AttributeError):
            f.extra = 1

    def test_concurrent_integration(self):
        """Test that concurrent integrations agree with a sequential one."""
        f = ScalarFunction(lambda x: math.exp(-3.0 * x) * math.cos(x))
        expected = f.integrate(0.0, 2.0)

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: f.integrate(0.0, 2.0), range(16)))

        assert all(r == expected for r in results)
