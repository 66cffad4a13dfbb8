"""Exception hierarchy for execpath.

All failures are terminal for the call that raised them: the solver and the
function objects never return NaN or None in place of an error.
"""

from typing import Optional


class ExecpathError(Exception):
    """Base class for all execpath errors."""


class SolverError(ExecpathError):
    """Raised when a trajectory cannot be computed."""


class InvalidParameters(SolverError, ValueError):
    """Order, impact or risk-aversion inputs are malformed or out of domain."""


class UnsupportedImpactShape(SolverError):
    """The temporary impact function is not linear."""

    def __init__(self, shape: str, exponent: float):
        self.shape = shape
        self.exponent = exponent
        super().__init__(
            f"Temporary impact shape '{shape}' (exponent {exponent}) is not supported: "
            "only linear temporary impact has a closed-form solution"
        )


class NumericRangeError(SolverError, ArithmeticError):
    """Overflow, underflow or a failed closed-form cross-check."""


class FunctionError(ExecpathError):
    """Base class for scalar function failures."""


class InvalidArgument(FunctionError, ValueError):
    """A function was queried at a non-finite point."""

    def __init__(self, name: str, x):
        self.name = name
        self.x = x
        super().__init__(f"{name}: invalid argument {x!r}")


class EvaluationError(FunctionError):
    """A function produced a non-finite value, or a source function failed."""

    def __init__(self, name: str, x: float, reason: Optional[str] = None):
        self.name = name
        self.x = x
        self.reason = reason
        message = f"{name}: evaluation failed at x={x!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class IntegrationError(FunctionError):
    """Quadrature failed over [a, b]."""

    def __init__(
        self,
        name: str,
        a: float,
        b: float,
        x: Optional[float] = None,
        reason: Optional[str] = None,
    ):
        self.name = name
        self.a = a
        self.b = b
        self.x = x
        self.reason = reason
        message = f"{name}: integration over [{a!r}, {b!r}] failed"
        if x is not None:
            message += f" at x={x!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
