"""Exceptions for quadrature integration."""

from torchintegrate.root_finding import RootFindingError


class QuadratureWarning(UserWarning):
    """Warning for quadrature issues (e.g., forced acceptance, underflow)."""

    pass


class IntegrationError(Exception):
    """Base class for every error raised by the quadrature routines."""

    pass


class InvalidInterval(IntegrationError, ValueError):
    """Raised when the integration limits do not satisfy ``a < b``."""

    pass


class InvalidOrder(IntegrationError, ValueError):
    """Raised when a rule order or step count is smaller than one."""

    pass


class InvalidTolerance(InvalidOrder):
    """Raised when a tolerance or a minimum step size is not positive."""

    pass


class RootFindingFailed(IntegrationError, RootFindingError):
    """Raised when a Gauss node did not converge within its iteration budget.

    Attributes
    ----------
    family : str
        Quadrature family whose nodes were being computed.
    index : int
        One-based index (in ascending node order) of the first node that
        failed to converge.
    """

    def __init__(self, family: str, index: int):
        self.family = family
        self.index = index
        super().__init__(
            f"{family} node {index} did not converge within the iteration budget"
        )


class ToleranceNotMet(IntegrationError):
    """Raised when a structural work bound is exhausted before the tolerance.

    Attributes
    ----------
    estimate : float or None
        Best estimate available when the work bound was exhausted.
    error : float or None
        Error estimate associated with ``estimate``.
    """

    def __init__(
        self,
        message: str,
        estimate: float | None = None,
        error: float | None = None,
    ):
        self.estimate = estimate
        self.error = error
        super().__init__(message)


class ConvergenceNotReached(ToleranceNotMet):
    """Raised when Romberg's table runs out of rows before converging."""

    pass
