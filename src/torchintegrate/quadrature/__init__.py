"""
Numerical integration (quadrature) module.

Newton-Cotes rules (evaluate callable on a uniform grid):
    rectangle_rule, trapezoidal_rule, simpson_rule, newton_rule

Gaussian quadrature (evaluate callable at Gauss nodes):
    gauss_legendre_rule, gauss_laguerre_rule, gauss_hermite_rule,
    gauss_chebyshev_first_rule, gauss_chebyshev_second_rule

Adaptive and extrapolated integration:
    adaptive_simpson_method, adaptive_simpson_info,
    romberg_method, romberg_info, romberg_rows

Quadrature rule classes:
    GaussLegendre, GaussLaguerre, GaussHermite, GaussChebyshev

Node/weight computation for Gaussian quadrature:
    gauss_nodes_weights, gauss_legendre_nodes_weights,
    gauss_laguerre_nodes_weights, gauss_hermite_nodes_weights,
    gauss_chebyshev_nodes_weights, QuadratureFamily, NodeCache

Reductions:
    pairwise_sum

Exceptions:
    IntegrationError, InvalidInterval, InvalidOrder, InvalidTolerance,
    RootFindingFailed, ToleranceNotMet, ConvergenceNotReached,
    QuadratureWarning
"""

from torchintegrate.quadrature._adaptive_simpson import (
    adaptive_simpson_info,
    adaptive_simpson_method,
)
from torchintegrate.quadrature._cache import NodeCache
from torchintegrate.quadrature._exceptions import (
    ConvergenceNotReached,
    IntegrationError,
    InvalidInterval,
    InvalidOrder,
    InvalidTolerance,
    QuadratureWarning,
    RootFindingFailed,
    ToleranceNotMet,
)
from torchintegrate.quadrature._gauss import (
    gauss_chebyshev_first_rule,
    gauss_chebyshev_second_rule,
    gauss_hermite_rule,
    gauss_laguerre_rule,
    gauss_legendre_rule,
)
from torchintegrate.quadrature._newton_cotes import (
    newton_rule,
    rectangle_rule,
    simpson_rule,
    trapezoidal_rule,
)
from torchintegrate.quadrature._nodes import (
    QuadratureFamily,
    gauss_chebyshev_nodes_weights,
    gauss_hermite_nodes_weights,
    gauss_laguerre_nodes_weights,
    gauss_legendre_nodes_weights,
    gauss_nodes_weights,
)
from torchintegrate.quadrature._reduction import pairwise_sum
from torchintegrate.quadrature._romberg import (
    romberg_info,
    romberg_method,
    romberg_rows,
)
from torchintegrate.quadrature._rules import (
    GaussChebyshev,
    GaussHermite,
    GaussLaguerre,
    GaussLegendre,
)

__all__ = [
    # Newton-Cotes
    "rectangle_rule",
    "trapezoidal_rule",
    "simpson_rule",
    "newton_rule",
    # Gaussian
    "gauss_legendre_rule",
    "gauss_laguerre_rule",
    "gauss_hermite_rule",
    "gauss_chebyshev_first_rule",
    "gauss_chebyshev_second_rule",
    # Adaptive and extrapolated
    "adaptive_simpson_method",
    "adaptive_simpson_info",
    "romberg_method",
    "romberg_info",
    "romberg_rows",
    # Rule classes
    "GaussLegendre",
    "GaussLaguerre",
    "GaussHermite",
    "GaussChebyshev",
    # Node/weight computation
    "gauss_nodes_weights",
    "gauss_legendre_nodes_weights",
    "gauss_laguerre_nodes_weights",
    "gauss_hermite_nodes_weights",
    "gauss_chebyshev_nodes_weights",
    "QuadratureFamily",
    "NodeCache",
    # Reductions
    "pairwise_sum",
    # Exceptions
    "IntegrationError",
    "InvalidInterval",
    "InvalidOrder",
    "InvalidTolerance",
    "RootFindingFailed",
    "ToleranceNotMet",
    "ConvergenceNotReached",
    "QuadratureWarning",
]
