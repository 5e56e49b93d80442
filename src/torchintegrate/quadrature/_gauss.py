"""Gauss quadrature drivers for a callable integrand."""

from typing import Callable, Optional, Union

from torch import Tensor

from ._cache import NodeCache
from ._rules import GaussChebyshev, GaussHermite, GaussLaguerre, GaussLegendre


def gauss_legendre_rule(
    f: Callable[[Tensor], Tensor],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
    n: int,
    *,
    cache: Optional[NodeCache] = None,
) -> Tensor:
    r"""
    Integrate ``f`` over [a, b] with the ``n``-point Gauss-Legendre rule.

    .. math::

        \int_a^b f(x) dx \approx \frac{b - a}{2} \sum_{i=1}^n w_i
            f\left(\frac{b - a}{2} x_i + \frac{a + b}{2}\right)

    Parameters
    ----------
    f : callable
        Integrand, evaluated once on a tensor of all ``n`` nodes.
    a, b : float or Tensor
        Integration bounds, ``a < b``. Tensor bounds set dtype and device.
    n : int
        Number of quadrature points.
    cache : NodeCache, optional
        Node cache to reuse across calls.

    Returns
    -------
    Tensor
        Scalar integral approximation, exact for polynomials of degree
        <= 2n - 1.

    Raises
    ------
    InvalidOrder
        If n < 1.
    InvalidInterval
        If the bounds are not finite or a >= b.

    Examples
    --------
    >>> gauss_legendre_rule(lambda x: x**9, -1.0, 1.0, 5)
    tensor(0., dtype=torch.float64)
    """
    return GaussLegendre(n, cache=cache).integrate(f, a, b)


def gauss_laguerre_rule(
    f: Callable[[Tensor], Tensor],
    n: int,
    *,
    cache: Optional[NodeCache] = None,
) -> Tensor:
    r"""
    Approximate :math:`\int_0^\infty f(x) e^{-x} dx` with ``n`` points.

    Raises
    ------
    InvalidOrder
        If n < 1.
    RootFindingFailed
        If a node does not converge.

    Examples
    --------
    >>> gauss_laguerre_rule(lambda x: 1.0, 100)
    tensor(1.0000, dtype=torch.float64)
    """
    return GaussLaguerre(n, cache=cache).integrate(f)


def gauss_hermite_rule(
    f: Callable[[Tensor], Tensor],
    n: int,
    *,
    cache: Optional[NodeCache] = None,
) -> Tensor:
    r"""
    Approximate :math:`\int_{-\infty}^\infty f(x) e^{-x^2} dx` with ``n``
    points.
    """
    return GaussHermite(n, cache=cache).integrate(f)


def gauss_chebyshev_first_rule(
    f: Callable[[Tensor], Tensor],
    n: int,
    *,
    cache: Optional[NodeCache] = None,
) -> Tensor:
    r"""
    Approximate :math:`\int_{-1}^1 f(x) / \sqrt{1 - x^2} dx` with ``n``
    points.
    """
    return GaussChebyshev(n, 1, cache=cache).integrate(f)


def gauss_chebyshev_second_rule(
    f: Callable[[Tensor], Tensor],
    n: int,
    *,
    cache: Optional[NodeCache] = None,
) -> Tensor:
    r"""
    Approximate :math:`\int_{-1}^1 f(x) \sqrt{1 - x^2} dx` with ``n`` points.
    """
    return GaussChebyshev(n, 2, cache=cache).integrate(f)
