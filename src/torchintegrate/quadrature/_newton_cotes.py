"""Composite Newton-Cotes rules for a callable integrand."""

from typing import Callable, Sequence, Union

import torch
from torch import Tensor

from ._reduction import evaluate_integrand, pairwise_sum
from ._validation import check_interval, check_order, infer_dtype_device


def _composite(
    f: Callable[[Tensor], Tensor],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
    n: int,
    panel: Sequence[float],
    divisor: float,
) -> Tensor:
    n = check_order(n)
    a_val, b_val = check_interval(a, b)
    dtype, device = infer_dtype_device(a, b)

    # Each of the n subintervals carries len(panel) equally spaced points;
    # neighbouring subintervals share an endpoint
    m = len(panel) - 1
    x = torch.linspace(a_val, b_val, m * n + 1, dtype=dtype, device=device)

    coefficients = torch.tensor(panel, dtype=dtype, device=device)
    weights = torch.zeros(m * n + 1, dtype=dtype, device=device)
    weights[:-1] += coefficients[:-1].repeat(n)
    weights[m::m] += coefficients[-1]

    h = (b_val - a_val) / n

    return h / divisor * pairwise_sum(weights * evaluate_integrand(f, x))


def rectangle_rule(
    f: Callable[[Tensor], Tensor],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
    n: int,
) -> Tensor:
    r"""
    Composite midpoint (rectangle) rule.

    .. math::

        \int_a^b f(x) dx \approx h \sum_{i=0}^{n-1} f(a + (i + 1/2) h),
        \quad h = (b - a) / n

    Parameters
    ----------
    f : callable
        Integrand, evaluated once on a tensor of all sample points.
    a, b : float or Tensor
        Integration bounds, ``a < b``.
    n : int
        Number of subintervals.

    Returns
    -------
    Tensor
        Scalar integral approximation.

    Raises
    ------
    InvalidOrder
        If n < 1.
    InvalidInterval
        If the bounds are not finite or a >= b.

    Examples
    --------
    >>> rectangle_rule(lambda x: x, 0.0, 1.0, 4)
    tensor(0.5000, dtype=torch.float64)
    """
    n = check_order(n)
    a_val, b_val = check_interval(a, b)
    dtype, device = infer_dtype_device(a, b)

    h = (b_val - a_val) / n
    x = torch.linspace(
        a_val + h / 2, b_val - h / 2, n, dtype=dtype, device=device
    )

    return h * pairwise_sum(evaluate_integrand(f, x))


def trapezoidal_rule(
    f: Callable[[Tensor], Tensor],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
    n: int,
) -> Tensor:
    r"""
    Composite trapezoidal rule with ``n`` subintervals.

    .. math::

        \int_a^b f(x) dx \approx h \left[\frac{f_0}{2} + f_1 + \cdots
            + f_{n-1} + \frac{f_n}{2}\right]

    Exact for polynomials of degree <= 1. Arguments, return value and errors
    as for :func:`rectangle_rule`.
    """
    return _composite(f, a, b, n, (1.0, 1.0), 2.0)


def simpson_rule(
    f: Callable[[Tensor], Tensor],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
    n: int,
) -> Tensor:
    r"""
    Composite Simpson rule.

    Every one of the ``n`` subintervals of width :math:`h = (b - a) / n` is
    sampled at its endpoints and midpoint, giving ``2n + 1`` points with
    coefficients :math:`\frac{h}{6} [1, 4, 2, 4, \ldots, 2, 4, 1]`. Exact for
    polynomials of degree <= 3.

    Parameters
    ----------
    f : callable
        Integrand.
    a, b : float or Tensor
        Integration bounds.
    n : int
        Number of subintervals. Any ``n >= 1`` is accepted.

    Returns
    -------
    Tensor
        Scalar integral approximation.
    """
    return _composite(f, a, b, n, (1.0, 4.0, 1.0), 6.0)


def newton_rule(
    f: Callable[[Tensor], Tensor],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
    n: int,
) -> Tensor:
    r"""
    Composite Newton 3/8 rule.

    Every subinterval is split in thirds, giving ``3n + 1`` points with
    coefficients :math:`\frac{h}{8} [1, 3, 3, 2, 3, 3, 2, \ldots, 3, 3, 1]`.
    Exact for polynomials of degree <= 3.

    Examples
    --------
    >>> newton_rule(lambda x: x**2, 0.0, 1.0, 1000)
    tensor(0.3333, dtype=torch.float64)
    """
    return _composite(f, a, b, n, (1.0, 3.0, 3.0, 1.0), 8.0)
