r"""Three-term recurrences for the classical orthogonal polynomials.

Each function evaluates the degree ``n`` polynomial together with the degree
``n - 1`` one at every point of ``x``; the pair is all that is needed for the
Newton correction and for the Christoffel weights of the Gauss rules.
"""

import math
from typing import Tuple

import torch
from torch import Tensor


def legendre_p_pair(n: int, x: Tensor) -> Tuple[Tensor, Tensor]:
    r"""
    Evaluate :math:`P_n(x)` and :math:`P_{n-1}(x)`.

    Uses :math:`(k+1) P_{k+1} = (2k+1) x P_k - k P_{k-1}` with
    :math:`P_0 = 1`, :math:`P_1 = x`.
    """
    previous = torch.ones_like(x)
    current = x.clone()

    for k in range(1, n):
        previous, current = current, ((2 * k + 1) * x * current - k * previous) / (
            k + 1
        )

    return current, previous


def legendre_p_derivative(
    n: int, x: Tensor, p_n: Tensor, p_n_minus_1: Tensor
) -> Tensor:
    r""":math:`P_n'(x) = n (x P_n - P_{n-1}) / (x^2 - 1)` for :math:`|x| < 1`."""
    return n * (x * p_n - p_n_minus_1) / (x * x - 1)


def laguerre_l_pair(n: int, x: Tensor) -> Tuple[Tensor, Tensor]:
    r"""
    Evaluate :math:`L_n(x)` and :math:`L_{n-1}(x)` (normalized, :math:`L_n(0) = 1`).

    Uses :math:`(k+1) L_{k+1} = (2k+1-x) L_k - k L_{k-1}` with
    :math:`L_0 = 1`, :math:`L_1 = 1 - x`.
    """
    previous = torch.ones_like(x)
    current = 1 - x

    for k in range(1, n):
        previous, current = current, (
            (2 * k + 1 - x) * current - k * previous
        ) / (k + 1)

    return current, previous


def laguerre_l_derivative(
    n: int, x: Tensor, l_n: Tensor, l_n_minus_1: Tensor
) -> Tensor:
    r""":math:`L_n'(x) = n (L_n - L_{n-1}) / x` for :math:`x > 0`."""
    return n * (l_n - l_n_minus_1) / x


def hermite_h_orthonormal_pair(n: int, x: Tensor) -> Tuple[Tensor, Tensor]:
    r"""
    Evaluate the orthonormal Hermite polynomials :math:`\tilde H_n, \tilde H_{n-1}`.

    :math:`\tilde H_k = H_k / \sqrt{2^k k! \sqrt{\pi}}`, so that
    :math:`\int \tilde H_j \tilde H_k e^{-x^2} dx = \delta_{jk}`. The
    normalization keeps the values bounded where the physicists' :math:`H_n`
    would overflow for large ``n``. Recurrence:

    .. math::

        \tilde H_{k+1} = \sqrt{2/(k+1)}\, x \tilde H_k
            - \sqrt{k/(k+1)}\, \tilde H_{k-1}
    """
    previous = torch.full_like(x, math.pi**-0.25)
    current = math.sqrt(2.0) * x * previous

    for k in range(1, n):
        previous, current = current, (
            math.sqrt(2.0 / (k + 1)) * x * current
            - math.sqrt(k / (k + 1)) * previous
        )

    return current, previous


def hermite_h_orthonormal_derivative(n: int, h_n_minus_1: Tensor) -> Tensor:
    r""":math:`\tilde H_n'(x) = \sqrt{2n}\, \tilde H_{n-1}(x)`."""
    return math.sqrt(2.0 * n) * h_n_minus_1
