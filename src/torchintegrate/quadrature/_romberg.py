"""Romberg integration by Richardson extrapolation of trapezoidal sums."""

import warnings
from typing import Callable, Iterator, Optional, Tuple, Union

import torch
from torch import Tensor

from ._exceptions import ConvergenceNotReached, QuadratureWarning
from ._reduction import evaluate_integrand, pairwise_sum
from ._validation import (
    check_interval,
    check_order,
    check_tolerance,
    infer_dtype_device,
)


def romberg_rows(
    f: Callable[[Tensor], Tensor],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
) -> Iterator[Tensor]:
    r"""
    Generate the rows of the Romberg table.

    Row ``i`` holds ``i + 1`` entries. Its first entry is the trapezoidal
    estimate with :math:`2^i` subintervals; the others are extrapolations

    .. math::

        T_{i,j} = T_{i,j-1} + \frac{T_{i,j-1} - T_{i-1,j-1}}{4^j - 1}

    Each new row evaluates ``f`` only at the :math:`2^{i-1}` new midpoints;
    the previous trapezoidal sum is reused. Only the previous row is kept,
    so the generator may be consumed for as many rows as wanted.

    Parameters
    ----------
    f : callable
        Integrand function.
    a, b : float or Tensor
        Integration bounds, ``a < b``.

    Returns
    -------
    iterator of Tensor
        Successive rows, shape (i + 1,).

    Raises
    ------
    InvalidInterval
        If the bounds are not finite or a >= b. Raised on the call, before
        the first row is requested.

    Examples
    --------
    >>> rows = romberg_rows(lambda x: x**2, 0.0, 1.0)
    >>> next(rows)
    tensor([0.5000], dtype=torch.float64)
    >>> next(rows)
    tensor([0.3750, 0.3333], dtype=torch.float64)
    """
    a_val, b_val = check_interval(a, b)
    dtype, device = infer_dtype_device(a, b)

    def generate():
        h = b_val - a_val
        ends = evaluate_integrand(
            f, torch.tensor([a_val, b_val], dtype=dtype, device=device)
        )
        trapezoid = h / 2 * (ends[0] + ends[1])
        row = trapezoid.reshape(1)
        yield row

        i = 1
        while True:
            h = h / 2
            k = torch.arange(2 ** (i - 1), dtype=dtype, device=device)
            midpoints = a_val + (2 * k + 1) * h
            trapezoid = trapezoid / 2 + h * pairwise_sum(
                evaluate_integrand(f, midpoints)
            )

            entries = [trapezoid]
            for j in range(1, i + 1):
                entries.append(
                    entries[j - 1] + (entries[j - 1] - row[j - 1]) / (4**j - 1)
                )

            row = torch.stack(entries)
            yield row
            i += 1

    return generate()


def _romberg(
    f: Callable[[Tensor], Tensor],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
    num_steps: int,
    tolerance: Optional[float],
) -> Tuple[Tensor, Tensor, dict]:
    num_steps = check_order(num_steps, "num_steps")
    if tolerance is not None:
        tolerance = check_tolerance(tolerance)

    rows = romberg_rows(f, a, b)

    previous = next(rows)
    result = previous[0]
    error = torch.full_like(result, float("inf"))
    converged = tolerance is None

    for i in range(1, num_steps):
        row = next(rows)
        result = row[i]
        error = (row[i] - previous[i - 1]).abs()
        previous = row

        if tolerance is not None and error < tolerance:
            converged = True
            break

    nrows = previous.numel()
    info = {
        "neval": 2 ** (nrows - 1) + 1,
        "nrows": nrows,
        "converged": converged,
    }

    return result, error, info


def romberg_method(
    f: Callable[[Tensor], Tensor],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
    num_steps: int,
    *,
    tolerance: Optional[float] = None,
) -> Tensor:
    r"""
    Compute a definite integral with Romberg's method.

    Parameters
    ----------
    f : callable
        Integrand function.
    a, b : float or Tensor
        Integration bounds, ``a < b``.
    num_steps : int
        Maximum number of table rows. Row ``num_steps - 1`` uses
        :math:`2^{num\_steps - 1}` subintervals.
    tolerance : float, optional
        Stop as soon as two consecutive diagonal entries differ by less than
        ``tolerance``. If omitted, all ``num_steps`` rows are built and the
        last diagonal entry is returned.

    Returns
    -------
    Tensor
        Integral approximation :math:`T_{i,i}`.

    Raises
    ------
    InvalidOrder
        If num_steps < 1.
    InvalidInterval
        If the bounds are not finite or a >= b.
    InvalidTolerance
        If tolerance is not positive.
    ConvergenceNotReached
        If ``tolerance`` is given and the rows run out before it is met. The
        last diagonal entry is available as ``estimate``.

    Examples
    --------
    >>> romberg_method(lambda x: x**2, 0.0, 1.0, 10)
    tensor(0.3333, dtype=torch.float64)
    """
    result, error, info = _romberg(f, a, b, num_steps, tolerance)

    if not info["converged"]:
        raise ConvergenceNotReached(
            f"Romberg table did not converge in {info['nrows']} rows. "
            f"Error estimate: {error.item():.2e}, tolerance: {tolerance:.2e}",
            estimate=result.item(),
            error=error.item(),
        )

    return result


def romberg_info(
    f: Callable[[Tensor], Tensor],
    a: Union[float, Tensor],
    b: Union[float, Tensor],
    num_steps: int,
    *,
    tolerance: Optional[float] = None,
) -> Tuple[Tensor, Tensor, dict]:
    """
    Like romberg_method, but returns error estimate and info dict.

    Returns
    -------
    result : Tensor
        Integral approximation.
    error : Tensor
        Difference of the last two diagonal entries (inf for a single row).
    info : dict
        Information dict with keys:
        - "neval": Number of function evaluations
        - "nrows": Number of table rows built
        - "converged": Whether tolerance was achieved (always True without
          a tolerance)
    """
    result, error, info = _romberg(f, a, b, num_steps, tolerance)

    if not info["converged"]:
        warnings.warn(
            f"Romberg table did not converge. Error: {error.item():.2e}",
            QuadratureWarning,
            stacklevel=2,
        )

    return result, error, info
