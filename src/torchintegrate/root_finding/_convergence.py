"""Convergence utilities for root polishing."""

import torch
from torch import Tensor


def default_tolerances(dtype: torch.dtype) -> dict[str, float]:
    """Return dtype-appropriate default tolerances for polishing roots.

    Parameters
    ----------
    dtype : torch.dtype
        The tensor dtype.

    Returns
    -------
    dict[str, float]
        Dictionary with keys 'xtol' and 'rtol'.
    """
    if dtype in (torch.float16, torch.bfloat16):
        return {"xtol": 1e-3, "rtol": 1e-3}
    elif dtype == torch.float32:
        return {"xtol": 1e-7, "rtol": 1e-6}
    else:  # float64 and others
        return {"xtol": 1e-14, "rtol": 1e-12}


def check_convergence(
    step: Tensor,
    x_new: Tensor,
    f_value: Tensor,
    xtol: float,
    rtol: float,
) -> Tensor:
    """Check convergence of a Newton correction for each element.

    An element has converged when EITHER:
    - |step| <= xtol + rtol * |x_new| (correction below resolution)
    - f_value == 0 (landed exactly on the root)

    Parameters
    ----------
    step : Tensor
        Newton correction that produced ``x_new``.
    x_new : Tensor
        Corrected root estimates.
    f_value : Tensor
        Function values at the estimates the step was computed from.
    xtol : float
        Absolute tolerance on the correction.
    rtol : float
        Relative tolerance on the correction.

    Returns
    -------
    Tensor
        Boolean mask where True indicates convergence.
    """
    small_step = torch.abs(step) <= xtol + rtol * torch.abs(x_new)
    return small_step | (f_value == 0)
