"""Argument checks shared by the quadrature routines.

All checks run before the integrand is evaluated.
"""

import math
import operator
from typing import Tuple, Union

import torch
from torch import Tensor

from torchintegrate.quadrature._exceptions import (
    InvalidInterval,
    InvalidOrder,
    InvalidTolerance,
)


def check_order(n, name: str = "n") -> int:
    """Return ``n`` as an int, raising InvalidOrder unless it is >= 1."""
    if isinstance(n, bool):
        raise InvalidOrder(f"{name} must be an integer, got {n!r}")

    try:
        n = operator.index(n)
    except TypeError:
        raise InvalidOrder(f"{name} must be an integer, got {n!r}") from None

    if n < 1:
        raise InvalidOrder(f"{name} must be at least 1, got {n}")

    return n


def check_interval(
    a: Union[float, Tensor],
    b: Union[float, Tensor],
) -> Tuple[float, float]:
    """Return the limits as floats, raising InvalidInterval unless a < b."""
    a_val = float(a)
    b_val = float(b)

    if not (math.isfinite(a_val) and math.isfinite(b_val)):
        raise InvalidInterval(
            f"integration limits must be finite, got a={a_val}, b={b_val}"
        )

    if not a_val < b_val:
        raise InvalidInterval(
            f"a must be strictly less than b, got a={a_val}, b={b_val}"
        )

    return a_val, b_val


def check_tolerance(value, name: str = "tolerance") -> float:
    value = float(value)

    if not value > 0:
        raise InvalidTolerance(f"{name} must be positive, got {value}")

    return value


def infer_dtype_device(
    a: Union[float, Tensor],
    b: Union[float, Tensor],
) -> Tuple[torch.dtype, torch.device]:
    """Pick dtype/device from tensor limits, defaulting to float64 on CPU."""
    if isinstance(a, Tensor) and a.is_floating_point():
        return a.dtype, a.device
    elif isinstance(b, Tensor) and b.is_floating_point():
        return b.dtype, b.device
    else:
        return torch.float64, torch.device("cpu")
