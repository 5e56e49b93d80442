"""Deterministic weighted reductions over integrand samples."""

from typing import Callable

import torch
from torch import Tensor


def pairwise_sum(values: Tensor, dim: int = -1) -> Tensor:
    """
    Sum ``values`` along ``dim`` with a fixed pairwise (tree) reduction.

    Adjacent entries are added level by level until one remains. Every level
    is a single element-wise addition, so the result is bit-for-bit the same
    for a given length no matter how many threads PyTorch uses. The rounding
    error grows like O(log n) instead of O(n) for a sequential fold.

    Parameters
    ----------
    values : Tensor
        Values to sum.
    dim : int
        Dimension to reduce.

    Returns
    -------
    Tensor
        Sum with ``dim`` removed.

    Examples
    --------
    >>> pairwise_sum(torch.tensor([1.0, 2.0, 3.0, 4.0, 5.0]))
    tensor(15.)
    """
    values = torch.movedim(values, dim, -1)

    if values.shape[-1] == 0:
        return values.sum(dim=-1)

    while values.shape[-1] > 1:
        if values.shape[-1] % 2 == 1:
            # Carry the unpaired last entry to the next level unchanged
            head = values[..., :-1]
            values = torch.cat(
                [head[..., 0::2] + head[..., 1::2], values[..., -1:]],
                dim=-1,
            )
        else:
            values = values[..., 0::2] + values[..., 1::2]

    return values[..., 0]


def evaluate_integrand(f: Callable, x: Tensor) -> Tensor:
    """
    Evaluate ``f`` at all sample points in a single batched call.

    Scalar results (e.g. ``lambda x: 1.0``) are broadcast to the shape of
    ``x`` so constant integrands work without tensor arithmetic.

    Parameters
    ----------
    f : callable
        Element-wise integrand. It must be free of side effects: samples are
        evaluated together and the order of evaluation is unspecified.
    x : Tensor
        Sample points.

    Returns
    -------
    Tensor
        ``f(x)`` with the shape of ``x``.
    """
    values = f(x)

    if isinstance(values, Tensor):
        values = values.to(device=x.device)
    else:
        # Python scalars take the dtype of the samples, not torch's default
        values = torch.as_tensor(values, dtype=x.dtype, device=x.device)

    if not values.is_floating_point():
        values = values.to(x.dtype)

    if values.shape != x.shape:
        values = values.expand(x.shape)

    return values


def weighted_sum(f: Callable, nodes: Tensor, weights: Tensor) -> Tensor:
    """Return ``sum_i weights[i] * f(nodes[i])`` with a pairwise reduction."""
    return pairwise_sum(weights * evaluate_integrand(f, nodes))
