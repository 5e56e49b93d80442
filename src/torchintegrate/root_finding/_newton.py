"""Newton polishing of many simple roots at once."""

from typing import Callable

import torch
from torch import Tensor

from ._convergence import check_convergence, default_tolerances


def newton_polish(
    evaluate: Callable[[Tensor], tuple[Tensor, Tensor]],
    x0: Tensor,
    *,
    lower: Tensor | float | None = None,
    upper: Tensor | float | None = None,
    xtol: float | None = None,
    rtol: float | None = None,
    maxiter: int = 10,
) -> tuple[Tensor, Tensor]:
    """
    Polish root estimates of f(x) = 0 with safeguarded Newton steps.

    Every element of ``x0`` is an independent problem, so all roots are
    refined simultaneously and converged elements are frozen. This is the
    refinement stage shared by all Gauss node generators: each family only
    supplies its own polynomial evaluation and its own seeds.

    Parameters
    ----------
    evaluate : Callable[[Tensor], tuple[Tensor, Tensor]]
        Vectorized function returning ``(f(x), f'(x))`` for a tensor ``x``.
    x0 : Tensor
        Seeds, any shape. They should already be close to distinct simple
        roots; this routine does not search for roots.
    lower, upper : Tensor or float, optional
        Bracket for the roots. A Newton step leaving the bracket is replaced
        by a bisection step towards the violated bound.
    xtol : float, optional
        Absolute tolerance on the Newton correction.
        Default: dtype-aware (see :func:`default_tolerances`).
    rtol : float, optional
        Relative tolerance on the Newton correction.
        Default: dtype-aware.
    maxiter : int, default=10
        Iteration budget. Non-converged elements are reported, never retried.

    Returns
    -------
    tuple[Tensor, Tensor]
        - **root** -- Polished roots with the shape of ``x0``.
        - **converged** -- Boolean tensor, False where the budget ran out.

    Examples
    --------
    >>> evaluate = lambda x: (x**2 - 2, 2 * x)
    >>> root, converged = newton_polish(evaluate, torch.tensor([1.4, -1.4]))
    >>> [f"{v:.6f}" for v in root.tolist()]
    ['1.414214', '-1.414214']
    """
    orig_shape = x0.shape

    if x0.numel() == 0:
        return x0.clone(), torch.ones(
            orig_shape, dtype=torch.bool, device=x0.device
        )

    x = x0.flatten().clone()

    dtype = x.dtype
    defaults = default_tolerances(dtype)
    if xtol is None:
        xtol = defaults["xtol"]
    if rtol is None:
        rtol = defaults["rtol"]

    if lower is not None:
        lower = torch.as_tensor(lower, dtype=dtype, device=x.device)
        lower = lower.expand(orig_shape).flatten()
    if upper is not None:
        upper = torch.as_tensor(upper, dtype=dtype, device=x.device)
        upper = upper.expand(orig_shape).flatten()

    converged = torch.zeros(x.shape, dtype=torch.bool, device=x.device)

    # Smallest positive normal, substituted for a zero derivative
    eps = torch.finfo(dtype).tiny

    for _ in range(maxiter):
        fx, dfx = evaluate(x)

        safe_dfx = torch.where(dfx == 0, eps, dfx)
        step = fx / safe_dfx
        x_new = x - step

        if lower is not None:
            x_new = torch.where(x_new <= lower, (x + lower) / 2, x_new)
        if upper is not None:
            x_new = torch.where(x_new >= upper, (x + upper) / 2, x_new)

        newly_converged = check_convergence(x - x_new, x_new, fx, xtol, rtol)
        newly_converged = newly_converged & torch.isfinite(x_new)
        newly_converged = newly_converged & ~converged

        x = torch.where(converged, x, x_new)
        converged = converged | newly_converged

        if torch.all(converged):
            break

    return x.reshape(orig_shape), converged.reshape(orig_shape)
