"""Node and weight computation for the Gauss quadrature families."""

import math
import warnings
from enum import Enum
from typing import Optional, Tuple

import torch
from torch import Tensor

from torchintegrate.root_finding import newton_polish

from ._bessel import bessel_j0_zero, bessel_j1_squared, horner
from ._exceptions import QuadratureWarning, RootFindingFailed
from ._orthogonal import (
    hermite_h_orthonormal_derivative,
    hermite_h_orthonormal_pair,
    laguerre_l_derivative,
    laguerre_l_pair,
    legendre_p_derivative,
    legendre_p_pair,
)
from ._validation import check_order


class QuadratureFamily(str, Enum):
    """Gauss quadrature families and their weight functions."""

    LEGENDRE = "legendre"
    LAGUERRE = "laguerre"
    HERMITE = "hermite"
    CHEBYSHEV_FIRST = "chebyshev_first"
    CHEBYSHEV_SECOND = "chebyshev_second"


# Above this order the asymptotic Legendre formula is used without polishing
_LEGENDRE_ASYMPTOTIC_THRESHOLD = 100

_NEWTON_MAXITER = 10

_SF1 = (
    -1.29052996274280508473467968379e-12,
    2.40724685864330121825976175184e-10,
    -3.13148654635992041468855740012e-8,
    0.275573168962061235623801563453e-5,
    -0.148809523713909147898955880165e-3,
    0.416666666665193394525296923981e-2,
    -0.416666666666662959639712457549e-1,
)

_SF2 = (
    2.20639421781871003734786884322e-9,
    -7.53036771373769326811030753538e-8,
    0.161969259453836261731700382098e-5,
    -0.253300326008232025914059965302e-4,
    0.282116886057560434805998583817e-3,
    -0.209022248387852902722635654229e-2,
    0.815972221772932265640401128517e-2,
)

_SF3 = (
    -2.97058225375526229899781956673e-8,
    5.55845330223796209655886325712e-7,
    -0.567797841356833081642185432056e-5,
    0.418498100329504574443885193835e-4,
    -0.251395293283965914823026348764e-3,
    0.128654198542845137196151147483e-2,
    -0.416012165620204364833694266818e-2,
)

_WSF1 = (
    -2.20902861044616638398573427475e-14,
    2.30365726860377376873232578871e-12,
    -1.75257700735423807659851042318e-10,
    1.03756066927916795821098009353e-8,
    -4.63968647553221331251529631098e-7,
    0.149644593625028648361395938176e-4,
    -0.326278659594412170300449074873e-3,
    0.436507936507598105249726413120e-2,
    -0.305555555555553028279487898503e-1,
    0.833333333333333302184063103900e-1,
)

_WSF2 = (
    3.63117412152654783455929483029e-12,
    7.67643545069893130779501844323e-11,
    -7.12912857233642220650643150625e-9,
    2.11483880685947151466370130277e-7,
    -0.381817918680045468483009307090e-5,
    0.465969530694968391417927388162e-4,
    -0.407297185611335764191683161117e-3,
    0.268959435694729660779984493795e-2,
    -0.111111111111214923138249347172e-1,
)

_WSF3 = (
    2.01826791256703301806643264922e-9,
    -4.38647122520206649251063212545e-8,
    5.08898347288671653137451093208e-7,
    -0.397933316519135275712977531366e-5,
    0.200559326396458326778521795392e-4,
    -0.422888059282921161626339411388e-4,
    -0.105646050254076140548678457002e-3,
    -0.947969308958577323145923317955e-4,
    0.656966489926484797412985260842e-2,
)


def _legendre_asymptotic(n: int, k: Tensor) -> Tuple[Tensor, Tensor]:
    # Node cos(theta_k) and weight for 1 <= k <= ceil(n / 2)
    w = 1.0 / (n + 0.5)
    nu = bessel_j0_zero(k)
    theta = w * nu
    x = theta * theta

    sf1 = horner(x, _SF1)
    sf2 = horner(x, _SF2)
    sf3 = horner(x, _SF3)
    wsf1 = horner(x, _WSF1)
    wsf2 = horner(x, _WSF2)
    wsf3 = horner(x, _WSF3)

    nu_over_sin = nu / torch.sin(theta)
    b_nu_over_sin = bessel_j1_squared(k) * nu_over_sin
    w_inv_sinc = w * w * nu_over_sin
    wis2 = w_inv_sinc * w_inv_sinc

    angle = w * (nu + theta * w_inv_sinc * (sf1 + wis2 * (sf2 + wis2 * sf3)))
    denominator = b_nu_over_sin * (
        1 + wis2 * (wsf1 + wis2 * (wsf2 + wis2 * wsf3))
    )

    return torch.cos(angle), 2.0 * w / denominator


def _mirror(n: int, nodes: Tensor, weights: Tensor) -> Tuple[Tensor, Tensor]:
    # nodes holds the non-negative half in ascending order, led by an exact
    # zero when n is odd
    if n % 2 == 1:
        left_nodes = -nodes[1:].flip(0)
        left_weights = weights[1:].flip(0)
    else:
        left_nodes = -nodes.flip(0)
        left_weights = weights.flip(0)

    return torch.cat([left_nodes, nodes]), torch.cat([left_weights, weights])


def _raise_on_failure(
    family: QuadratureFamily, n: int, converged: Tensor
) -> None:
    # converged covers the trailing converged.numel() nodes in ascending order
    if not torch.all(converged):
        first = int(torch.nonzero(~converged)[0, 0])
        raise RootFindingFailed(
            family.value, n - converged.numel() + first + 1
        )


def _warn_on_underflow(
    family: QuadratureFamily, n: int, weights: Tensor
) -> None:
    if not torch.all(torch.isfinite(weights) & (weights > 0)):
        warnings.warn(
            f"{family.value} weights underflow or are not finite for n={n}; "
            f"the rule loses accuracy at this order",
            QuadratureWarning,
            stacklevel=3,
        )


def gauss_legendre_nodes_weights(
    n: int,
    dtype: torch.dtype = torch.float64,
    device: Optional[torch.device] = None,
) -> Tuple[Tensor, Tensor]:
    r"""
    Compute Gauss-Legendre nodes and weights on [-1, 1].

    Every node is computed independently from an iteration-free asymptotic
    expansion in :math:`1 / (n + 1/2)` seeded by the zeros of the Bessel
    function :math:`J_0`. For ``n <= 100`` the expansion is followed by a few
    Newton corrections on :math:`P_n` and the weights are recomputed from

    .. math::

        w_i = \frac{2}{(1 - x_i^2) P_n'(x_i)^2}

    Parameters
    ----------
    n : int
        Number of quadrature points.
    dtype : torch.dtype
        Data type for output tensors.
    device : torch.device, optional
        Device for output tensors.

    Returns
    -------
    nodes : Tensor
        Quadrature nodes, shape (n,), sorted ascending.
    weights : Tensor
        Quadrature weights, shape (n,).

    Raises
    ------
    InvalidOrder
        If n < 1.
    RootFindingFailed
        If a Newton correction does not converge.

    Notes
    -----
    Gauss-Legendre quadrature is exact for polynomials of degree <= 2n-1.
    Only the non-negative half is computed; the negative half is its exact
    mirror image and the middle node of an odd rule is exactly zero.

    References
    ----------
    Bogaert, I. (2014). Iteration-free computation of Gauss-Legendre
    quadrature nodes and weights. SIAM J. Sci. Comput., 36(3), A1008-A1026.
    """
    n = check_order(n)

    k = torch.arange(
        (n + 1) // 2, 0, -1, dtype=torch.float64, device=device
    )
    nodes, weights = _legendre_asymptotic(n, k)

    if n % 2 == 1:
        nodes[0] = 0.0

    if n <= _LEGENDRE_ASYMPTOTIC_THRESHOLD:

        def evaluate(x):
            p, p_prev = legendre_p_pair(n, x)
            return p, legendre_p_derivative(n, x, p, p_prev)

        nodes, converged = newton_polish(
            evaluate, nodes, lower=0.0, upper=1.0, maxiter=_NEWTON_MAXITER
        )
        _raise_on_failure(QuadratureFamily.LEGENDRE, n, converged)

        p, p_prev = legendre_p_pair(n, nodes)
        dp = legendre_p_derivative(n, nodes, p, p_prev)
        weights = 2 / ((1 - nodes * nodes) * dp * dp)

    nodes, weights = _mirror(n, nodes, weights)
    weights = weights.to(dtype)

    _warn_on_underflow(QuadratureFamily.LEGENDRE, n, weights)

    return nodes.to(dtype), weights


def gauss_laguerre_nodes_weights(
    n: int,
    dtype: torch.dtype = torch.float64,
    device: Optional[torch.device] = None,
) -> Tuple[Tensor, Tensor]:
    r"""
    Compute Gauss-Laguerre nodes and weights.

    Integrates functions with weight w(x) = exp(-x) on [0, infinity):

    .. math::

        \int_0^{\infty} f(x) e^{-x} dx \approx \sum_{i=1}^{n} w_i f(x_i)

    Nodes are seeded by the eigenvalues of the Laguerre Jacobi matrix and
    refined by Newton's method on :math:`L_n` within a fixed iteration
    budget. Weights are :math:`w_i = x_i / (n^2 L_{n-1}(x_i)^2)`.

    Parameters
    ----------
    n : int
        Number of quadrature points.
    dtype : torch.dtype
        Data type for output tensors.
    device : torch.device, optional
        Device for output tensors.

    Returns
    -------
    nodes : Tensor
        Quadrature nodes, shape (n,), sorted ascending.
    weights : Tensor
        Quadrature weights, shape (n,).

    Raises
    ------
    InvalidOrder
        If n < 1.
    RootFindingFailed
        If a node does not converge within the iteration budget.

    Warns
    -----
    QuadratureWarning
        If the smallest weights underflow (roughly n > 180 in float64).
    """
    n = check_order(n)

    k = torch.arange(n, dtype=torch.float64, device=device)
    off_diag = torch.arange(1, n, dtype=torch.float64, device=device)
    T = (
        torch.diag(2 * k + 1)
        + torch.diag(off_diag, diagonal=1)
        + torch.diag(off_diag, diagonal=-1)
    )
    seeds = torch.linalg.eigvalsh(T)

    def evaluate(x):
        l_n, l_prev = laguerre_l_pair(n, x)
        return l_n, laguerre_l_derivative(n, x, l_n, l_prev)

    nodes, converged = newton_polish(
        evaluate, seeds, lower=0.0, maxiter=_NEWTON_MAXITER
    )
    _raise_on_failure(QuadratureFamily.LAGUERRE, n, converged)

    _, l_prev = laguerre_l_pair(n, nodes)
    weights = (nodes / (n * n * l_prev * l_prev)).to(dtype)

    _warn_on_underflow(QuadratureFamily.LAGUERRE, n, weights)

    return nodes.to(dtype), weights


def gauss_hermite_nodes_weights(
    n: int,
    dtype: torch.dtype = torch.float64,
    device: Optional[torch.device] = None,
) -> Tuple[Tensor, Tensor]:
    r"""
    Compute Gauss-Hermite nodes and weights for the physicists' convention.

    Integrates functions with weight w(x) = exp(-x^2) on (-infinity, infinity):

    .. math::

        \int_{-\infty}^{\infty} f(x) e^{-x^2} dx \approx \sum_{i=1}^{n} w_i f(x_i)

    Only the non-negative half of the nodes is seeded (from the Jacobi matrix
    spectrum) and refined with Newton's method on the orthonormal Hermite
    polynomial :math:`\tilde H_n`; the rule is completed by reflection.
    Weights are :math:`w_i = 1 / (n \tilde H_{n-1}(x_i)^2)`.

    Parameters
    ----------
    n : int
        Number of quadrature points.
    dtype : torch.dtype
        Data type for output tensors.
    device : torch.device, optional
        Device for output tensors.

    Returns
    -------
    nodes : Tensor
        Quadrature nodes, shape (n,), sorted ascending.
    weights : Tensor
        Quadrature weights, shape (n,).

    Raises
    ------
    InvalidOrder
        If n < 1.
    RootFindingFailed
        If a node does not converge within the iteration budget.
    """
    n = check_order(n)

    k = torch.arange(1, n, dtype=torch.float64, device=device)
    off_diag = torch.sqrt(k / 2)
    T = torch.diag(off_diag, diagonal=1) + torch.diag(off_diag, diagonal=-1)
    seeds = torch.linalg.eigvalsh(T)[n // 2 :].clone()

    if n % 2 == 1:
        seeds[0] = 0.0

    def evaluate(x):
        h_n, h_prev = hermite_h_orthonormal_pair(n, x)
        return h_n, hermite_h_orthonormal_derivative(n, h_prev)

    nodes, converged = newton_polish(
        evaluate, seeds, lower=0.0, maxiter=_NEWTON_MAXITER
    )
    _raise_on_failure(QuadratureFamily.HERMITE, n, converged)

    _, h_prev = hermite_h_orthonormal_pair(n, nodes)
    weights = 1 / (n * h_prev * h_prev)

    nodes, weights = _mirror(n, nodes, weights)
    weights = weights.to(dtype)

    _warn_on_underflow(QuadratureFamily.HERMITE, n, weights)

    return nodes.to(dtype), weights


def gauss_chebyshev_nodes_weights(
    n: int,
    kind: int = 1,
    dtype: torch.dtype = torch.float64,
    device: Optional[torch.device] = None,
) -> Tuple[Tensor, Tensor]:
    r"""
    Compute Gauss-Chebyshev nodes and weights on [-1, 1].

    The first kind integrates against :math:`(1 - x^2)^{-1/2}` with

    .. math::

        x_i = \cos\frac{(2i - 1)\pi}{2n}, \quad w_i = \frac{\pi}{n}

    and the second kind against :math:`(1 - x^2)^{1/2}` with

    .. math::

        x_i = \cos\frac{i\pi}{n + 1}, \quad
        w_i = \frac{\pi}{n + 1} \sin^2\frac{i\pi}{n + 1}

    Parameters
    ----------
    n : int
        Number of quadrature points.
    kind : int
        1 or 2.
    dtype : torch.dtype
        Data type for output tensors.
    device : torch.device, optional
        Device for output tensors.

    Returns
    -------
    nodes : Tensor
        Quadrature nodes, shape (n,), sorted ascending.
    weights : Tensor
        Quadrature weights, shape (n,).
    """
    n = check_order(n)

    if kind not in (1, 2):
        raise ValueError(f"kind must be 1 or 2, got {kind}")

    # i runs from the middle of the rule up to the largest node
    i = torch.arange((n + 1) // 2, 0, -1, dtype=torch.float64, device=device)

    if kind == 1:
        nodes = torch.cos((2 * i - 1) * math.pi / (2 * n))
        weights = torch.full_like(nodes, math.pi / n)
    else:
        angle = i * math.pi / (n + 1)
        nodes = torch.cos(angle)
        sin_sq = torch.sin(angle) ** 2
        if n % 2 == 1:
            sin_sq[0] = 1.0
        weights = math.pi / (n + 1) * sin_sq

    if n % 2 == 1:
        nodes[0] = 0.0

    nodes, weights = _mirror(n, nodes, weights)

    return nodes.to(dtype), weights.to(dtype)


def gauss_nodes_weights(
    family,
    n: int,
    *,
    dtype: torch.dtype = torch.float64,
    device: Optional[torch.device] = None,
) -> Tuple[Tensor, Tensor]:
    """
    Compute the nodes and weights of any supported Gauss family.

    Parameters
    ----------
    family : QuadratureFamily or str
        One of ``"legendre"``, ``"laguerre"``, ``"hermite"``,
        ``"chebyshev_first"``, ``"chebyshev_second"``.
    n : int
        Number of quadrature points.
    dtype : torch.dtype
        Data type for output tensors.
    device : torch.device, optional
        Device for output tensors.

    Returns
    -------
    nodes, weights : Tensor
        Shape (n,), nodes sorted ascending.

    Examples
    --------
    >>> nodes, weights = gauss_nodes_weights("legendre", 3)
    >>> weights.sum()
    tensor(2., dtype=torch.float64)
    """
    family = QuadratureFamily(family)

    if family is QuadratureFamily.LEGENDRE:
        return gauss_legendre_nodes_weights(n, dtype, device)
    elif family is QuadratureFamily.LAGUERRE:
        return gauss_laguerre_nodes_weights(n, dtype, device)
    elif family is QuadratureFamily.HERMITE:
        return gauss_hermite_nodes_weights(n, dtype, device)
    elif family is QuadratureFamily.CHEBYSHEV_FIRST:
        return gauss_chebyshev_nodes_weights(n, 1, dtype, device)
    else:
        return gauss_chebyshev_nodes_weights(n, 2, dtype, device)
